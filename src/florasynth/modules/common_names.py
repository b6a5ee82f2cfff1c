"""Vernacular names used around Southeast Michigan."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from florasynth.domain.synthesis.contracts import ColumnSpec, ModuleDescriptor

from .botanical_name import MODULE_ID as BOTANICAL_NAME
from .prompting import ask

if TYPE_CHECKING:
    from collections.abc import Mapping

    from florasynth.domain.ports import StructuredInference
    from florasynth.domain.types import ColumnValues, EntityKey

MODULE_ID = "common-names"

SYSTEM_PROMPT = (
    "You are a botanist specializing in the flora of Southeast Michigan and the "
    "Great Lakes area."
)

PROMPT_TEMPLATE = """List every common (vernacular) name used for "{binomial}" in Southeast \
Michigan, the adjacent states (Ohio, Indiana, Illinois, Wisconsin) and southern Ontario.

Respond with a JSON object with this structure:
{{"names": ["most common name", "next name", "..."]}}

Guidelines:
- Include widely used names and regional variants, most common first.
- Do not include botanical synonyms, varieties, subspecies or cultivar names.
- Return an empty list when the plant has no common name in use."""


class CommonNamesReply(BaseModel):
    model_config = ConfigDict(extra="ignore")

    names: list[str] = Field(default_factory=list[str])

    def distinct_names(self) -> list[str]:
        seen: set[str] = set()
        names: list[str] = []
        for name in self.names:
            cleaned = name.strip()
            if cleaned and cleaned.casefold() not in seen:
                seen.add(cleaned.casefold())
                names.append(cleaned)
        return names


class CommonNamesModule:
    def __init__(self, inference: StructuredInference) -> None:
        self._inference = inference
        self._descriptor = ModuleDescriptor(
            id=MODULE_ID,
            display_name="Common Names",
            columns=(
                ColumnSpec(
                    column_id="commonNames",
                    header="Common Names",
                    source_label="Claude API",
                    algorithm_description=(
                        "Comma separated vernacular names used in Southeast Michigan and "
                        "adjacent regions, most common first."
                    ),
                ),
            ),
            dependencies=frozenset({BOTANICAL_NAME}),
            description="Identifies the common names used in the region.",
        )

    @property
    def descriptor(self) -> ModuleDescriptor:
        return self._descriptor

    def run(self, entity: EntityKey, prior_results: Mapping[str, ColumnValues]) -> ColumnValues:
        reply = ask(
            self._inference,
            CommonNamesReply,
            system=SYSTEM_PROMPT,
            prompt=PROMPT_TEMPLATE.format(binomial=entity.binomial),
        )
        return {"commonNames": ", ".join(reply.distinct_names())}
