"""Southeast Michigan native status."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from florasynth.domain.synthesis.contracts import ColumnSpec, ModuleDescriptor

from .botanical_name import MODULE_ID as BOTANICAL_NAME
from .prompting import ask

if TYPE_CHECKING:
    from collections.abc import Mapping

    from florasynth.domain.ports import StructuredInference
    from florasynth.domain.types import ColumnValues, EntityKey

MODULE_ID = "native-checker"

SE_MICHIGAN_COUNTIES = ("Wayne", "Oakland", "Macomb", "Washtenaw", "Livingston")

SYSTEM_PROMPT = (
    "You are a botanist specializing in the flora of the Great Lakes region, "
    "specifically Southeast Michigan."
)

PROMPT_TEMPLATE = """Is "{binomial}" native to Southeast Michigan?

Southeast Michigan covers {counties} and the surrounding counties.

Respond with a JSON object with this structure:
{{
  "isNative": true or false,
  "status": "native" | "introduced",
  "notes": "brief notes on the plant's status in Southeast Michigan, optional"
}}"""


class NativeStatusReply(BaseModel):
    model_config = ConfigDict(extra="ignore")

    is_native: bool = Field(validation_alias=AliasChoices("isNative", "is_native"))
    status: str | None = None
    notes: str | None = None


class NativeStatusModule:
    def __init__(self, inference: StructuredInference) -> None:
        self._inference = inference
        self._descriptor = ModuleDescriptor(
            id=MODULE_ID,
            display_name="Native Status Checker",
            columns=(
                ColumnSpec(
                    column_id="seMiNative",
                    header="SE MI Native",
                    source_label="Claude API",
                    algorithm_description=(
                        "Yes when the model judges the species indigenous to Southeast "
                        f"Michigan ({', '.join(SE_MICHIGAN_COUNTIES)} counties), otherwise No."
                    ),
                ),
                ColumnSpec(
                    column_id="nativeCheckNotes",
                    header="Native Check Notes",
                    source_label="Claude API",
                    algorithm_description="Brief notes returned with the native status.",
                ),
            ),
            dependencies=frozenset({BOTANICAL_NAME}),
            description="Determines whether the species is native to Southeast Michigan.",
        )

    @property
    def descriptor(self) -> ModuleDescriptor:
        return self._descriptor

    def run(self, entity: EntityKey, prior_results: Mapping[str, ColumnValues]) -> ColumnValues:
        reply = ask(
            self._inference,
            NativeStatusReply,
            system=SYSTEM_PROMPT,
            prompt=PROMPT_TEMPLATE.format(
                binomial=entity.binomial,
                counties=", ".join(SE_MICHIGAN_COUNTIES),
            ),
        )
        return {"seMiNative": reply.is_native, "nativeCheckNotes": reply.notes or ""}
