"""Binomial validation; every other module depends on it."""

from __future__ import annotations

from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from florasynth.domain.errors import ModuleFailure
from florasynth.domain.synthesis.contracts import ColumnSpec, ModuleDescriptor

from .prompting import ask

if TYPE_CHECKING:
    from collections.abc import Mapping

    from florasynth.domain.ports import StructuredInference
    from florasynth.domain.types import ColumnValues, EntityKey

log = getLogger(__name__)

MODULE_ID = "botanical-name"

SYSTEM_PROMPT = "You are a botanical nomenclature expert."

PROMPT_TEMPLATE = """Validate the botanical name "{binomial}" and report its current
taxonomic status.

Respond with a JSON object with this structure:
{{
  "valid": true or false,
  "status": "current" | "updated" | "likely_misspelled" | "invalid",
  "error": "explanation if the name is not current, otherwise null",
  "currentName": "accepted name if status is updated, otherwise the input",
  "suggestedName": "corrected spelling if status is likely_misspelled, otherwise null",
  "family": "family of the (suggested) name",
  "genus": "genus of the (suggested) name",
  "species": "specific epithet of the (suggested) name"
}}

Rules:
- A current, accepted name is valid with status "current".
- A formally renamed name (an official synonym) is valid with status "updated";
  give the accepted name in currentName.
- A near-miss spelling of a known name is invalid with status "likely_misspelled";
  give the correction in suggestedName.
- An unrecognised or fabricated name is invalid with status "invalid".
- Distinguish official synonyms from typos carefully."""


class NameStatus(StrEnum):
    CURRENT = "current"
    UPDATED = "updated"
    LIKELY_MISSPELLED = "likely_misspelled"
    INVALID = "invalid"


class BotanicalNameReply(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    valid: bool = False
    status: NameStatus
    error: str | None = None
    family: str | None = None
    genus: str | None = None
    species: str | None = None
    current_name: str | None = Field(default=None, alias="currentName")
    suggested_name: str | None = Field(default=None, alias="suggestedName")

    @field_validator("genus")
    @classmethod
    def _capitalise_genus(cls, value: str | None) -> str | None:
        return value.strip().capitalize() if value else value

    @field_validator("species")
    @classmethod
    def _lower_species(cls, value: str | None) -> str | None:
        return value.strip().lower() if value else value

    def describe_problem(self) -> str:
        if self.error:
            return self.error
        if self.status is NameStatus.UPDATED and self.current_name:
            return f"Name has been updated to {self.current_name}"
        if self.status is NameStatus.LIKELY_MISSPELLED and self.suggested_name:
            return f"Likely misspelling of {self.suggested_name}"
        return f"Name is not current (status: {self.status})"


class BotanicalNameModule:
    """Fails unless the name is current and matches the input spelling exactly."""

    def __init__(self, inference: StructuredInference) -> None:
        self._inference = inference
        self._descriptor = ModuleDescriptor(
            id=MODULE_ID,
            display_name="Botanical Name Validator",
            columns=(
                ColumnSpec(
                    column_id="family",
                    header="Family",
                    source_label="Claude API",
                    algorithm_description=(
                        "Taxonomic family returned by the model while validating the name."
                    ),
                ),
                ColumnSpec(
                    column_id="botanicalNameNotes",
                    header="Botanical Name Notes",
                    source_label="Claude API",
                    algorithm_description=(
                        "Empty when the name is current and exact. The run stops for the "
                        "entity when the name is outdated, misspelled or invalid."
                    ),
                ),
            ),
            critical=True,
            description="Validates the binomial and reports its family.",
        )

    @property
    def descriptor(self) -> ModuleDescriptor:
        return self._descriptor

    def run(self, entity: EntityKey, prior_results: Mapping[str, ColumnValues]) -> ColumnValues:
        reply = ask(
            self._inference,
            BotanicalNameReply,
            system=SYSTEM_PROMPT,
            prompt=PROMPT_TEMPLATE.format(binomial=entity.binomial),
        )
        if reply.status is not NameStatus.CURRENT:
            raise ModuleFailure(reply.describe_problem())
        if (reply.genus, reply.species) != (entity.genus, entity.species):
            raise ModuleFailure(
                f'Input "{entity.binomial}" does not exactly match current name '
                f'"{reply.genus} {reply.species}"'
            )
        return {"family": reply.family or "", "botanicalNameNotes": ""}
