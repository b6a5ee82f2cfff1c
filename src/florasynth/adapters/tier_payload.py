"""Pydantic schema of a tier answer as produced by the model and stored in caches."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from florasynth.domain.tiered.contracts import (
    Conflict,
    Granularity,
    SourceClaim,
    TierAnswer,
)


class ClaimPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    source: str = Field(validation_alias=AliasChoices("source", "source_id", "sourceId"))
    claim: str

    @field_validator("claim", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        return value if isinstance(value, str) else str(value)


class ConflictPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    claims: list[ClaimPayload] = Field(default_factory=list[ClaimPayload])


class TierAnswerPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    value: str | None = None
    attribution: str = ""
    not_present: bool = Field(
        default=False, validation_alias=AliasChoices("not_present", "notPresent")
    )
    granularity: Granularity | None = None
    conflicts: list[ConflictPayload] = Field(default_factory=list[ConflictPayload])

    @field_validator("value", mode="before")
    @classmethod
    def _flatten_value(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, list):
            return ", ".join(str(item) for item in value)
        return str(value)

    @field_validator("attribution", mode="before")
    @classmethod
    def _attribution_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, list):
            return "; ".join(str(item) for item in value)
        return value

    @field_validator("granularity", mode="before")
    @classmethod
    def _granularity_keyword(cls, value: Any) -> Any:
        # models answer "genus-level pattern" as often as "genus"
        if not isinstance(value, str):
            return value
        lowered = value.casefold()
        return next((level for level in Granularity if level.value in lowered), None)

    def to_answer(self) -> TierAnswer:
        conflicts = tuple(
            Conflict(
                claims=tuple(
                    SourceClaim(source_id=claim.source, claim=claim.claim)
                    for claim in conflict.claims
                )
            )
            for conflict in self.conflicts
            if len(conflict.claims) > 1
        )
        return TierAnswer(
            value=self.value,
            attribution=self.attribution,
            not_present=self.not_present,
            granularity=self.granularity,
            conflicts=conflicts,
        )
