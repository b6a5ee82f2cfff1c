"""Value types of the three-tier field protocol."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from datetime import datetime

    from pydantic import JsonValue

    from florasynth.domain.types import EntityKey


class Tier(StrEnum):
    TRUSTED = "tier1"
    EXPANDED = "tier2"
    INDEPENDENT = "tier3"


class Granularity(StrEnum):
    """How specific the knowledge behind an independent answer is."""

    SPECIES = "species"
    GENUS = "genus"
    FAMILY = "family"


@dataclass(slots=True, frozen=True, kw_only=True)
class SourceExcerpt:
    """Text from one source about one entity, optionally with a structured claim."""

    source_id: str
    label: str
    text: str
    file_name: str | None = None
    claim: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class SourceClaim:
    source_id: str
    claim: str


@dataclass(slots=True, frozen=True, kw_only=True)
class Conflict:
    """Sources that assert different values for the same field."""

    claims: tuple[SourceClaim, ...]

    @property
    def source_ids(self) -> tuple[str, ...]:
        return tuple(claim.source_id for claim in self.claims)

    def to_payload(self) -> dict[str, JsonValue]:
        return {
            "claims": [{"source": c.source_id, "claim": c.claim} for c in self.claims],
        }


@dataclass(slots=True, frozen=True, kw_only=True)
class FieldRules:
    """Field-specific instructions applied identically to every tier."""

    field_id: str
    header: str
    definition: str
    allowed_content: str = ""
    format: str = ""
    max_length: int | None = None
    vocabulary: tuple[str, ...] = ()
    blank_allowed: bool = False
    guidance: str = ""

    def render(self) -> str:
        lines = [f"Field: {self.header} ({self.field_id})", f"Definition: {self.definition}"]
        if self.allowed_content:
            lines.append(f"Allowed content: {self.allowed_content}")
        if self.format:
            lines.append(f"Format: {self.format}")
        if self.max_length is not None:
            lines.append(f"Maximum length: {self.max_length} characters")
        if self.vocabulary:
            lines.append(f"Value must be exactly one of: {', '.join(self.vocabulary)}")
        lines.append(
            "A blank value is allowed." if self.blank_allowed else "A blank value is not allowed."
        )
        if self.guidance:
            lines.extend(("", self.guidance.strip()))
        return "\n".join(lines)

    def violations(self, answer: TierAnswer) -> list[str]:
        """Return the rule violations of ``answer``; an empty list means it is valid."""

        value = (answer.value or "").strip()
        if not value:
            if answer.not_present or self.blank_allowed:
                return []
            return ["value is blank"]
        problems: list[str] = []
        if self.max_length is not None and len(value) > self.max_length:
            problems.append(f"value exceeds {self.max_length} characters")
        if self.vocabulary and self.vocabulary_term(value) is None:
            problems.append(f"value {value!r} is not one of {', '.join(self.vocabulary)}")
        return problems

    def vocabulary_term(self, value: str) -> str | None:
        wanted = value.strip().casefold()
        return next((term for term in self.vocabulary if term.casefold() == wanted), None)


@dataclass(slots=True, frozen=True, kw_only=True)
class TierPrompt:
    tier: Tier
    entity: EntityKey
    field_id: str
    system: str
    user: str

    @property
    def digest(self) -> str:
        """Hash of the rendered prompt; it covers the rendered source set."""

        payload = f"{self.system}\n\n{self.user}".encode()
        return hashlib.sha256(payload).hexdigest()


@dataclass(slots=True, frozen=True, kw_only=True)
class TierAnswer:
    value: str | None
    attribution: str = ""
    not_present: bool = False
    granularity: Granularity | None = None
    conflicts: tuple[Conflict, ...] = ()
    status: Literal["answered"] = "answered"

    def to_payload(self) -> dict[str, JsonValue]:
        payload: dict[str, JsonValue] = {
            "value": self.value,
            "attribution": self.attribution,
            "notPresent": self.not_present,
        }
        if self.granularity is not None:
            payload["granularity"] = self.granularity.value
        if self.conflicts:
            payload["conflicts"] = [conflict.to_payload() for conflict in self.conflicts]
        return payload


@dataclass(slots=True, frozen=True, kw_only=True)
class TierFailureMarker:
    """Placeholder for a tier that could not produce an answer."""

    reason: str
    transient: bool = False
    status: Literal["failed"] = "failed"

    def to_payload(self) -> dict[str, JsonValue]:
        return {"error": self.reason, "transient": self.transient}


type TierSlot = TierAnswer | TierFailureMarker


@dataclass(slots=True, frozen=True, kw_only=True)
class SourceStats:
    tier1: int = 0
    tier2: int = 0


@dataclass(slots=True, frozen=True, kw_only=True)
class TieredFieldResult:
    """All three tier slots side by side, never collapsed into one answer."""

    entity: EntityKey
    field_id: str
    tier1: TierSlot
    tier2: TierSlot
    tier3: TierSlot
    source_stats: SourceStats = field(default_factory=SourceStats)
    processed_at: datetime

    @property
    def slots(self) -> tuple[TierSlot, TierSlot, TierSlot]:
        return (self.tier1, self.tier2, self.tier3)

    @property
    def all_failed(self) -> bool:
        return all(isinstance(slot, TierFailureMarker) for slot in self.slots)

    def to_document(self) -> dict[str, JsonValue]:
        return {
            "_meta": {
                "genus": self.entity.genus,
                "species": self.entity.species,
                "fieldId": self.field_id,
                "processedAt": self.processed_at.isoformat(),
            },
            "tier1": self.tier1.to_payload(),
            "tier2": self.tier2.to_payload(),
            "tier3": self.tier3.to_payload(),
            "sourceStats": {
                "tier1Count": self.source_stats.tier1,
                "tier2Count": self.source_stats.tier2,
            },
        }
