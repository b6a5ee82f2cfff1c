"""Cache ports shared by concurrent runs.

Writers store at most one value per key; a second ``put`` for an existing key is
ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pydantic import JsonValue

    from florasynth.domain.tiered.contracts import Tier, TierAnswer
    from florasynth.domain.types import EntityKey


@dataclass(slots=True, frozen=True, kw_only=True)
class TierCacheKey:
    entity: EntityKey
    field_id: str
    tier: Tier
    prompt_hash: str


@runtime_checkable
class TierCache(Protocol):
    def get(self, key: TierCacheKey) -> TierAnswer | None: ...

    def put(self, key: TierCacheKey, answer: TierAnswer) -> None: ...


@runtime_checkable
class LookupCache(Protocol):
    """Per-entity cache of adapter lookups, namespaced by lookup kind."""

    def get(self, namespace: str, entity: EntityKey) -> JsonValue | None: ...

    def put(self, namespace: str, entity: EntityKey, value: JsonValue) -> None: ...
