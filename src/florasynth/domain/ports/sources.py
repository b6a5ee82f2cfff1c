"""Ports for source excerpt providers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from florasynth.domain.tiered.contracts import SourceExcerpt
    from florasynth.domain.types import EntityKey


@runtime_checkable
class SourceProvider(Protocol):
    """Returns excerpts about an entity; raises only when a source cannot be reached."""

    def excerpts(self, entity: EntityKey, field_id: str) -> Sequence[SourceExcerpt]:
        ...
