"""Module contract and per-module outcome types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Literal, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from florasynth.domain.types import ColumnValues, EntityKey


@dataclass(slots=True, frozen=True, kw_only=True)
class ColumnSpec:
    """One output column and its provenance documentation."""

    column_id: str
    header: str
    source_label: str
    algorithm_description: str


@dataclass(slots=True, frozen=True, kw_only=True)
class ModuleDescriptor:
    """Static metadata of a synthesis module; the node of the dependency graph."""

    id: str
    display_name: str
    columns: tuple[ColumnSpec, ...]
    dependencies: frozenset[str] = field(default_factory=frozenset[str])
    critical: bool = False
    description: str = ""

    @property
    def column_ids(self) -> tuple[str, ...]:
        return tuple(column.column_id for column in self.columns)


@runtime_checkable
class SynthesisModule(Protocol):
    """A pluggable unit producing the declared columns for one entity."""

    @property
    def descriptor(self) -> ModuleDescriptor: ...

    def run(
        self,
        entity: EntityKey,
        prior_results: Mapping[str, ColumnValues],
    ) -> ColumnValues:
        """Return values keyed by exactly the declared column ids.

        ``prior_results`` holds only the declared dependencies' column values.
        Raise :class:`~florasynth.domain.errors.ModuleFailure` when no values can
        be produced.
        """
        ...


class ModuleStatus(StrEnum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(slots=True, frozen=True, kw_only=True)
class Succeeded:
    module_id: str
    column_values: ColumnValues
    elapsed_seconds: float = 0.0
    status: Literal[ModuleStatus.SUCCEEDED] = ModuleStatus.SUCCEEDED


@dataclass(slots=True, frozen=True, kw_only=True)
class Failed:
    module_id: str
    reason: str
    elapsed_seconds: float = 0.0
    status: Literal[ModuleStatus.FAILED] = ModuleStatus.FAILED


@dataclass(slots=True, frozen=True, kw_only=True)
class Skipped:
    module_id: str
    reason: str
    status: Literal[ModuleStatus.SKIPPED] = ModuleStatus.SKIPPED


type ModuleOutcome = Succeeded | Failed | Skipped
