"""Column schema and provenance documentation derived from module metadata."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .contracts import SynthesisModule

type Cell = str | int | float

DOCUMENTATION_HEADERS: Final[tuple[str, ...]] = (
    "Column",
    "Column ID",
    "Source",
    "Algorithm",
    "Module",
)


@dataclass(slots=True, frozen=True, kw_only=True)
class SchemaColumn:
    column_id: str
    header: str
    source_label: str
    algorithm_description: str
    module_id: str


@dataclass(slots=True, frozen=True)
class ColumnSchema:
    """Ordered output columns; identical for every run of the same configuration."""

    columns: tuple[SchemaColumn, ...]

    @property
    def headers(self) -> tuple[str, ...]:
        return tuple(column.header for column in self.columns)

    @property
    def column_ids(self) -> tuple[str, ...]:
        return tuple(column.column_id for column in self.columns)

    def documentation_rows(self) -> list[tuple[str, ...]]:
        return [
            (
                column.header,
                column.column_id,
                column.source_label,
                column.algorithm_description,
                column.module_id,
            )
            for column in self.columns
        ]

    def row_for(self, record: Mapping[str, object]) -> list[Cell]:
        """Render ``record`` in column order; absent columns become empty cells."""

        return [render_cell(record.get(column_id)) for column_id in self.column_ids]


def build_column_schema(ordered_modules: Sequence[SynthesisModule]) -> ColumnSchema:
    return ColumnSchema(
        columns=tuple(
            SchemaColumn(
                column_id=column.column_id,
                header=column.header,
                source_label=column.source_label,
                algorithm_description=column.algorithm_description,
                module_id=module.descriptor.id,
            )
            for module in ordered_modules
            for column in module.descriptor.columns
        )
    )


def render_cell(value: object) -> Cell:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, int | float | str):
        return value
    if isinstance(value, Mapping | list | tuple):
        return json.dumps(value, ensure_ascii=False)
    return str(value)
