"""Port for record sinks."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from florasynth.domain.synthesis.schema import ColumnSchema
    from florasynth.domain.types import Record


@runtime_checkable
class RecordSink(Protocol):
    """Create-once, append-only destination for flattened records.

    Rows are keyed by column id. Failures raise ``SinkError``; rows already
    appended are not rolled back.
    """

    def create(self, schema: ColumnSchema) -> None: ...

    def append(self, rows: Sequence[Record]) -> None: ...
