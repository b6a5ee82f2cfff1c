"""Record sink writing an Excel workbook with openpyxl."""

from __future__ import annotations

from datetime import datetime
from logging import getLogger
from threading import Lock
from typing import TYPE_CHECKING

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from florasynth.domain.errors import SinkError
from florasynth.domain.synthesis.schema import DOCUMENTATION_HEADERS

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from openpyxl.worksheet.worksheet import Worksheet

    from florasynth.config.storage import OutputConfig
    from florasynth.domain.synthesis.schema import ColumnSchema
    from florasynth.domain.types import Record

    from .locations import OutputLocationCache

log = getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
MAX_COLUMN_WIDTH = 60


def workbook_name(prefix: str, moment: datetime) -> str:
    return f"{prefix}_{moment.strftime(TIMESTAMP_FORMAT)}.xlsx"


class WorkbookSink:
    """Creates one timestamped workbook and appends rows to its data sheet.

    The workbook holds the data sheet and a column documentation sheet. It is
    saved after every append, so rows written before a failure stay on disk.
    """

    def __init__(
        self,
        *,
        config: OutputConfig,
        locations: OutputLocationCache,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._config = config
        self._locations = locations
        self._clock = clock
        self._lock = Lock()
        self._workbook: Workbook | None = None
        self._schema: ColumnSchema | None = None
        self._path: Path | None = None

    @property
    def path(self) -> Path | None:
        return self._path

    def create(self, schema: ColumnSchema) -> None:
        with self._lock:
            if self._workbook is not None:
                raise SinkError("Workbook already created for this sink")
            folder = self._locations.resolve(self._config.folder_name, self._make_folder)
            path = folder / workbook_name(self._config.file_prefix, self._clock())

            workbook = Workbook()
            data_sheet = workbook.active
            data_sheet.title = self._config.sheet_name
            data_sheet.append(list(schema.headers))
            _style_header(data_sheet)

            docs_sheet = workbook.create_sheet(self._config.documentation_sheet_name)
            docs_sheet.append(list(DOCUMENTATION_HEADERS))
            for row in schema.documentation_rows():
                docs_sheet.append(list(row))
            _style_header(docs_sheet)
            _auto_fit_columns(docs_sheet)

            self._save(workbook, path)
            self._workbook = workbook
            self._schema = schema
            self._path = path
            log.info("Created workbook %s", path)

    def append(self, rows: Sequence[Record]) -> None:
        with self._lock:
            if self._workbook is None or self._schema is None or self._path is None:
                raise SinkError("Workbook not created; call create() first")
            known = set(self._schema.column_ids)
            for row in rows:
                unknown = sorted(set(row) - known)
                if unknown:
                    raise SinkError(f"Row has columns outside the schema: {', '.join(unknown)}")

            data_sheet = self._workbook[self._config.sheet_name]
            for row in rows:
                data_sheet.append(self._schema.row_for(row))
            _auto_fit_columns(data_sheet)
            self._save(self._workbook, self._path)
            log.info("Appended %d row(s) to %s", len(rows), self._path.name)

    def _make_folder(self, name: str) -> Path:
        folder = self._config.root / name
        try:
            folder.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise SinkError(f"Cannot create output folder {folder}: {exc}") from exc
        return folder

    @staticmethod
    def _save(workbook: Workbook, path: Path) -> None:
        try:
            workbook.save(path)
        except OSError as exc:
            raise SinkError(f"Cannot write workbook {path}: {exc}") from exc


def _style_header(worksheet: Worksheet) -> None:
    for cell in next(worksheet.iter_rows(min_row=1, max_row=1)):
        cell.font = Font(bold=True)
        cell.alignment = Alignment(wrap_text=True, vertical="top")
    worksheet.freeze_panes = "A2"


def _auto_fit_columns(worksheet: Worksheet) -> None:
    widths: dict[int, int] = {}
    for row in worksheet.iter_rows(values_only=True):
        for index, value in enumerate(row, start=1):
            length = len(str(value)) if value is not None else 0
            widths[index] = max(widths.get(index, 0), length)
    for index, width in widths.items():
        letter = get_column_letter(index)
        worksheet.column_dimensions[letter].width = min(width + 2, MAX_COLUMN_WIDTH)
