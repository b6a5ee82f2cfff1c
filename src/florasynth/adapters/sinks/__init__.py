"""Record sinks and their output location cache."""

from __future__ import annotations

from .locations import OutputLocationCache
from .workbook import WorkbookSink, workbook_name

__all__ = ["OutputLocationCache", "WorkbookSink", "workbook_name"]
