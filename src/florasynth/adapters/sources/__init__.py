"""Source excerpt providers."""

from __future__ import annotations

from .filesystem import DirectorySourceProvider

__all__ = ["DirectorySourceProvider"]
