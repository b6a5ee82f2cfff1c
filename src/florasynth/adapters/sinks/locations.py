"""Process-scoped cache of resolved output locations."""

from __future__ import annotations

from threading import Lock
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


class OutputLocationCache:
    """Maps a location name to its resolved folder, resolving each name once.

    One instance is created by the application and passed to every sink that
    needs it; it lives as long as the process.
    """

    def __init__(self) -> None:
        self._locations: dict[str, Path] = {}
        self._lock = Lock()

    def resolve(self, name: str, factory: Callable[[str], Path]) -> Path:
        with self._lock:
            location = self._locations.get(name)
            if location is None:
                location = factory(name)
                self._locations[name] = location
            return location

    def get(self, name: str) -> Path | None:
        return self._locations.get(name)

    def __len__(self) -> int:
        return len(self._locations)
