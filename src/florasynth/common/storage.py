"""Data directory helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "florasynth"
DEFAULT_DB_FILENAME: Final[str] = "florasynth.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"
SOURCES_DIR_NAME: Final[str] = "sources"
OUTPUT_DIR_NAME: Final[str] = "output"


def get_data_dir() -> Path:
    """Return the directory where florasynth keeps caches, sources and output."""

    env_dir = os.getenv("FLORASYNTH_DATA_DIR")
    if env_dir:
        return Path(env_dir).expanduser().resolve()

    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")

    return (base_path / APP_DIR_NAME).expanduser().resolve()


def ensure_data_dir(path: Path | None = None) -> Path:
    """Ensure the data directory exists and return it."""

    data_dir = path or get_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_http_cache_path() -> Path:
    """Return the SQLite file used by the hishel HTTP response cache."""

    return ensure_data_dir() / HTTP_CACHE_FILENAME
