from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from florasynth.adapters.sqlalchemy import create_cache_engine, shutdown, startup

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    data_dir = tmp_path / "data"
    monkeypatch.setenv("FLORASYNTH_DATA_DIR", str(data_dir))
    for name in (
        "FLORASYNTH_MODULES",
        "FLORASYNTH_OUTPUT_FOLDER",
        "FLORASYNTH_OUTPUT_PREFIX",
        "FLORASYNTH_RULES_DIR",
        "SERPAPI_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    return data_dir


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_cache_engine("sqlite+pysqlite:///:memory:")
    startup(engine=engine, force=True)
    try:
        yield engine
    finally:
        shutdown()
