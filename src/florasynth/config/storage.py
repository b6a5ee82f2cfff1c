"""Data storage configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from florasynth.common.storage import (
    DEFAULT_DB_FILENAME,
    OUTPUT_DIR_NAME,
    SOURCES_DIR_NAME,
    get_data_dir,
)

from .env import optional_env_var

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def database_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.database_filename

    def sources_dir(self) -> Path:
        return self.resolve_data_dir() / SOURCES_DIR_NAME

    def output_root(self) -> Path:
        return self.resolve_data_dir() / OUTPUT_DIR_NAME

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


@dataclass(frozen=True, slots=True)
class OutputConfig:
    """Where batch workbooks are written and how they are named."""

    root: Path
    folder_name: str = "Plant Data"
    file_prefix: str = "plant_data"
    sheet_name: str = "Plant Data"
    documentation_sheet_name: str = "Column Sources"


@dataclass(frozen=True, slots=True)
class SourceDirectories:
    """Per-tier roots of cached source excerpts, keyed by source id."""

    tier1: Mapping[str, Path]
    tier2: Mapping[str, Path]


TIER1_SOURCE_DIRS = {
    "tier1-drive": "Tier1",
    "michigan-flora": "MichiganFlora",
    "lake-county": "LakeCounty",
}
TIER2_SOURCE_DIRS = {
    "missouri-seedling-guide": "MissouriSeedlingGuide",
    "page-content": "PageContent",
    "missouri-conservation": "MissouriDepartmentConservation",
}


def get_storage_config() -> StorageConfig:
    return StorageConfig(data_dir=get_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    env_uri = optional_env_var("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    storage_config = storage or get_storage_config()
    return DatabaseConfig(uri=storage_config.database_uri())


def get_output_config(*, storage: StorageConfig | None = None) -> OutputConfig:
    storage_config = storage or get_storage_config()
    defaults = OutputConfig(root=storage_config.output_root())
    return OutputConfig(
        root=defaults.root,
        folder_name=optional_env_var("FLORASYNTH_OUTPUT_FOLDER") or defaults.folder_name,
        file_prefix=optional_env_var("FLORASYNTH_OUTPUT_PREFIX") or defaults.file_prefix,
    )


def get_source_directories(*, storage: StorageConfig | None = None) -> SourceDirectories:
    root = (storage or get_storage_config()).sources_dir()
    return SourceDirectories(
        tier1={source_id: root / name for source_id, name in TIER1_SOURCE_DIRS.items()},
        tier2={source_id: root / name for source_id, name in TIER2_SOURCE_DIRS.items()},
    )
