"""Synthesis pipeline configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .env import env_list, optional_env_var

DEFAULT_MAX_WORKERS = 1


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    """Which registered synthesis modules are enabled, in registration order."""

    enabled_modules: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class BatchConfig:
    max_workers: int = DEFAULT_MAX_WORKERS
    force_refresh: bool = False


def get_registry_config(default_modules: tuple[str, ...]) -> RegistryConfig:
    """Read ``FLORASYNTH_MODULES`` or fall back to ``default_modules``."""

    configured = env_list("FLORASYNTH_MODULES")
    return RegistryConfig(enabled_modules=configured or default_modules)


def get_rules_dir() -> Path | None:
    """Return the override directory for field rule files, if one is configured."""

    value = optional_env_var("FLORASYNTH_RULES_DIR")
    return Path(value).expanduser().resolve() if value else None
