"""SQLite-backed caches via SQLAlchemy Core."""

from __future__ import annotations

from .engine import (
    StartupError,
    configured_engine,
    create_cache_engine,
    is_started,
    shutdown,
    startup,
)
from .mappings import lookup_cache_table, metadata, tier_response_table
from .repositories import CacheStorageError, SqlAlchemyLookupCache, SqlAlchemyTierCache

__all__ = [
    "CacheStorageError",
    "SqlAlchemyLookupCache",
    "SqlAlchemyTierCache",
    "StartupError",
    "configured_engine",
    "create_cache_engine",
    "is_started",
    "lookup_cache_table",
    "metadata",
    "shutdown",
    "startup",
    "tier_response_table",
]
