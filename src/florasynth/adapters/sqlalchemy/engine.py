"""Process-wide SQLAlchemy engine used by the cache repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event
from sqlalchemy.pool import StaticPool

from florasynth.config.storage import get_database_config

from .mappings import metadata

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """Raised when the cache database is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None


_STATE = _AdapterState()


def create_cache_engine(database_uri: str) -> Engine:
    """Create an engine whose connections can be shared by worker threads."""

    if database_uri.endswith(":memory:"):
        # one shared connection, otherwise every thread sees its own empty database
        engine = create_engine(
            database_uri,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    elif database_uri.startswith("sqlite"):
        engine = create_engine(database_uri, connect_args={"check_same_thread": False})
    else:
        return create_engine(database_uri)

    @event.listens_for(engine, "connect")
    def _set_busy_timeout(dbapi_connection: object, _record: object) -> None:
        cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
        cursor.execute("PRAGMA busy_timeout = 5000")
        cursor.close()

    return engine


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> Engine:
    """Initialise the engine and create the cache tables if needed."""

    if _STATE.engine is not None and not force:
        raise StartupError("Cache database already initialised. Pass force=True to reconfigure.")

    resolved_engine = engine or create_cache_engine(database_uri or get_database_config().uri)
    metadata.create_all(resolved_engine)
    _STATE.engine = resolved_engine
    return resolved_engine


def configured_engine() -> Engine:
    """Return the managed engine or raise if :func:`startup` was not called."""

    if _STATE.engine is None:
        raise StartupError(
            "Cache database not initialised. Call florasynth.adapters.sqlalchemy."
            "engine.startup() first."
        )
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None
