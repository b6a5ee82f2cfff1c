"""Cache repositories over the SQLAlchemy Core tables."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from florasynth.adapters.tier_payload import TierAnswerPayload
from florasynth.domain.errors import CacheError

from .engine import configured_engine
from .mappings import lookup_cache_table, tier_response_table

if TYPE_CHECKING:
    from pydantic import JsonValue
    from sqlalchemy.engine import Engine

    from florasynth.domain.ports.cache import TierCacheKey
    from florasynth.domain.tiered.contracts import TierAnswer
    from florasynth.domain.types import EntityKey

log = getLogger(__name__)


class CacheStorageError(CacheError):
    """Raised when the cache database cannot be read or written."""


class SqlAlchemyTierCache:
    """Tier answers keyed by entity, field, tier and prompt hash; one row per key."""

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or configured_engine()

    def get(self, key: TierCacheKey) -> TierAnswer | None:
        stmt = select(tier_response_table.c.answer).where(
            tier_response_table.c.genus == key.entity.genus,
            tier_response_table.c.species == key.entity.species,
            tier_response_table.c.field_id == key.field_id,
            tier_response_table.c.tier == key.tier.value,
            tier_response_table.c.prompt_hash == key.prompt_hash,
        )
        try:
            with self._engine.connect() as connection:
                stored = connection.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise CacheStorageError(f"Cannot read tier cache: {exc}") from exc
        if stored is None:
            return None
        try:
            return TierAnswerPayload.model_validate(stored).to_answer()
        except ValidationError:
            log.warning("Ignoring unreadable cached %s answer for %s", key.tier, key.entity)
            return None

    def put(self, key: TierCacheKey, answer: TierAnswer) -> None:
        stmt = (
            tier_response_table.insert()
            .prefix_with("OR IGNORE")
            .values(
                genus=key.entity.genus,
                species=key.entity.species,
                field_id=key.field_id,
                tier=key.tier.value,
                prompt_hash=key.prompt_hash,
                answer=answer.to_payload(),
                created_at=datetime.now(UTC),
            )
        )
        try:
            with self._engine.begin() as connection:
                connection.execute(stmt)
        except SQLAlchemyError as exc:
            raise CacheStorageError(f"Cannot write tier cache: {exc}") from exc


class SqlAlchemyLookupCache:
    """JSON lookup results per entity, namespaced by the module that stored them."""

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or configured_engine()

    def get(self, namespace: str, entity: EntityKey) -> JsonValue | None:
        stmt = select(lookup_cache_table.c.value).where(
            lookup_cache_table.c.namespace == namespace,
            lookup_cache_table.c.genus == entity.genus,
            lookup_cache_table.c.species == entity.species,
        )
        try:
            with self._engine.connect() as connection:
                return connection.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise CacheStorageError(f"Cannot read lookup cache: {exc}") from exc

    def put(self, namespace: str, entity: EntityKey, value: JsonValue) -> None:
        stmt = (
            lookup_cache_table.insert()
            .prefix_with("OR IGNORE")
            .values(
                namespace=namespace,
                genus=entity.genus,
                species=entity.species,
                value=value,
                created_at=datetime.now(UTC),
            )
        )
        try:
            with self._engine.begin() as connection:
                connection.execute(stmt)
        except SQLAlchemyError as exc:
            raise CacheStorageError(f"Cannot write lookup cache: {exc}") from exc

    def clear(self, namespace: str | None = None) -> int:
        """Delete cached lookups, optionally only one namespace; returns the row count."""

        stmt = lookup_cache_table.delete()
        if namespace is not None:
            stmt = stmt.where(lookup_cache_table.c.namespace == namespace)
        try:
            with self._engine.begin() as connection:
                return connection.execute(stmt).rowcount
        except SQLAlchemyError as exc:
            raise CacheStorageError(f"Cannot clear lookup cache: {exc}") from exc
