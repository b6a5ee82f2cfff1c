"""Async HTTP client shared by the GBIF and SerpApi adapters.

Requests go through three layers, outermost first: an ``aiolimiter`` rate limit,
a ``hishel`` response cache and an ``httpx-retries`` transport that retries
transient statuses and network errors.
"""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as CachedResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from florasynth.common.storage import get_http_cache_path

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from florasynth.config.http_resilience import (
        CacheConfig,
        ResilienceConfig,
        RetryPolicy,
        ShouldCacheHook,
    )

log = getLogger(__name__)


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=tuple(policy.allowed_methods),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
        backoff_jitter=policy.backoff_jitter,
    )


class ResilientClient:
    """Rate limited, cached and retrying ``httpx.AsyncClient`` for one service.

    ``transport`` replaces the network transport underneath the retry layer, which
    lets tests plug in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        limit = config.rate_limit
        self._limiter = AsyncLimiter(limit.max_calls, limit.per_seconds) if limit else None

        retrying = RetryTransport(transport=transport, retry=build_retry(config.retry))
        base_url = config.base_url or ""
        headers = {"User-Agent": config.user_agent}
        storage = _cache_storage(config.cache)
        if storage is None:
            self._client = httpx.AsyncClient(
                base_url=base_url,
                headers=headers,
                timeout=config.timeout_seconds,
                transport=retrying,
            )
        else:
            self._client = AsyncCacheClient(
                base_url=base_url,
                headers=headers,
                timeout=config.timeout_seconds,
                transport=retrying,
                storage=storage,
                policy=_cache_policy(config.cache),
            )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get(self, url: str, *, params: Mapping[str, str] | None = None) -> httpx.Response:
        if self._limiter is None:
            return await self._client.get(url, params=params)
        async with self._limiter:
            return await self._client.get(url, params=params)

    async def get_json(self, url: str, *, params: Mapping[str, str] | None = None) -> object:
        """GET ``url`` and decode its JSON body.

        Raises ``httpx.HTTPStatusError`` for error statuses once retries are spent
        and ``ValueError`` when the body is not JSON.
        """

        response = await self.get(url, params=params)
        log.debug("%s %s -> %s", self.config.name, response.url, response.status_code)
        response.raise_for_status()
        return response.json()


class _JsonPayloadFilter(BaseFilter[CachedResponse]):
    """Lets ``should_cache`` decide on the decoded body; non-JSON bodies are cached."""

    def __init__(self, should_cache: ShouldCacheHook) -> None:
        self._should_cache = should_cache

    def needs_body(self) -> bool:
        return True

    def apply(self, item: CachedResponse, body: bytes | None) -> bool:  # noqa: ARG002
        if body is None:
            return True
        try:
            payload = json.loads(body)
        except ValueError:
            return True
        return bool(self._should_cache(payload))


def _cache_storage(config: CacheConfig | None) -> AsyncSqliteStorage | None:
    if config is None or not config.enabled:
        return None
    match config.backend:
        case "sqlite":
            database_path = config.sqlite_path or str(get_http_cache_path())
        case "memory":
            database_path = ":memory:"
        case other:
            raise ValueError(f"Unsupported cache backend: {other}")
    return AsyncSqliteStorage(
        database_path=database_path,
        default_ttl=config.ttl_seconds,
        refresh_ttl_on_access=False,
    )


def _cache_policy(config: CacheConfig | None) -> FilterPolicy | None:
    if config is None or config.should_cache is None:
        return None
    return FilterPolicy(response_filters=[_JsonPayloadFilter(config.should_cache)])
