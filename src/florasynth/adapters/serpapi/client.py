"""SerpApi Google search client."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from florasynth.adapters.http_resilience import ResilientClient

from .schema import SearchResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from florasynth.config.http_resilience import ResilienceConfig
    from florasynth.config.serpapi import SerpApiConfig

log = getLogger(__name__)


class SerpApiError(RuntimeError):
    """Raised when a SerpApi search fails."""


class SerpApiClient:
    def __init__(
        self,
        *,
        config: SerpApiConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        if config.api_key is None:
            raise SerpApiError("SerpApi client requires SERPAPI_API_KEY")
        self._api_key = config.api_key
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def top_result(self, query: str) -> str | None:
        """Return the link of the first organic result for ``query``, if any."""

        return asyncio.run(self._search_async(query)).top_link

    async def _search_async(self, query: str) -> SearchResponse:
        params = {"engine": "google", "q": query, "num": "1", "api_key": self._api_key}
        async with self._client_factory(self._resilience) as client:
            try:
                payload = await client.get_json("search.json", params=params)
                result = SearchResponse.model_validate(payload)
            except (httpx.HTTPError, ValueError, ValidationError) as exc:
                raise SerpApiError(f"Search failed for {query!r}: {exc}") from exc
        if result.error and not result.organic_results:
            log.debug("SerpApi returned no results for %r: %s", query, result.error)
        return result
