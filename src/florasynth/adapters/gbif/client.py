"""GBIF species API client."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from florasynth.adapters.http_resilience import ResilientClient

from .schema import GbifSpeciesMatch, GbifSynonymPage

if TYPE_CHECKING:
    from collections.abc import Callable

    from florasynth.config.gbif import GbifConfig
    from florasynth.config.http_resilience import ResilienceConfig
    from florasynth.domain.types import EntityKey

log = getLogger(__name__)

SYNONYM_PAGE_LIMIT = 100


class GbifAPIError(RuntimeError):
    """Raised when the GBIF API fails or returns an unexpected response."""


class GbifClient:
    """Low-level HTTP client for the GBIF species endpoints."""

    def __init__(
        self,
        *,
        config: GbifConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def match_species(self, entity: EntityKey) -> GbifSpeciesMatch:
        return asyncio.run(self._match_species_async(entity))

    def species_synonyms(self, usage_key: int) -> GbifSynonymPage:
        return asyncio.run(self._synonyms_async(usage_key))

    async def _match_species_async(self, entity: EntityKey) -> GbifSpeciesMatch:
        params = {"name": entity.binomial, "kingdom": "Plantae", "verbose": "true"}
        async with self._client_factory(self._resilience) as client:
            payload = await self._perform_request(
                client=client,
                path="species/match",
                params=params,
            )
        return _validate(GbifSpeciesMatch, payload)

    async def _synonyms_async(self, usage_key: int) -> GbifSynonymPage:
        params = {"limit": str(SYNONYM_PAGE_LIMIT)}
        async with self._client_factory(self._resilience) as client:
            payload = await self._perform_request(
                client=client,
                path=f"species/{usage_key}/synonyms",
                params=params,
            )
        return _validate(GbifSynonymPage, payload)

    async def _perform_request(
        self,
        *,
        client: ResilientClient,
        path: str,
        params: dict[str, str],
    ) -> dict[str, object]:
        if self._resilience.base_url is None:
            raise GbifAPIError("Missing GBIF base_url in resilience configuration")
        try:
            payload = await client.get_json(path, params=params)
        except (httpx.HTTPError, ValueError) as exc:
            raise GbifAPIError(f"GBIF request {path} failed: {exc}") from exc
        if not isinstance(payload, dict):
            raise GbifAPIError("Unexpected GBIF response payload")
        return payload


def _validate[M: (GbifSpeciesMatch, GbifSynonymPage)](model: type[M], payload: object) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise GbifAPIError(f"Unexpected GBIF {model.__name__} payload") from exc
