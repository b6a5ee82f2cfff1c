from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

import httpx
import pytest

from florasynth.adapters.gbif import GbifAPIError, GbifClient
from florasynth.adapters.http_resilience import ResilientClient
from florasynth.config import GbifConfig, RetryPolicy, get_gbif_config
from florasynth.domain.types import EntityKey

if TYPE_CHECKING:
    from collections.abc import Callable

    from florasynth.config import ResilienceConfig


def _config() -> GbifConfig:
    resilience = dataclasses.replace(
        get_gbif_config().resilience,
        cache=None,
        rate_limit=None,
        retry=RetryPolicy(total=0),
    )
    return GbifConfig(resilience=resilience)


def _make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    def factory(resilience: ResilienceConfig) -> ResilientClient:
        return ResilientClient(resilience, transport=httpx.MockTransport(handler))

    return factory


def test_match_species_queries_the_plant_kingdom() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "usageKey": 2878688,
                "scientificName": "Quercus alba L.",
                "canonicalName": "Quercus alba",
                "rank": "SPECIES",
                "status": "ACCEPTED",
                "matchType": "EXACT",
                "confidence": 99,
                "family": "Fagaceae",
                "kingdom": "Plantae",
            },
        )

    client = GbifClient(config=_config(), client_factory=_make_client_factory(handler))

    match = client.match_species(EntityKey.of("Quercus", "alba"))

    assert match.matched
    assert match.is_species
    assert match.usage_key == 2878688
    assert match.family == "Fagaceae"
    (request,) = seen
    assert request.url.path == "/v1/species/match"
    assert request.url.params["name"] == "Quercus alba"
    assert request.url.params["kingdom"] == "Plantae"


def test_species_synonyms_keep_species_rank_names() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1/species/3146791/synonyms"
        assert request.url.params["limit"] == "100"
        return httpx.Response(
            200,
            json={
                "offset": 0,
                "limit": 100,
                "endOfRecords": True,
                "results": [
                    {"key": 1, "canonicalName": "Aster novae-angliae", "rank": "SPECIES"},
                    {"key": 2, "canonicalName": "Aster amplexicaulis", "rank": "VARIETY"},
                ],
            },
        )

    client = GbifClient(config=_config(), client_factory=_make_client_factory(handler))

    page = client.species_synonyms(3146791)

    assert page.species_binomials() == ["Aster novae-angliae"]


def test_http_errors_raise_gbif_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": "not found"})

    client = GbifClient(config=_config(), client_factory=_make_client_factory(handler))

    with pytest.raises(GbifAPIError, match="species/match"):
        client.match_species(EntityKey.of("Quercus", "alba"))


def test_unexpected_payload_raises_gbif_api_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=["not", "an", "object"])

    client = GbifClient(config=_config(), client_factory=_make_client_factory(handler))

    with pytest.raises(GbifAPIError, match="Unexpected GBIF response"):
        client.species_synonyms(1)
