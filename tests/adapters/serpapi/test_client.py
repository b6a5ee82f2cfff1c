from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

import httpx
import pytest

from florasynth.adapters.http_resilience import ResilientClient
from florasynth.adapters.serpapi import SerpApiClient, SerpApiError
from florasynth.config import RetryPolicy, SerpApiConfig, get_serpapi_config

if TYPE_CHECKING:
    from collections.abc import Callable

    from florasynth.config import ResilienceConfig


def _config(api_key: str | None = "serp-key") -> SerpApiConfig:
    base = get_serpapi_config()
    resilience = dataclasses.replace(
        base.resilience,
        cache=None,
        rate_limit=None,
        retry=RetryPolicy(total=0),
    )
    return SerpApiConfig(api_key=api_key, resilience=resilience)


def _make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    def factory(resilience: ResilienceConfig) -> ResilientClient:
        return ResilientClient(resilience, transport=httpx.MockTransport(handler))

    return factory


def test_top_result_returns_the_first_organic_link() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "search_metadata": {"status": "Success"},
                "organic_results": [
                    {"position": 1, "title": "Quercus alba", "link": "https://a.example/oak"},
                    {"position": 2, "title": "Other", "link": "https://b.example/oak"},
                ],
            },
        )

    client = SerpApiClient(config=_config(), client_factory=_make_client_factory(handler))

    assert client.top_result("site:michiganflora.net Quercus alba") == "https://a.example/oak"
    (request,) = seen
    assert request.url.path == "/search.json"
    assert request.url.params["engine"] == "google"
    assert request.url.params["q"] == "site:michiganflora.net Quercus alba"
    assert request.url.params["api_key"] == "serp-key"


def test_no_results_return_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"error": "Google hasn't returned any results"})

    client = SerpApiClient(config=_config(), client_factory=_make_client_factory(handler))

    assert client.top_result("site:plants.usda.gov Nothing here") is None


def test_http_errors_raise_serpapi_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "Invalid API key"})

    client = SerpApiClient(config=_config(), client_factory=_make_client_factory(handler))

    with pytest.raises(SerpApiError, match="Search failed"):
        client.top_result("anything")


def test_client_requires_an_api_key() -> None:
    with pytest.raises(SerpApiError, match="SERPAPI_API_KEY"):
        SerpApiClient(config=_config(api_key=None))
