from __future__ import annotations

import asyncio

import httpx
import pytest

from florasynth.adapters.http_resilience import ResilientClient, build_retry
from florasynth.config import (
    CacheConfig,
    ResilienceConfig,
    RetryPolicy,
    get_serpapi_config,
    payload_without_error,
)


def _get(client: ResilientClient, url: str) -> httpx.Response:
    async def run() -> httpx.Response:
        async with client:
            return await client.get(url)

    return asyncio.run(run())


def test_requests_use_base_url_and_user_agent() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    config = ResilienceConfig(
        name="test",
        base_url="https://api.example.org/v1/",
        cache=None,
        user_agent="florasynth-tests",
    )
    response = _get(ResilientClient(config, transport=httpx.MockTransport(handler)), "species")

    assert response.json() == {"ok": True}
    assert str(seen[0].url) == "https://api.example.org/v1/species"
    assert seen[0].headers["User-Agent"] == "florasynth-tests"


def test_transient_statuses_are_retried() -> None:
    statuses = iter([503, 200])

    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(next(statuses), json={})

    config = ResilienceConfig(
        name="test",
        base_url="https://api.example.org",
        cache=None,
        retry=RetryPolicy(total=2, backoff_factor=0.0, backoff_jitter=0.0),
    )
    response = _get(ResilientClient(config, transport=httpx.MockTransport(handler)), "/")

    assert response.status_code == 200


def test_build_retry_copies_the_attempt_budget() -> None:
    assert build_retry(RetryPolicy(total=5)).total == 5


def test_unknown_cache_backend_is_rejected() -> None:
    cache = CacheConfig(backend="redis")  # type: ignore[arg-type]
    config = ResilienceConfig(name="test", cache=cache)

    with pytest.raises(ValueError, match="Unsupported cache backend: redis"):
        ResilientClient(config)


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"organic_results": [{"link": "https://x"}]}, True),
        ({"error": "Google hasn't returned any results for this query."}, False),
        ({"error": ""}, True),
        ([], False),
    ],
)
def test_payloads_reporting_errors_are_not_cached(payload: object, expected: bool) -> None:
    assert payload_without_error(payload) is expected


def test_search_responses_are_filtered_before_caching() -> None:
    cache = get_serpapi_config().resilience.cache

    assert cache is not None
    assert cache.should_cache is payload_without_error
