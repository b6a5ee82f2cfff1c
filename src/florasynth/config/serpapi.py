"""SerpApi search configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, payload_without_error

DEFAULT_SERPAPI_BASE_URL = "https://serpapi.com"


@dataclass(frozen=True, slots=True)
class SerpApiConfig:
    """SerpApi settings; ``api_key`` is ``None`` when searching is disabled."""

    api_key: str | None
    resilience: ResilienceConfig

    @property
    def enabled(self) -> bool:
        return self.api_key is not None


def get_serpapi_config() -> SerpApiConfig:
    return SerpApiConfig(
        api_key=optional_env_var("SERPAPI_API_KEY"),
        resilience=ResilienceConfig(
            name="serpapi",
            base_url=DEFAULT_SERPAPI_BASE_URL,
            timeout_seconds=20.0,
            rate_limit=RateLimit(max_calls=2, per_seconds=1.0),
            cache=CacheConfig(backend="memory", should_cache=payload_without_error),
        ),
    )
