"""GBIF species API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

DEFAULT_GBIF_BASE_URL = "https://api.gbif.org/v1"


@dataclass(frozen=True, slots=True)
class GbifConfig:
    resilience: ResilienceConfig


def get_gbif_config(*, cache_path: str | None = None) -> GbifConfig:
    resilience = ResilienceConfig(
        name="gbif",
        base_url=DEFAULT_GBIF_BASE_URL,
        timeout_seconds=15.0,
        rate_limit=RateLimit(max_calls=5, per_seconds=1.0),
        cache=CacheConfig(sqlite_path=cache_path),
    )
    return GbifConfig(resilience=resilience)
