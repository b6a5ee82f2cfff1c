"""Anthropic inference configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars

DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 1024
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_MAX_RETRIES = 2


@dataclass(frozen=True, slots=True)
class AnthropicConfig:
    api_key: str
    model: str = DEFAULT_ANTHROPIC_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_retries: int = DEFAULT_MAX_RETRIES


def get_anthropic_config() -> AnthropicConfig:
    values = require_env_vars(("ANTHROPIC_API_KEY",))
    return AnthropicConfig(
        api_key=values["ANTHROPIC_API_KEY"],
        model=optional_env_var("FLORASYNTH_ANTHROPIC_MODEL") or DEFAULT_ANTHROPIC_MODEL,
    )
