"""Anthropic-backed inference."""

from __future__ import annotations

from .client import AnthropicClient, extract_json_object
from .inference import AnthropicTierInference

__all__ = ["AnthropicClient", "AnthropicTierInference", "extract_json_object"]
