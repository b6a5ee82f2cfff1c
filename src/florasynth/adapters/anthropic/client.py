"""Thin wrapper around the Anthropic messages API."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

import anthropic

from florasynth.domain.errors import InferenceError

if TYPE_CHECKING:
    from collections.abc import Callable

    from florasynth.config.anthropic import AnthropicConfig

log = getLogger(__name__)


class AnthropicClient:
    """Sends one system + user prompt and returns the text of the reply.

    SDK errors are translated to :class:`InferenceError`; connection problems,
    rate limits and server errors are marked transient.
    """

    def __init__(
        self,
        *,
        config: AnthropicConfig,
        sdk_factory: Callable[[AnthropicConfig], anthropic.Anthropic] | None = None,
    ) -> None:
        self._config = config
        self._sdk = (sdk_factory or _default_sdk)(config)

    @property
    def model(self) -> str:
        return self._config.model

    def complete(self, *, system: str, prompt: str) -> str:
        try:
            message = self._sdk.messages.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
        except (anthropic.APIConnectionError, anthropic.RateLimitError) as exc:
            raise InferenceError(f"Anthropic request failed: {exc}", transient=True) from exc
        except anthropic.APIStatusError as exc:
            transient = exc.status_code >= 500
            raise InferenceError(
                f"Anthropic returned {exc.status_code}: {exc.message}", transient=transient
            ) from exc
        except anthropic.APIError as exc:
            raise InferenceError(f"Anthropic request failed: {exc}") from exc

        text = "".join(block.text for block in message.content if block.type == "text")
        if not text.strip():
            raise InferenceError("Anthropic reply contained no text")
        return text

    def complete_json(self, *, system: str, prompt: str) -> dict[str, object]:
        text = self.complete(system=system, prompt=prompt)
        payload = extract_json_object(text)
        if payload is None:
            log.debug("Unparseable reply: %s", text[:500])
            raise InferenceError("Anthropic reply was not a JSON object")
        return payload


def _default_sdk(config: AnthropicConfig) -> anthropic.Anthropic:
    return anthropic.Anthropic(
        api_key=config.api_key,
        timeout=config.timeout_seconds,
        max_retries=config.max_retries,
    )


def extract_json_object(text: str) -> dict[str, object] | None:
    """Parse a JSON object from a reply, with or without a fenced code block."""

    candidates = [text.strip()]
    if "```" in text:
        start = text.find("```") + 3
        newline = text.find("\n", start)
        if newline > start:
            start = newline + 1
        end = text.find("```", start)
        if end > start:
            candidates.append(text[start:end].strip())
    first, last = text.find("{"), text.rfind("}")
    if 0 <= first < last:
        candidates.append(text[first : last + 1])

    for candidate in candidates:
        try:
            payload = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(payload, dict):
            return payload
    return None
