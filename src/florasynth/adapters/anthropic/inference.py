"""Tier inference backed by the Anthropic messages API."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from florasynth.adapters.tier_payload import TierAnswerPayload
from florasynth.domain.errors import InferenceError

if TYPE_CHECKING:
    from florasynth.domain.tiered.contracts import TierAnswer, TierPrompt

    from .client import AnthropicClient

log = getLogger(__name__)


class AnthropicTierInference:
    """Implements both inference ports on top of one :class:`AnthropicClient`."""

    def __init__(self, client: AnthropicClient) -> None:
        self._client = client

    def answer(self, prompt: TierPrompt) -> TierAnswer:
        log.debug(
            "Calling %s for %s %s %s",
            self._client.model,
            prompt.tier,
            prompt.entity,
            prompt.field_id,
        )
        payload = self._client.complete_json(system=prompt.system, prompt=prompt.user)
        try:
            return TierAnswerPayload.model_validate(payload).to_answer()
        except ValidationError as exc:
            raise InferenceError(f"Malformed {prompt.tier} answer: {exc}") from exc

    def complete_json(self, *, system: str, prompt: str) -> dict[str, object]:
        return self._client.complete_json(system=system, prompt=prompt)
