"""Ports for the generative inference capability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from florasynth.domain.tiered.contracts import TierAnswer, TierPrompt


@runtime_checkable
class TierInference(Protocol):
    """Answers one tier prompt or raises ``InferenceError``."""

    def answer(self, prompt: TierPrompt) -> TierAnswer:
        ...


@runtime_checkable
class StructuredInference(Protocol):
    """Returns the JSON object the model produced for a free-form prompt."""

    def complete_json(self, *, system: str, prompt: str) -> Mapping[str, object]:
        ...
