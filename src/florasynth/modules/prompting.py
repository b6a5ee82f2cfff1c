"""Helpers shared by modules that ask the inference capability for JSON."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ValidationError

from florasynth.domain.errors import ModuleFailure, TierFailure

if TYPE_CHECKING:
    from florasynth.domain.ports import StructuredInference

JSON_ONLY = "Respond with ONLY the JSON object, no markdown, no explanations."


def ask[M: BaseModel](
    inference: StructuredInference,
    reply_model: type[M],
    *,
    system: str,
    prompt: str,
) -> M:
    """Run one prompt and validate the reply, raising :class:`ModuleFailure` on any error."""

    try:
        payload = inference.complete_json(system=system, prompt=f"{prompt}\n\n{JSON_ONLY}")
    except TierFailure as exc:
        raise ModuleFailure(str(exc)) from exc
    try:
        return reply_model.model_validate(payload)
    except ValidationError as exc:
        raise ModuleFailure(f"Unexpected reply shape for {reply_model.__name__}") from exc
