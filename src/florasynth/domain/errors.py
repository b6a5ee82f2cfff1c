"""Error taxonomy for the synthesis engine.

Load-time problems (``ConfigError``, ``ContractError``, ``CycleError``) are fatal and
raised before any module runs. ``ModuleFailure`` and ``TierFailure`` are recorded as
outcomes and never abort a run on their own. ``SinkError`` stops a batch; rows already
written stay written.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class SynthesisError(Exception):
    """Base class for every error raised by the synthesis engine."""


class ConfigError(SynthesisError):
    """Registry configuration names something that cannot be loaded."""


class ContractError(SynthesisError):
    """Module metadata or module output does not satisfy the module contract."""


class CycleError(SynthesisError):
    """The dependency graph of the loaded modules is not acyclic."""

    def __init__(self, module_ids: Iterable[str]) -> None:
        self.module_ids = tuple(module_ids)
        super().__init__(f"Dependency cycle among modules: {', '.join(self.module_ids)}")


class ModuleFailure(SynthesisError):
    """Raised by a synthesis module that cannot produce its columns."""


class TierFailure(SynthesisError):
    """A single tier of the three-tier protocol could not produce an answer."""

    def __init__(self, message: str, *, transient: bool = False) -> None:
        super().__init__(message)
        self.transient = transient


class SourceUnavailableError(TierFailure):
    """A source provider could not be reached; "no data" is never reported this way."""


class InferenceError(TierFailure):
    """The inference capability failed; ``transient`` tells whether a retry could help."""


class CacheError(SynthesisError):
    """An answer or lookup cache could not be read or written."""


class SinkError(SynthesisError):
    """The record sink rejected a schema or a batch of rows."""
