"""Port for field rule sets."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from florasynth.domain.tiered.contracts import FieldRules


@runtime_checkable
class FieldRuleProvider(Protocol):
    """Returns the rules of a field; an unknown field raises ``ConfigError``."""

    def rules_for(self, field_id: str) -> FieldRules:
        ...
