"""Three-tier field processing."""

from __future__ import annotations

from .contracts import (
    Conflict,
    FieldRules,
    Granularity,
    SourceClaim,
    SourceExcerpt,
    SourceStats,
    Tier,
    TierAnswer,
    TieredFieldResult,
    TierFailureMarker,
    TierPrompt,
    TierSlot,
)
from .module import TieredFieldModule, tiered_module_id
from .processor import ThreeTierFieldProcessor

__all__ = [
    "Conflict",
    "FieldRules",
    "Granularity",
    "SourceClaim",
    "SourceExcerpt",
    "SourceStats",
    "ThreeTierFieldProcessor",
    "Tier",
    "TierAnswer",
    "TierFailureMarker",
    "TierPrompt",
    "TierSlot",
    "TieredFieldModule",
    "TieredFieldResult",
    "tiered_module_id",
]
