"""Domain port definitions for adapters."""

from __future__ import annotations

from .cache import LookupCache, TierCache, TierCacheKey
from .inference import StructuredInference, TierInference
from .rules import FieldRuleProvider
from .sink import RecordSink
from .sources import SourceProvider

__all__ = [
    "FieldRuleProvider",
    "LookupCache",
    "RecordSink",
    "SourceProvider",
    "StructuredInference",
    "TierCache",
    "TierCacheKey",
    "TierInference",
]
