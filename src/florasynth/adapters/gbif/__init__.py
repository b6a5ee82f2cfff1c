"""GBIF species lookups."""

from __future__ import annotations

from .client import GbifAPIError, GbifClient
from .schema import GbifNameUsage, GbifSpeciesMatch, GbifSynonymPage

__all__ = [
    "GbifAPIError",
    "GbifClient",
    "GbifNameUsage",
    "GbifSpeciesMatch",
    "GbifSynonymPage",
]
