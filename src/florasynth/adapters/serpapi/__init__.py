"""SerpApi web search."""

from __future__ import annotations

from .client import SerpApiClient, SerpApiError
from .schema import OrganicResult, SearchResponse

__all__ = ["OrganicResult", "SearchResponse", "SerpApiClient", "SerpApiError"]
