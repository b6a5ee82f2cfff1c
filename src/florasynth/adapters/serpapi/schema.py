"""SerpApi search response schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class OrganicResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    position: int | None = None
    title: str | None = None
    link: str


class SearchResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    organic_results: list[OrganicResult] = Field(default_factory=list[OrganicResult])
    error: str | None = None

    @property
    def top_link(self) -> str | None:
        return self.organic_results[0].link if self.organic_results else None
