"""GBIF species API response schemas."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)


class GbifRank(StrEnum):
    FAMILY = "FAMILY"
    GENUS = "GENUS"
    SPECIES = "SPECIES"
    SUBSPECIES = "SUBSPECIES"
    VARIETY = "VARIETY"
    FORM = "FORM"


class GbifBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug("GBIF %s: unmodeled keys: %s", type(self).__name__, ", ".join(sorted(new_keys)))


class GbifSpeciesMatch(GbifBaseModel):
    usage_key: int | None = Field(default=None, alias="usageKey")
    scientific_name: str | None = Field(default=None, alias="scientificName")
    canonical_name: str | None = Field(default=None, alias="canonicalName")
    rank: str | None = None
    status: str | None = None
    match_type: str = Field(default="NONE", alias="matchType")
    confidence: int | None = None
    family: str | None = None
    synonym: bool = False
    accepted_usage_key: int | None = Field(default=None, alias="acceptedUsageKey")
    note: str | None = None

    @property
    def matched(self) -> bool:
        return self.usage_key is not None

    @property
    def is_species(self) -> bool:
        return self.rank == GbifRank.SPECIES


class GbifNameUsage(GbifBaseModel):
    key: int
    scientific_name: str | None = Field(default=None, alias="scientificName")
    canonical_name: str | None = Field(default=None, alias="canonicalName")
    rank: str | None = None
    taxonomic_status: str | None = Field(default=None, alias="taxonomicStatus")


class GbifSynonymPage(GbifBaseModel):
    offset: int = 0
    limit: int = 0
    end_of_records: bool = Field(default=True, alias="endOfRecords")
    results: list[GbifNameUsage] = Field(default_factory=list[GbifNameUsage])

    def species_binomials(self) -> list[str]:
        """Canonical names of species-rank synonyms; varieties and subspecies are dropped."""

        binomials: list[str] = []
        for usage in self.results:
            name = (usage.canonical_name or "").strip()
            if usage.rank == GbifRank.SPECIES and name and name not in binomials:
                binomials.append(name)
        return binomials
