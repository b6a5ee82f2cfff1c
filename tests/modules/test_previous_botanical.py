from __future__ import annotations

import pytest

from florasynth.adapters.gbif import GbifAPIError, GbifSpeciesMatch, GbifSynonymPage
from florasynth.domain.errors import ModuleFailure
from florasynth.domain.types import EntityKey
from florasynth.modules.previous_botanical import CACHE_NAMESPACE, PreviousBotanicalModule
from tests.helpers.inference import MemoryLookupCache

ENTITY = EntityKey.of("Symphyotrichum", "novae-angliae")


class FakeGbifClient:
    def __init__(
        self,
        match: dict[str, object],
        synonyms: list[dict[str, object]] | None = None,
        *,
        error: GbifAPIError | None = None,
    ) -> None:
        self._match = match
        self._synonyms = synonyms or []
        self._error = error
        self.calls: list[str] = []

    def match_species(self, entity: EntityKey) -> GbifSpeciesMatch:
        self.calls.append(f"match:{entity.binomial}")
        if self._error is not None:
            raise self._error
        return GbifSpeciesMatch.model_validate(self._match)

    def species_synonyms(self, usage_key: int) -> GbifSynonymPage:
        self.calls.append(f"synonyms:{usage_key}")
        return GbifSynonymPage.model_validate({"results": self._synonyms})


SPECIES_MATCH = {"usageKey": 3146791, "rank": "SPECIES", "matchType": "EXACT"}
SYNONYMS = [
    {"key": 1, "canonicalName": "Aster novae-angliae", "rank": "SPECIES"},
    {"key": 2, "canonicalName": "Aster novae-angliae", "rank": "SPECIES"},
    {"key": 3, "canonicalName": "Aster novae-angliae roseus", "rank": "VARIETY"},
    {"key": 4, "canonicalName": "Lasallea novae-angliae", "rank": "SPECIES"},
    {"key": 5, "canonicalName": "Symphyotrichum novae-angliae", "rank": "SPECIES"},
]


def test_species_rank_synonyms_are_listed_once() -> None:
    client = FakeGbifClient(SPECIES_MATCH, SYNONYMS)

    values = PreviousBotanicalModule(client).run(ENTITY, {})  # type: ignore[arg-type]

    assert values == {"previouslyKnownAs": "Aster novae-angliae, Lasallea novae-angliae"}
    assert client.calls == ["match:Symphyotrichum novae-angliae", "synonyms:3146791"]


def test_non_species_match_gives_an_empty_column() -> None:
    client = FakeGbifClient({"usageKey": 7, "rank": "GENUS", "matchType": "HIGHERRANK"})

    values = PreviousBotanicalModule(client).run(ENTITY, {})  # type: ignore[arg-type]

    assert values == {"previouslyKnownAs": ""}
    assert client.calls == ["match:Symphyotrichum novae-angliae"]


def test_results_are_cached_including_empty_ones() -> None:
    cache = MemoryLookupCache()
    client = FakeGbifClient({"matchType": "NONE"})
    module = PreviousBotanicalModule(client, cache)  # type: ignore[arg-type]

    module.run(ENTITY, {})
    module.run(ENTITY, {})

    assert cache.entries[(CACHE_NAMESPACE, ENTITY)] == []
    assert len(client.calls) == 1


def test_cached_synonyms_skip_the_api() -> None:
    cache = MemoryLookupCache()
    cache.put(CACHE_NAMESPACE, ENTITY, ["Aster novae-angliae"])
    client = FakeGbifClient(SPECIES_MATCH, SYNONYMS)

    values = PreviousBotanicalModule(client, cache).run(ENTITY, {})  # type: ignore[arg-type]

    assert values == {"previouslyKnownAs": "Aster novae-angliae"}
    assert client.calls == []


def test_api_errors_become_module_failures() -> None:
    cache = MemoryLookupCache()
    client = FakeGbifClient(SPECIES_MATCH, error=GbifAPIError("GBIF request failed"))

    with pytest.raises(ModuleFailure, match="GBIF request failed"):
        PreviousBotanicalModule(client, cache).run(ENTITY, {})  # type: ignore[arg-type]

    assert cache.entries == {}
