from __future__ import annotations

from florasynth.adapters.serpapi import SerpApiError
from florasynth.domain.types import EntityKey
from florasynth.modules.external_urls import (
    CACHE_NAMESPACE,
    ExternalReferenceUrlsModule,
    ReferenceSite,
)
from tests.helpers.inference import MemoryLookupCache

ENTITY = EntityKey.of("Asclepias", "tuberosa")

SITES = (
    ReferenceSite(name="Google Images", base_url="google.com/search?tbm=isch", direct=True),
    ReferenceSite(name="Michigan Flora", base_url="michiganflora.net"),
    ReferenceSite(name="Prairie Moon Nursery", base_url="prairiemoon.com"),
)


class FakeSearch:
    def __init__(self, links: dict[str, str | None | SerpApiError]) -> None:
        self._links = links
        self.queries: list[str] = []

    def top_result(self, query: str) -> str | None:
        self.queries.append(query)
        for site, link in self._links.items():
            if site in query:
                if isinstance(link, SerpApiError):
                    raise link
                return link
        return None


def test_direct_sites_are_built_and_others_searched() -> None:
    search = FakeSearch(
        {
            "michiganflora.net": "https://michiganflora.net/species/asclepias-tuberosa",
            "prairiemoon.com": None,
        }
    )
    module = ExternalReferenceUrlsModule(search, sites=SITES)  # type: ignore[arg-type]

    values = module.run(ENTITY, {})

    assert values == {
        "externalReferenceUrls": {
            "Google Images": "https://www.google.com/search?tbm=isch&q=Asclepias+tuberosa",
            "Michigan Flora": "https://michiganflora.net/species/asclepias-tuberosa",
        }
    }
    assert search.queries == [
        "site:michiganflora.net Asclepias tuberosa",
        "site:prairiemoon.com Asclepias tuberosa",
    ]


def test_without_search_only_direct_links_are_returned_and_nothing_is_cached() -> None:
    cache = MemoryLookupCache()
    module = ExternalReferenceUrlsModule(None, cache, sites=SITES)

    urls = module.discover(ENTITY)

    assert list(urls) == ["Google Images"]
    assert cache.entries == {}


def test_failed_searches_are_skipped() -> None:
    search = FakeSearch(
        {
            "michiganflora.net": SerpApiError("quota"),
            "prairiemoon.com": "https://www.prairiemoon.com/asclepias-tuberosa",
        }
    )
    module = ExternalReferenceUrlsModule(search, sites=SITES)  # type: ignore[arg-type]

    urls = module.discover(ENTITY)

    assert set(urls) == {"Google Images", "Prairie Moon Nursery"}


def test_results_with_searched_links_are_cached() -> None:
    cache = MemoryLookupCache()
    search = FakeSearch({"michiganflora.net": "https://michiganflora.net/a"})
    module = ExternalReferenceUrlsModule(search, cache, sites=SITES)  # type: ignore[arg-type]

    first = module.discover(ENTITY)
    second = module.discover(ENTITY)

    assert first == second
    assert cache.entries[(CACHE_NAMESPACE, ENTITY)] == first
    assert len(search.queries) == 2
