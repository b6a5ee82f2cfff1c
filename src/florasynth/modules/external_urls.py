"""Reference pages about the species on well known botanical sites."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote_plus

from florasynth.adapters.serpapi import SerpApiError
from florasynth.domain.synthesis.contracts import ColumnSpec, ModuleDescriptor

from .botanical_name import MODULE_ID as BOTANICAL_NAME

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from florasynth.adapters.serpapi import SerpApiClient
    from florasynth.domain.ports import LookupCache
    from florasynth.domain.types import ColumnValues, EntityKey

log = getLogger(__name__)

MODULE_ID = "external-reference-urls"
CACHE_NAMESPACE = "external-reference-urls"


@dataclass(frozen=True, slots=True)
class ReferenceSite:
    """A site searched with ``site:<base_url>``, or linked directly when ``direct``."""

    name: str
    base_url: str
    direct: bool = False

    def direct_url(self, entity: EntityKey) -> str:
        return f"https://www.{self.base_url}&q={quote_plus(entity.binomial)}"

    def search_query(self, entity: EntityKey) -> str:
        return f"site:{self.base_url} {entity.binomial}"


DEFAULT_SITES: tuple[ReferenceSite, ...] = (
    ReferenceSite(name="Google Images", base_url="google.com/search?tbm=isch", direct=True),
    ReferenceSite(name="Michigan Flora", base_url="michiganflora.net"),
    ReferenceSite(name="Missouri Botanical Garden", base_url="missouribotanicalgarden.org"),
    ReferenceSite(name="Lady Bird Johnson Wildflower Center", base_url="wildflower.org"),
    ReferenceSite(name="Illinois Wildflowers", base_url="illinoiswildflowers.info"),
    ReferenceSite(name="Prairie Moon Nursery", base_url="prairiemoon.com"),
    ReferenceSite(name="USDA PLANTS", base_url="plants.usda.gov"),
)


class ExternalReferenceUrlsModule:
    """Maps site names to URLs; searched sites are skipped without a SerpApi client."""

    def __init__(
        self,
        search: SerpApiClient | None,
        cache: LookupCache | None = None,
        sites: Sequence[ReferenceSite] = DEFAULT_SITES,
    ) -> None:
        self._search = search
        self._cache = cache
        self._sites = tuple(sites)
        self._descriptor = ModuleDescriptor(
            id=MODULE_ID,
            display_name="External Reference URLs",
            columns=(
                ColumnSpec(
                    column_id="externalReferenceUrls",
                    header="External Reference URLs",
                    source_label="SerpApi Google search",
                    algorithm_description=(
                        "Top result of a site: search per configured reference site; "
                        "image search links are built directly. JSON object of site name "
                        "to URL, cached per species."
                    ),
                ),
            ),
            dependencies=frozenset({BOTANICAL_NAME}),
            description="Discovers reference pages for the species.",
        )

    @property
    def descriptor(self) -> ModuleDescriptor:
        return self._descriptor

    def run(self, entity: EntityKey, prior_results: Mapping[str, ColumnValues]) -> ColumnValues:
        return {"externalReferenceUrls": self.discover(entity)}

    def discover(self, entity: EntityKey) -> dict[str, str]:
        if self._cache is not None:
            cached = self._cache.get(CACHE_NAMESPACE, entity)
            if isinstance(cached, dict) and cached:
                return {str(name): str(url) for name, url in cached.items()}

        if self._search is None:
            log.warning("SERPAPI_API_KEY not set; only direct URLs are generated for %s", entity)

        urls: dict[str, str] = {}
        searched = 0
        for site in self._sites:
            if site.direct:
                urls[site.name] = site.direct_url(entity)
                continue
            if self._search is None:
                continue
            try:
                link = self._search.top_result(site.search_query(entity))
            except SerpApiError as exc:
                log.warning("Search on %s failed for %s: %s", site.name, entity, exc)
                continue
            if link:
                urls[site.name] = link
                searched += 1

        # direct links alone are never cached
        if self._cache is not None and searched:
            self._cache.put(CACHE_NAMESPACE, entity, dict(urls))
        log.info("Discovered %d/%d reference URLs for %s", len(urls), len(self._sites), entity)
        return urls
