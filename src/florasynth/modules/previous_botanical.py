"""Earlier binomials of the species from the GBIF backbone taxonomy."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from florasynth.adapters.gbif import GbifAPIError
from florasynth.domain.errors import ModuleFailure
from florasynth.domain.synthesis.contracts import ColumnSpec, ModuleDescriptor

from .botanical_name import MODULE_ID as BOTANICAL_NAME

if TYPE_CHECKING:
    from collections.abc import Mapping

    from florasynth.adapters.gbif import GbifClient
    from florasynth.domain.ports import LookupCache
    from florasynth.domain.types import ColumnValues, EntityKey

log = getLogger(__name__)

MODULE_ID = "previous-botanical"
CACHE_NAMESPACE = "gbif-synonyms"


class PreviousBotanicalModule:
    """Lists species-rank synonyms; unmatched names cache and report an empty list."""

    def __init__(self, client: GbifClient, cache: LookupCache | None = None) -> None:
        self._client = client
        self._cache = cache
        self._descriptor = ModuleDescriptor(
            id=MODULE_ID,
            display_name="Previous Botanical Names",
            columns=(
                ColumnSpec(
                    column_id="previouslyKnownAs",
                    header="Previously Known As",
                    source_label="GBIF Backbone Taxonomy API",
                    algorithm_description=(
                        "Matches the name with /species/match, then reads "
                        "/species/{key}/synonyms and keeps species-rank binomials only. "
                        "Comma separated."
                    ),
                ),
            ),
            dependencies=frozenset({BOTANICAL_NAME}),
            description="Retrieves legacy binomials for cross-reference.",
        )

    @property
    def descriptor(self) -> ModuleDescriptor:
        return self._descriptor

    def run(self, entity: EntityKey, prior_results: Mapping[str, ColumnValues]) -> ColumnValues:
        return {"previouslyKnownAs": ", ".join(self.synonyms(entity))}

    def synonyms(self, entity: EntityKey) -> list[str]:
        if self._cache is not None:
            cached = self._cache.get(CACHE_NAMESPACE, entity)
            if isinstance(cached, list):
                log.debug("Using cached GBIF synonyms for %s", entity)
                return [str(name) for name in cached]

        try:
            match = self._client.match_species(entity)
            if not match.matched or not match.is_species or match.usage_key is None:
                log.info("No species-level GBIF match for %s (%s)", entity, match.match_type)
                binomials: list[str] = []
            else:
                page = self._client.species_synonyms(match.usage_key)
                binomials = [name for name in page.species_binomials() if name != entity.binomial]
        except GbifAPIError as exc:
            raise ModuleFailure(str(exc)) from exc

        if self._cache is not None:
            self._cache.put(CACHE_NAMESPACE, entity, binomials)
        return binomials
