"""Seed collection fields answered with the three-tier protocol."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from florasynth.domain.tiered import TieredFieldModule

if TYPE_CHECKING:
    from florasynth.domain.tiered import ThreeTierFieldProcessor


@dataclass(frozen=True, slots=True)
class TieredField:
    field_id: str
    header: str
    algorithm_description: str


TIERED_FIELDS: tuple[TieredField, ...] = (
    TieredField(
        field_id="collection_mature_seed_color",
        header="Seed Color at Maturity",
        algorithm_description=(
            "Tier 1 uses trusted sources (Tier1 documents, Michigan Flora, Lake County "
            "guide), tier 2 adds secondary sources (Missouri seedling guide, page "
            "content, Missouri Department of Conservation) plus the tier 1 answer, tier "
            "3 uses model knowledge alone. JSON document with all three tiers."
        ),
    ),
    TieredField(
        field_id="collection_miss_risk",
        header="Collection Miss Risk",
        algorithm_description=(
            "Three-tier assessment of how easily seeds are lost before collection. "
            "Each tier answers Low, Moderate or High with a brief attribution."
        ),
    ),
)


def tiered_field_module(
    field: TieredField,
    processor: ThreeTierFieldProcessor,
) -> TieredFieldModule:
    return TieredFieldModule(
        field_id=field.field_id,
        header=field.header,
        algorithm_description=field.algorithm_description,
        processor=processor,
    )
