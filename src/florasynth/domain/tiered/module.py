"""Synthesis module wrapping the three-tier processor for one field."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from florasynth.domain.errors import ModuleFailure
from florasynth.domain.synthesis.contracts import ColumnSpec, ModuleDescriptor

if TYPE_CHECKING:
    from collections.abc import Mapping

    from florasynth.domain.types import ColumnValues, EntityKey

    from .processor import ThreeTierFieldProcessor

log = getLogger(__name__)

TIERED_MODULE_PREFIX = "3tier-"
TIERED_SOURCE_LABEL = "Three-tier synthesis"


def tiered_module_id(field_id: str) -> str:
    return f"{TIERED_MODULE_PREFIX}{field_id}"


class TieredFieldModule:
    """One column holding the merged tier document of ``field_id``."""

    def __init__(
        self,
        *,
        field_id: str,
        header: str,
        algorithm_description: str,
        processor: ThreeTierFieldProcessor,
        dependencies: frozenset[str] = frozenset({"botanical-name"}),
        critical: bool = False,
    ) -> None:
        self._field_id = field_id
        self._processor = processor
        self._descriptor = ModuleDescriptor(
            id=tiered_module_id(field_id),
            display_name=header,
            columns=(
                ColumnSpec(
                    column_id=field_id,
                    header=header,
                    source_label=TIERED_SOURCE_LABEL,
                    algorithm_description=algorithm_description,
                ),
            ),
            dependencies=dependencies,
            critical=critical,
            description=(
                f"Three-tier prompting for {header}: trusted sources (tier 1), "
                "secondary sources plus tier 1 (tier 2) and independent model "
                "knowledge (tier 3)."
            ),
        )

    @property
    def descriptor(self) -> ModuleDescriptor:
        return self._descriptor

    def run(self, entity: EntityKey, prior_results: Mapping[str, ColumnValues]) -> ColumnValues:
        result = self._processor.process(entity, self._field_id)
        if result.all_failed:
            raise ModuleFailure(f"every tier failed for {self._field_id}")
        return {self._field_id: result.to_document()}
