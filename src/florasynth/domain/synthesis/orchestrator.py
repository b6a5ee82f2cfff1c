"""Load-once synthesis pipeline: loaded modules, resolved order and column schema."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from .executor import PipelineRun
from .registry import load_enabled_modules, validate_descriptors
from .resolver import resolve_order
from .schema import ColumnSchema, build_column_schema

if TYPE_CHECKING:
    from florasynth.config.pipeline import RegistryConfig
    from florasynth.domain.types import EntityKey

    from .contracts import SynthesisModule
    from .executor import RunReport
    from .registry import ModuleRegistry

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SynthesisPipeline:
    """Resolved modules and their schema, computed once and then read-only.

    Runs share nothing but this object, so several entities may go through the
    same pipeline from different threads.
    """

    modules: tuple[SynthesisModule, ...]
    schema: ColumnSchema

    @classmethod
    def load(cls, config: RegistryConfig, registry: ModuleRegistry) -> SynthesisPipeline:
        ordered = resolve_order(load_enabled_modules(config, registry))
        log.info(
            "Pipeline order: %s",
            " -> ".join(module.descriptor.id for module in ordered),
        )
        return cls(modules=ordered, schema=build_column_schema(ordered))

    @classmethod
    def from_modules(cls, modules: tuple[SynthesisModule, ...]) -> SynthesisPipeline:
        validate_descriptors([module.descriptor for module in modules])
        ordered = resolve_order(modules)
        return cls(modules=ordered, schema=build_column_schema(ordered))

    @property
    def module_ids(self) -> tuple[str, ...]:
        return tuple(module.descriptor.id for module in self.modules)

    def start(self, entity: EntityKey) -> PipelineRun:
        """Create a run that the caller advances with ``iter_steps``."""

        return PipelineRun(entity=entity, modules=self.modules)

    def run(self, entity: EntityKey) -> RunReport:
        return self.start(entity).run()
