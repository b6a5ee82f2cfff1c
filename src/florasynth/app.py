"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from functools import cache
from logging import getLogger
from typing import TYPE_CHECKING

from florasynth.adapters.anthropic import AnthropicClient, AnthropicTierInference
from florasynth.adapters.gbif import GbifClient
from florasynth.adapters.rules import TomlFieldRuleProvider
from florasynth.adapters.serpapi import SerpApiClient
from florasynth.adapters.sinks import OutputLocationCache, WorkbookSink
from florasynth.adapters.sources import DirectorySourceProvider
from florasynth.adapters.sqlalchemy import (
    SqlAlchemyLookupCache,
    SqlAlchemyTierCache,
    is_started,
    startup,
)
from florasynth.config import (
    BatchConfig,
    get_anthropic_config,
    get_gbif_config,
    get_output_config,
    get_registry_config,
    get_rules_dir,
    get_serpapi_config,
    get_source_directories,
    get_storage_config,
)
from florasynth.domain.batch import BatchReport, run_batch
from florasynth.domain.synthesis import ModuleStatus, SynthesisPipeline
from florasynth.domain.tiered import ThreeTierFieldProcessor
from florasynth.modules import DEFAULT_MODULE_ORDER, ModuleServices, build_registry

if TYPE_CHECKING:
    from collections.abc import Sequence

    from florasynth.domain.synthesis import ColumnSchema, RunReport
    from florasynth.domain.tiered import TieredFieldResult
    from florasynth.domain.types import EntityKey

log = getLogger(__name__)

SOURCE_LABELS = {
    "tier1-drive": "Tier 1 reference documents",
    "michigan-flora": "Michigan Flora",
    "lake-county": "Lake County Native Plant Guide",
    "missouri-seedling-guide": "Missouri Seedling Guide",
    "page-content": "Validated page content",
    "missouri-conservation": "Missouri Department of Conservation",
}


@dataclass(slots=True, kw_only=True, eq=False)
class _Services:
    """Lazily built adapters shared by every module of one process."""

    force_refresh: bool = False

    def __post_init__(self) -> None:
        if not is_started():
            startup()

    @cache  # noqa: B019
    def inference(self) -> AnthropicTierInference:
        client = AnthropicClient(config=get_anthropic_config())
        log.info("Using Anthropic model %s", client.model)
        return AnthropicTierInference(client)

    @cache  # noqa: B019
    def gbif(self) -> GbifClient:
        return GbifClient(config=get_gbif_config())

    @cache  # noqa: B019
    def search(self) -> SerpApiClient | None:
        config = get_serpapi_config()
        if not config.enabled:
            log.info("SERPAPI_API_KEY not set; reference sites will not be searched")
            return None
        return SerpApiClient(config=config)

    @cache  # noqa: B019
    def processor(self) -> ThreeTierFieldProcessor:
        directories = get_source_directories()
        return ThreeTierFieldProcessor(
            trusted_sources=DirectorySourceProvider(directories.tier1, labels=SOURCE_LABELS),
            secondary_sources=DirectorySourceProvider(directories.tier2, labels=SOURCE_LABELS),
            inference=self.inference(),
            rules=TomlFieldRuleProvider(get_rules_dir()),
            cache=SqlAlchemyTierCache(),
            force_refresh=self.force_refresh,
        )

    def module_services(self) -> ModuleServices:
        return ModuleServices(
            inference=self.inference,
            gbif=self.gbif,
            search=self.search,
            processor=self.processor,
            lookup_cache=SqlAlchemyLookupCache(),
        )


def build_pipeline(*, force_refresh: bool = False) -> SynthesisPipeline:
    """Load the enabled modules from the registration table and resolve their order."""

    services = _Services(force_refresh=force_refresh)
    registry = build_registry(services.module_services())
    return SynthesisPipeline.load(get_registry_config(DEFAULT_MODULE_ORDER), registry)


def describe_schema() -> ColumnSchema:
    """Return the output columns of the enabled modules without calling any service."""

    return build_pipeline().schema


def process_entity(entity: EntityKey, *, force_refresh: bool = False) -> RunReport:
    pipeline = build_pipeline(force_refresh=force_refresh)
    log.info("Processing %s through %d modules", entity, len(pipeline.module_ids))
    report = pipeline.run(entity)
    log.info(
        "Finished %s: succeeded=%s, failed=%s, skipped=%s",
        entity,
        report.count(ModuleStatus.SUCCEEDED),
        report.count(ModuleStatus.FAILED),
        report.count(ModuleStatus.SKIPPED),
    )
    return report


def process_batch(
    entities: Sequence[EntityKey],
    *,
    batch: BatchConfig | None = None,
    write_output: bool = True,
) -> tuple[BatchReport, WorkbookSink | None]:
    """Run a batch and write the valid records to a fresh workbook."""

    settings = batch or BatchConfig()
    pipeline = build_pipeline(force_refresh=settings.force_refresh)
    sink = (
        WorkbookSink(
            config=get_output_config(storage=get_storage_config()),
            locations=OutputLocationCache(),
        )
        if write_output
        else None
    )
    log.info(
        "Starting batch: entities=%s, workers=%s, force_refresh=%s",
        len(entities),
        settings.max_workers,
        settings.force_refresh,
    )
    report = run_batch(pipeline, entities, sink, max_workers=settings.max_workers)
    if sink is not None and sink.path is not None:
        log.info("Wrote %d rows to %s", report.rows_written, sink.path)
    return report, sink


def process_field(
    entity: EntityKey,
    field_id: str,
    *,
    force_refresh: bool = False,
) -> TieredFieldResult:
    """Run the three tiers for one field outside of the module pipeline."""

    services = _Services(force_refresh=force_refresh)
    return services.processor().process(entity, field_id)


def clear_lookup_cache(namespace: str | None = None) -> int:
    if not is_started():
        startup()
    removed = SqlAlchemyLookupCache().clear(namespace)
    log.info("Removed %d cached lookups (namespace=%s)", removed, namespace or "all")
    return removed
