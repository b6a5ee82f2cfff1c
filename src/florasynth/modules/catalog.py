"""The registration table of every synthesis module florasynth ships."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from florasynth.domain.synthesis.registry import ModuleRegistry
from florasynth.domain.tiered import tiered_module_id

from .botanical_name import MODULE_ID as BOTANICAL_NAME
from .botanical_name import BotanicalNameModule
from .common_names import MODULE_ID as COMMON_NAMES
from .common_names import CommonNamesModule
from .external_urls import MODULE_ID as EXTERNAL_URLS
from .external_urls import ExternalReferenceUrlsModule
from .native_status import MODULE_ID as NATIVE_CHECKER
from .native_status import NativeStatusModule
from .previous_botanical import MODULE_ID as PREVIOUS_BOTANICAL
from .previous_botanical import PreviousBotanicalModule
from .tiered_fields import TIERED_FIELDS, tiered_field_module

if TYPE_CHECKING:
    from collections.abc import Callable

    from florasynth.adapters.gbif import GbifClient
    from florasynth.adapters.serpapi import SerpApiClient
    from florasynth.domain.ports import LookupCache, StructuredInference
    from florasynth.domain.tiered import ThreeTierFieldProcessor


@dataclass(slots=True, kw_only=True)
class ModuleServices:
    """Collaborators the shipped modules are built from.

    Factories are called lazily, so a module that is not enabled never creates
    its client.
    """

    inference: Callable[[], StructuredInference]
    gbif: Callable[[], GbifClient]
    search: Callable[[], SerpApiClient | None]
    processor: Callable[[], ThreeTierFieldProcessor]
    lookup_cache: LookupCache | None = None


DEFAULT_MODULE_ORDER: tuple[str, ...] = (
    BOTANICAL_NAME,
    NATIVE_CHECKER,
    COMMON_NAMES,
    PREVIOUS_BOTANICAL,
    EXTERNAL_URLS,
    *(tiered_module_id(field.field_id) for field in TIERED_FIELDS),
)


def build_registry(services: ModuleServices) -> ModuleRegistry:
    registry = ModuleRegistry()
    registry.register(BOTANICAL_NAME, lambda: BotanicalNameModule(services.inference()))
    registry.register(NATIVE_CHECKER, lambda: NativeStatusModule(services.inference()))
    registry.register(COMMON_NAMES, lambda: CommonNamesModule(services.inference()))
    registry.register(
        PREVIOUS_BOTANICAL,
        lambda: PreviousBotanicalModule(services.gbif(), services.lookup_cache),
    )
    registry.register(
        EXTERNAL_URLS,
        lambda: ExternalReferenceUrlsModule(services.search(), services.lookup_cache),
    )
    for field in TIERED_FIELDS:
        registry.register(
            tiered_module_id(field.field_id),
            lambda field=field: tiered_field_module(field, services.processor()),
        )
    return registry
