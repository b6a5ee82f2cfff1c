"""Startup-time module registration table and the validating loader."""

from __future__ import annotations

import re
from logging import getLogger
from typing import TYPE_CHECKING

from florasynth.domain.errors import ConfigError, ContractError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence

    from florasynth.config.pipeline import RegistryConfig

    from .contracts import ModuleDescriptor, SynthesisModule

log = getLogger(__name__)

type ModuleFactory = Callable[[], SynthesisModule]

# lowercase words joined by hyphens; field ids inside tiered module ids keep underscores
MODULE_ID_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_]*(?:-[a-z0-9_]+)*$")


class ModuleRegistry:
    """Maps stable module ids to factories of statically typed modules."""

    def __init__(self) -> None:
        self._factories: dict[str, ModuleFactory] = {}

    def register(self, module_id: str, factory: ModuleFactory) -> None:
        if module_id in self._factories:
            raise ContractError(f"Module id registered twice: {module_id}")
        self._factories[module_id] = factory

    def __contains__(self, module_id: object) -> bool:
        return module_id in self._factories

    def __iter__(self) -> Iterator[str]:
        return iter(self._factories)

    def __len__(self) -> int:
        return len(self._factories)

    @property
    def ids(self) -> tuple[str, ...]:
        """Registered ids in registration order."""

        return tuple(self._factories)

    def create(self, module_id: str) -> SynthesisModule:
        try:
            factory = self._factories[module_id]
        except KeyError:
            raise ConfigError(f"Unknown module id: {module_id}") from None
        return factory()


def load_enabled_modules(
    config: RegistryConfig,
    registry: ModuleRegistry,
) -> tuple[SynthesisModule, ...]:
    """Instantiate the enabled modules and validate them as one set.

    Either every enabled module loads and passes validation or nothing is returned.
    """

    unknown = [module_id for module_id in config.enabled_modules if module_id not in registry]
    if unknown:
        raise ConfigError(f"Unknown module id(s): {', '.join(unknown)}")

    modules: list[SynthesisModule] = []
    for module_id in config.enabled_modules:
        module = registry.create(module_id)
        if module.descriptor.id != module_id:
            raise ContractError(
                f"Module registered as {module_id!r} describes itself as {module.descriptor.id!r}"
            )
        modules.append(module)

    validate_descriptors([module.descriptor for module in modules])
    log.debug("Loaded %d module(s): %s", len(modules), ", ".join(config.enabled_modules))
    return tuple(modules)


def validate_descriptors(descriptors: Sequence[ModuleDescriptor]) -> None:
    """Raise :class:`ContractError` for the first contract violation in ``descriptors``."""

    module_ids: set[str] = set()
    for descriptor in descriptors:
        _check_metadata(descriptor)
        if descriptor.id in module_ids:
            raise ContractError(f"Duplicate module id: {descriptor.id}")
        module_ids.add(descriptor.id)

    owners: dict[str, str] = {}
    for descriptor in descriptors:
        for column in descriptor.columns:
            owner = owners.get(column.column_id)
            if owner is not None:
                raise ContractError(
                    f"Column id {column.column_id!r} declared by both {owner} and {descriptor.id}"
                )
            owners[column.column_id] = descriptor.id

        if descriptor.id in descriptor.dependencies:
            raise ContractError(f"Module {descriptor.id} depends on itself")
        missing = sorted(descriptor.dependencies - module_ids)
        if missing:
            raise ContractError(
                f"Module {descriptor.id} depends on modules that are not loaded: "
                f"{', '.join(missing)}"
            )


def _check_metadata(descriptor: ModuleDescriptor) -> None:
    if not descriptor.id or not MODULE_ID_PATTERN.fullmatch(descriptor.id):
        raise ContractError(f"Module id must be kebab-case: {descriptor.id!r}")
    if not descriptor.display_name.strip():
        raise ContractError(f"Module {descriptor.id} has no display name")
    if not descriptor.columns:
        raise ContractError(f"Module {descriptor.id} declares no columns")
    for column in descriptor.columns:
        blank = [
            name
            for name in ("column_id", "header", "source_label", "algorithm_description")
            if not getattr(column, name).strip()
        ]
        if blank:
            raise ContractError(
                f"Module {descriptor.id} has a column with blank {', '.join(blank)}"
            )
