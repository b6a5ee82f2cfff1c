"""Sequential execution of resolved modules for one entity."""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING

from pydantic import JsonValue, TypeAdapter, ValidationError

from florasynth.domain.errors import ContractError, ModuleFailure

from .contracts import Failed, ModuleStatus, Skipped, Succeeded

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence

    from florasynth.domain.types import ColumnValues, EntityKey, Record

    from .contracts import ModuleDescriptor, ModuleOutcome, SynthesisModule

log = getLogger(__name__)

_COLUMN_VALUES = TypeAdapter(dict[str, JsonValue])


@dataclass(slots=True, frozen=True, kw_only=True)
class RunReport:
    """Flattened record and ordered outcome log of one pipeline run."""

    entity: EntityKey
    record: Record
    outcomes: tuple[ModuleOutcome, ...]
    pending: tuple[str, ...] = ()
    aborted_by: str | None = None

    @property
    def critical_failure(self) -> bool:
        return self.aborted_by is not None

    @property
    def fully_succeeded(self) -> bool:
        return not self.pending and all(
            outcome.status is ModuleStatus.SUCCEEDED for outcome in self.outcomes
        )

    def outcome_for(self, module_id: str) -> ModuleOutcome | None:
        return next((o for o in self.outcomes if o.module_id == module_id), None)

    def count(self, status: ModuleStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)


@dataclass(slots=True)
class PipelineRun:
    """State of one entity going through the resolved module list.

    The run is advanced with :meth:`iter_steps`; a caller that stops iterating
    leaves the remaining modules pending. A module already dispatched always
    runs to completion.
    """

    entity: EntityKey
    modules: tuple[SynthesisModule, ...]
    clock: Callable[[], float] = time.perf_counter
    prior_results: dict[str, ColumnValues] = field(default_factory=dict[str, "ColumnValues"])
    outcomes: dict[str, ModuleOutcome] = field(default_factory=dict[str, "ModuleOutcome"])
    aborted_by: str | None = None

    def iter_steps(self) -> Iterator[ModuleOutcome]:
        for module in self.modules:
            descriptor = module.descriptor
            if descriptor.id in self.outcomes:
                continue
            outcome = self._step(module)
            self.outcomes[descriptor.id] = outcome
            yield outcome

    def run(self) -> RunReport:
        for _ in self.iter_steps():
            pass
        return self.report()

    def report(self) -> RunReport:
        record: Record = {}
        for outcome in self.outcomes.values():
            if isinstance(outcome, Succeeded):
                record.update(outcome.column_values)
        return RunReport(
            entity=self.entity,
            record=record,
            outcomes=tuple(self.outcomes.values()),
            pending=tuple(
                module.descriptor.id
                for module in self.modules
                if module.descriptor.id not in self.outcomes
            ),
            aborted_by=self.aborted_by,
        )

    def _step(self, module: SynthesisModule) -> ModuleOutcome:
        descriptor = module.descriptor
        blocker = self._blocking_dependency(descriptor)
        if blocker is not None:
            log.info("Skipping %s for %s: blocked by %s", descriptor.id, self.entity, blocker)
            return Skipped(module_id=descriptor.id, reason=f"blocked by {blocker}")
        if self.aborted_by is not None:
            return Skipped(
                module_id=descriptor.id,
                reason=f"run aborted after critical module {self.aborted_by} failed",
            )

        view = MappingProxyType(
            {dep: self.prior_results[dep] for dep in descriptor.dependencies}
        )
        log.debug("Running %s for %s", descriptor.id, self.entity)
        started = self.clock()
        try:
            values = check_column_values(descriptor, module.run(self.entity, view))
        except ModuleFailure as exc:
            outcome = self._fail(descriptor, str(exc), started)
        except ContractError as exc:
            outcome = self._fail(descriptor, f"contract violation: {exc}", started)
        except Exception as exc:  # noqa: BLE001 - any module error is isolated as Failed
            log.exception("Module %s raised for %s", descriptor.id, self.entity)
            outcome = self._fail(descriptor, f"{type(exc).__name__}: {exc}", started)
        else:
            self.prior_results[descriptor.id] = values
            log.info("Module %s succeeded for %s", descriptor.id, self.entity)
            return Succeeded(
                module_id=descriptor.id,
                column_values=values,
                elapsed_seconds=self.clock() - started,
            )

        if descriptor.critical:
            self.aborted_by = descriptor.id
            log.error(
                "Critical module %s failed for %s; aborting run", descriptor.id, self.entity
            )
        return outcome

    def _fail(self, descriptor: ModuleDescriptor, reason: str, started: float) -> Failed:
        log.warning("Module %s failed for %s: %s", descriptor.id, self.entity, reason)
        return Failed(
            module_id=descriptor.id,
            reason=reason,
            elapsed_seconds=self.clock() - started,
        )

    def _blocking_dependency(self, descriptor: ModuleDescriptor) -> str | None:
        for module_id, outcome in self.outcomes.items():
            if module_id in descriptor.dependencies and not isinstance(outcome, Succeeded):
                return module_id
        # a dependency without an outcome has not run before its dependent
        missing = sorted(descriptor.dependencies - self.outcomes.keys())
        return missing[0] if missing else None


def check_column_values(descriptor: ModuleDescriptor, values: object) -> dict[str, JsonValue]:
    """Validate that ``values`` has exactly the declared keys and JSON-compatible values."""

    if not isinstance(values, Mapping):
        raise ContractError(f"{descriptor.id} returned {type(values).__name__}, not a mapping")
    declared = set(descriptor.column_ids)
    produced = set(values)
    missing = sorted(declared - produced)
    extra = sorted(str(key) for key in produced - declared)
    if missing or extra:
        parts = []
        if missing:
            parts.append(f"missing {', '.join(missing)}")
        if extra:
            parts.append(f"unexpected {', '.join(extra)}")
        raise ContractError(f"{descriptor.id} columns: {'; '.join(parts)}")
    try:
        return _COLUMN_VALUES.validate_python(dict(values))
    except ValidationError as exc:
        raise ContractError(f"{descriptor.id} produced non-JSON values: {exc}") from exc


def run_modules(modules: Sequence[SynthesisModule], entity: EntityKey) -> RunReport:
    """Run already ordered ``modules`` for ``entity`` to completion."""

    return PipelineRun(entity=entity, modules=tuple(modules)).run()
