"""Batch processing of several entities through one pipeline."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from florasynth.domain.ports import RecordSink
    from florasynth.domain.synthesis import RunReport, SynthesisPipeline
    from florasynth.domain.types import EntityKey, Record

log = getLogger(__name__)


@dataclass(slots=True, frozen=True, kw_only=True)
class EntityFailure:
    entity: EntityKey
    reason: str


@dataclass(slots=True, kw_only=True)
class BatchReport:
    reports: list[RunReport] = field(default_factory=list["RunReport"])
    records: list[Record] = field(default_factory=list["Record"])
    failures: list[EntityFailure] = field(default_factory=list[EntityFailure])
    rows_written: int = 0

    @property
    def success_count(self) -> int:
        return len(self.records)

    @property
    def failure_count(self) -> int:
        return len(self.failures)


def run_batch(
    pipeline: SynthesisPipeline,
    entities: Sequence[EntityKey],
    sink: RecordSink | None = None,
    *,
    max_workers: int = 1,
) -> BatchReport:
    """Run every entity, then hand the records of the successful ones to ``sink``.

    An entity fails when a critical module fails; its record is left out and the
    batch carries on. Records are gathered first and written in one append, so a
    batch without a single valid record never touches the sink. ``SinkError``
    propagates to the caller.
    """

    if max_workers > 1 and len(entities) > 1:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="entity") as pool:
            reports = list(pool.map(pipeline.run, entities))
    else:
        reports = [pipeline.run(entity) for entity in entities]

    batch = BatchReport(reports=reports)
    for report in reports:
        if report.critical_failure:
            outcome = report.outcome_for(report.aborted_by or "")
            reason = getattr(outcome, "reason", "critical module failed")
            batch.failures.append(EntityFailure(entity=report.entity, reason=reason))
            log.warning("Excluding %s from output: %s", report.entity, reason)
        else:
            batch.records.append(report.record)

    log.info(
        "Batch finished: %d succeeded, %d failed",
        batch.success_count,
        batch.failure_count,
    )
    if sink is None or not batch.records:
        return batch

    sink.create(pipeline.schema)
    sink.append(batch.records)
    batch.rows_written = len(batch.records)
    return batch
