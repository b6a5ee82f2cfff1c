from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from florasynth.config import RegistryConfig
from florasynth.domain.errors import ContractError, CycleError
from florasynth.domain.synthesis import ModuleRegistry, Succeeded, SynthesisPipeline
from florasynth.domain.types import EntityKey
from tests.helpers.synthesis import FakeModule


def test_load_resolves_order_and_builds_schema() -> None:
    registry = ModuleRegistry()
    registry.register("native", lambda: FakeModule("native", dependencies=["name"]))
    registry.register("name", lambda: FakeModule("name", critical=True))

    pipeline = SynthesisPipeline.load(
        RegistryConfig(enabled_modules=("native", "name")),
        registry,
    )

    assert pipeline.module_ids == ("name", "native")
    assert pipeline.schema.column_ids == ("name-value", "native-value")


def test_load_rejects_cycles_before_any_module_runs() -> None:
    a = FakeModule("a", dependencies=["b"])
    b = FakeModule("b", dependencies=["a"])
    registry = ModuleRegistry()
    registry.register("a", lambda: a)
    registry.register("b", lambda: b)

    with pytest.raises(CycleError):
        SynthesisPipeline.load(RegistryConfig(enabled_modules=("a", "b")), registry)

    assert a.calls == []
    assert b.calls == []


def test_from_modules_validates_descriptors() -> None:
    with pytest.raises(ContractError):
        SynthesisPipeline.from_modules(
            (FakeModule("a", columns=["x"]), FakeModule("b", columns=["x"]))
        )


def test_start_returns_a_resumable_run() -> None:
    pipeline = SynthesisPipeline.from_modules((FakeModule("a"), FakeModule("b")))
    run = pipeline.start(EntityKey.of("Quercus", "alba"))

    first = next(run.iter_steps())
    report = run.run()

    assert first.module_id == "a"
    assert [outcome.module_id for outcome in report.outcomes] == ["a", "b"]


def test_runs_for_different_entities_share_nothing() -> None:
    pipeline = SynthesisPipeline.from_modules(
        (FakeModule("name"), FakeModule("native", dependencies=["name"]))
    )
    entities = [EntityKey.of("Quercus", species) for species in ("alba", "rubra", "velutina")]

    with ThreadPoolExecutor(max_workers=3) as pool:
        reports = list(pool.map(pipeline.run, entities))

    assert [report.entity for report in reports] == entities
    for report in reports:
        assert all(isinstance(outcome, Succeeded) for outcome in report.outcomes)
