from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from florasynth.adapters.sources import DirectorySourceProvider
from florasynth.domain.errors import (
    CacheError,
    ConfigError,
    InferenceError,
    SourceUnavailableError,
)
from florasynth.domain.tiered import (
    Granularity,
    ThreeTierFieldProcessor,
    Tier,
    TierAnswer,
    TierFailureMarker,
)
from florasynth.domain.types import EntityKey
from tests.helpers.tiered import (
    MISS_RISK,
    SEED_COLOR,
    FakeSources,
    FakeTierInference,
    MemoryTierCache,
    StaticRules,
    excerpt,
)

if TYPE_CHECKING:
    from pathlib import Path

    from florasynth.domain.ports import SourceProvider, TierCache, TierCacheKey

ENTITY = EntityKey.of("Quercus", "alba")
PROCESSED_AT = datetime(2025, 5, 1, tzinfo=UTC)


def _processor(
    *,
    trusted: SourceProvider | None = None,
    secondary: SourceProvider | None = None,
    inference: FakeTierInference | None = None,
    cache: TierCache | None = None,
    force_refresh: bool = False,
    concurrent: bool = False,
) -> ThreeTierFieldProcessor:
    return ThreeTierFieldProcessor(
        trusted_sources=trusted or FakeSources([excerpt("michigan-flora", "Seeds brown")]),
        secondary_sources=secondary or FakeSources([excerpt("page-content", "Seeds tan")]),
        inference=inference or FakeTierInference(),
        rules=StaticRules(SEED_COLOR, MISS_RISK),
        cache=cache,
        force_refresh=force_refresh,
        concurrent=concurrent,
        clock=lambda: PROCESSED_AT,
    )


@pytest.mark.parametrize("concurrent", [False, True])
def test_all_three_tiers_are_kept_side_by_side(concurrent: bool) -> None:
    inference = FakeTierInference()
    processor = _processor(inference=inference, concurrent=concurrent)

    result = processor.process(ENTITY, SEED_COLOR.field_id)

    assert [slot.value for slot in result.slots] == [  # type: ignore[union-attr]
        "tier1 answer",
        "tier2 answer",
        "tier3 answer",
    ]
    assert result.processed_at == PROCESSED_AT
    assert result.source_stats.tier1 == 1
    assert result.source_stats.tier2 == 1
    assert {prompt.tier for prompt in inference.prompts} == set(Tier)


def test_tier3_prompt_never_contains_source_data() -> None:
    inference = FakeTierInference()

    _processor(inference=inference).process(ENTITY, SEED_COLOR.field_id)

    (tier3_prompt,) = inference.prompts_for(Tier.INDEPENDENT)
    assert "Seeds brown" not in tier3_prompt.user
    assert "Seeds tan" not in tier3_prompt.user
    assert "Genus: Quercus" in tier3_prompt.user


@pytest.mark.parametrize("concurrent", [False, True])
def test_tier3_matches_a_standalone_run(concurrent: bool) -> None:
    def tier3(prompt):  # type: ignore[no-untyped-def]
        return TierAnswer(
            value="Brown",
            attribution="general knowledge",
            granularity=Granularity.GENUS,
        )

    full = FakeTierInference({Tier.INDEPENDENT: tier3})
    alone = FakeTierInference({Tier.INDEPENDENT: tier3})

    result = _processor(inference=full, concurrent=concurrent).process(
        ENTITY, SEED_COLOR.field_id
    )
    standalone = _processor(inference=alone).run_independent_tier(ENTITY, SEED_COLOR)

    assert result.tier3 == standalone
    assert full.prompts_for(Tier.INDEPENDENT) == alone.prompts_for(Tier.INDEPENDENT)


def test_tier3_is_unaffected_by_failing_sources() -> None:
    inference = FakeTierInference()
    processor = _processor(
        trusted=FakeSources(error=SourceUnavailableError("drive offline", transient=True)),
        secondary=FakeSources(error=SourceUnavailableError("cache missing")),
        inference=inference,
    )

    result = processor.process(ENTITY, SEED_COLOR.field_id)

    assert result.tier1 == TierFailureMarker(reason="drive offline", transient=True)
    assert result.tier2 == TierFailureMarker(reason="cache missing")
    assert isinstance(result.tier3, TierAnswer)
    assert result.tier3.value == "tier3 answer"
    assert result.source_stats.tier1 == 0


def test_tier2_conflicts_follow_disagreeing_claims() -> None:
    disagreeing = FakeSources(
        [
            excerpt("missouri-seedling-guide", claim="Brown"),
            excerpt("page-content", claim="Black"),
        ]
    )
    agreeing = FakeSources(
        [
            excerpt("missouri-seedling-guide", claim="Brown"),
            excerpt("page-content", claim="brown"),
        ]
    )

    with_conflict = _processor(secondary=disagreeing).process(ENTITY, SEED_COLOR.field_id)
    without_conflict = _processor(secondary=agreeing).process(ENTITY, SEED_COLOR.field_id)

    assert isinstance(with_conflict.tier2, TierAnswer)
    assert len(with_conflict.tier2.conflicts) == 1
    assert with_conflict.tier2.conflicts[0].source_ids == (
        "missouri-seedling-guide",
        "page-content",
    )
    assert isinstance(without_conflict.tier2, TierAnswer)
    assert without_conflict.tier2.conflicts == ()
    assert with_conflict.source_stats.tier2 == 2


def test_tier2_prompt_includes_the_tier1_answer() -> None:
    inference = FakeTierInference(
        {Tier.TRUSTED: lambda prompt: TierAnswer(value="Brown", attribution="Michigan Flora")}
    )

    _processor(inference=inference).process(ENTITY, SEED_COLOR.field_id)

    (tier2_prompt,) = inference.prompts_for(Tier.EXPANDED)
    assert '"value": "Brown"' in tier2_prompt.user
    assert "Seeds tan" in tier2_prompt.user


def test_no_trusted_sources_is_not_present_without_inference() -> None:
    inference = FakeTierInference()

    result = _processor(trusted=FakeSources([]), inference=inference).process(
        ENTITY, SEED_COLOR.field_id
    )

    assert isinstance(result.tier1, TierAnswer)
    assert result.tier1.not_present
    assert inference.prompts_for(Tier.TRUSTED) == []
    (tier2_prompt,) = inference.prompts_for(Tier.EXPANDED)
    assert "No tier 1 answer exists" in tier2_prompt.user


def test_no_secondary_sources_carries_tier1_forward() -> None:
    inference = FakeTierInference(
        {Tier.TRUSTED: lambda prompt: TierAnswer(value="Brown", attribution="Michigan Flora")}
    )

    result = _processor(secondary=FakeSources([]), inference=inference).process(
        ENTITY, SEED_COLOR.field_id
    )

    assert isinstance(result.tier2, TierAnswer)
    assert result.tier2.value == "Brown"
    assert "Michigan Flora" in result.tier2.attribution
    assert inference.prompts_for(Tier.EXPANDED) == []


def test_inference_failure_becomes_a_marker_and_other_tiers_run() -> None:
    inference = FakeTierInference(
        {Tier.TRUSTED: InferenceError("overloaded", transient=True)}
    )

    result = _processor(inference=inference).process(ENTITY, SEED_COLOR.field_id)

    assert result.tier1 == TierFailureMarker(reason="overloaded", transient=True)
    assert isinstance(result.tier2, TierAnswer)
    assert isinstance(result.tier3, TierAnswer)


def test_rule_violations_become_markers() -> None:
    inference = FakeTierInference(
        {
            Tier.TRUSTED: lambda prompt: TierAnswer(value="Very high"),
            Tier.EXPANDED: lambda prompt: TierAnswer(value="high"),
            Tier.INDEPENDENT: lambda prompt: TierAnswer(
                value="Low", granularity=Granularity.FAMILY
            ),
        }
    )

    result = _processor(inference=inference).process(ENTITY, MISS_RISK.field_id)

    assert isinstance(result.tier1, TierFailureMarker)
    assert result.tier1.reason.startswith("rule violation")
    assert not result.tier1.transient
    assert isinstance(result.tier2, TierAnswer)
    assert result.tier2.value == "High"


def test_cached_answers_are_reused_unless_forced() -> None:
    cache = MemoryTierCache()
    first = FakeTierInference()
    _processor(inference=first, cache=cache).process(ENTITY, SEED_COLOR.field_id)

    cached = FakeTierInference()
    _processor(inference=cached, cache=cache).process(ENTITY, SEED_COLOR.field_id)
    forced = FakeTierInference()
    _processor(inference=forced, cache=cache, force_refresh=True).process(
        ENTITY, SEED_COLOR.field_id
    )

    assert len(first.prompts) == 3
    assert len(cache.entries) == 3
    assert cached.prompts == []
    assert len(forced.prompts) == 3


def test_changed_sources_miss_the_cache() -> None:
    cache = MemoryTierCache()
    _processor(cache=cache).process(ENTITY, SEED_COLOR.field_id)

    inference = FakeTierInference()
    _processor(
        trusted=FakeSources([excerpt("michigan-flora", "Seeds black")]),
        inference=inference,
        cache=cache,
    ).process(ENTITY, SEED_COLOR.field_id)

    assert [prompt.tier for prompt in inference.prompts] == [Tier.TRUSTED]


def test_failed_tiers_are_not_cached() -> None:
    cache = MemoryTierCache()
    inference = FakeTierInference({Tier.INDEPENDENT: InferenceError("down")})

    _processor(inference=inference, cache=cache).process(ENTITY, SEED_COLOR.field_id)

    assert {key.tier for key in cache.entries} == {Tier.TRUSTED, Tier.EXPANDED}


def test_unknown_field_raises_config_error() -> None:
    with pytest.raises(ConfigError):
        _processor().process(ENTITY, "unknown_field")


def test_tier3_answers_need_a_granularity() -> None:
    inference = FakeTierInference(
        {Tier.INDEPENDENT: lambda prompt: TierAnswer(value="Brown", attribution="guess")}
    )

    result = _processor(inference=inference).process(ENTITY, SEED_COLOR.field_id)

    assert result.tier3 == TierFailureMarker(reason="rule violation: missing granularity")
    assert isinstance(result.tier1, TierAnswer)
    assert isinstance(result.tier2, TierAnswer)


class BrokenTierCache:
    """Raises on every read and write, like a locked cache database."""

    def __init__(self) -> None:
        self.writes = 0

    def get(self, key: TierCacheKey) -> TierAnswer | None:
        raise CacheError(f"Cannot read tier cache for {key.tier}")

    def put(self, key: TierCacheKey, answer: TierAnswer) -> None:
        self.writes += 1
        raise CacheError(f"Cannot write tier cache for {key.tier}")


def test_cache_failures_fall_back_to_inference() -> None:
    inference = FakeTierInference()
    cache = BrokenTierCache()
    processor = ThreeTierFieldProcessor(
        trusted_sources=FakeSources([excerpt("michigan-flora", "Seeds brown")]),
        secondary_sources=FakeSources([excerpt("page-content", "Seeds tan")]),
        inference=inference,
        rules=StaticRules(SEED_COLOR),
        cache=cache,
        concurrent=False,
        clock=lambda: PROCESSED_AT,
    )

    result = processor.process(ENTITY, SEED_COLOR.field_id)

    assert [slot.value for slot in result.slots] == [  # type: ignore[union-attr]
        "tier1 answer",
        "tier2 answer",
        "tier3 answer",
    ]
    assert len(inference.prompts) == 3
    assert cache.writes == 3


def test_undecodable_source_files_do_not_fail_the_field(tmp_path: Path) -> None:
    drive = tmp_path / "Tier1"
    drive.mkdir()
    (drive / "Quercus_alba.txt").write_bytes(b"Acorns \xff brown")
    inference = FakeTierInference()
    processor = _processor(
        trusted=DirectorySourceProvider({"tier1-drive": drive}),
        inference=inference,
    )

    result = processor.process(ENTITY, SEED_COLOR.field_id)

    assert isinstance(result.tier1, TierAnswer)
    assert result.tier1.not_present
    assert inference.prompts_for(Tier.TRUSTED) == []
    assert isinstance(result.tier2, TierAnswer)
    assert isinstance(result.tier3, TierAnswer)
    assert result.tier3.value == "tier3 answer"
