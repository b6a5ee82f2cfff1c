from __future__ import annotations

from florasynth.domain.tiered import SourceExcerpt, Tier, TierFailureMarker
from florasynth.domain.tiered.prompts import (
    build_tier1_prompt,
    build_tier2_prompt,
    build_tier3_prompt,
    format_sources,
)
from florasynth.domain.types import EntityKey
from tests.helpers.tiered import MISS_RISK, excerpt

ENTITY = EntityKey.of("Asclepias", "tuberosa")


def test_format_sources_labels_each_excerpt() -> None:
    rendered = format_sources(
        [
            SourceExcerpt(
                source_id="michigan-flora",
                label="Michigan Flora",
                text="  Follicles split in autumn. ",
                file_name="Asclepias_tuberosa.json",
            )
        ]
    )

    assert rendered == (
        "--- Source: Michigan Flora (Asclepias_tuberosa.json) ---\n"
        "Follicles split in autumn.\n"
    )
    assert format_sources([]) == "No source data available.\n"


def test_every_tier_carries_the_same_field_rules() -> None:
    sources = [excerpt("michigan-flora", "Follicles split in autumn")]
    prompts = [
        build_tier1_prompt(ENTITY, MISS_RISK, sources),
        build_tier2_prompt(ENTITY, MISS_RISK, TierFailureMarker(reason="x"), sources),
        build_tier3_prompt(ENTITY, MISS_RISK),
    ]

    assert [prompt.tier for prompt in prompts] == [Tier.TRUSTED, Tier.EXPANDED, Tier.INDEPENDENT]
    for prompt in prompts:
        assert MISS_RISK.render() in prompt.user
        assert prompt.field_id == MISS_RISK.field_id
    assert len({prompt.system for prompt in prompts}) == 3


def test_tier2_prompt_without_a_tier1_answer_says_so() -> None:
    prompt = build_tier2_prompt(ENTITY, MISS_RISK, TierFailureMarker(reason="x"), [])

    assert "No tier 1 answer exists" in prompt.user
    assert "No source data available." in prompt.user
