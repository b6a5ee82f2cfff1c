"""Prompt rendering for each tier.

The tier 3 builder takes only the entity and the field rules; nothing derived
from tier 1 or tier 2 can reach its prompt.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Final

from .contracts import Tier, TierAnswer, TierPrompt

if TYPE_CHECKING:
    from collections.abc import Sequence

    from florasynth.domain.types import EntityKey

    from .contracts import FieldRules, SourceExcerpt, TierSlot

BASE_INSTRUCTIONS: Final[str] = (
    "You are a botanist compiling seed collection notes for native plants of the "
    "Great Lakes region. Answer only for the field described below and follow its "
    "rules exactly. Respond with a single JSON object and nothing else."
)

TIER_GUIDANCE: Final[dict[Tier, str]] = {
    Tier.TRUSTED: (
        "Use only the trusted source excerpts supplied below. Do not add facts that "
        "are absent from them. If they do not answer the field, set \"not_present\" "
        "to true and \"value\" to null."
    ),
    Tier.EXPANDED: (
        "Start from the tier 1 answer and refine it with the additional source "
        "excerpts. Add information only when an excerpt states it. When excerpts "
        "disagree with each other or with the tier 1 answer, list every "
        "disagreement under \"conflicts\" instead of choosing a side."
    ),
    Tier.INDEPENDENT: (
        "Answer from general botanical knowledge alone; no sources are supplied. "
        "State in \"granularity\" whether the answer reflects knowledge of this "
        "species, a pattern across the genus, or a pattern across the family."
    ),
}

OUTPUT_FORMATS: Final[dict[Tier, dict[str, object]]] = {
    Tier.TRUSTED: {
        "value": "answer text or null",
        "attribution": "which excerpts support the answer",
        "not_present": False,
    },
    Tier.EXPANDED: {
        "value": "answer text or null",
        "attribution": "which excerpts support the answer",
        "not_present": False,
        "conflicts": [{"claims": [{"source": "source id", "claim": "what it says"}]}],
    },
    Tier.INDEPENDENT: {
        "value": "answer text",
        "attribution": "basis of the answer",
        "granularity": "species | genus | family",
    },
}


def format_sources(excerpts: Sequence[SourceExcerpt]) -> str:
    if not excerpts:
        return "No source data available.\n"
    blocks: list[str] = []
    for excerpt in excerpts:
        origin = f" ({excerpt.file_name})" if excerpt.file_name else ""
        blocks.append(f"--- Source: {excerpt.label}{origin} ---\n{excerpt.text.strip()}\n")
    return "\n".join(blocks)


def _system_prompt(tier: Tier) -> str:
    return f"{BASE_INSTRUCTIONS}\n\n{TIER_GUIDANCE[tier]}"


def _header(entity: EntityKey, rules: FieldRules) -> str:
    return (
        f"## Species\n\nGenus: {entity.genus}\nSpecies: {entity.species}\n\n"
        f"## Field Rules\n\n{rules.render()}\n\n"
    )


def _footer(tier: Tier) -> str:
    example = json.dumps(OUTPUT_FORMATS[tier], indent=2)
    return f"## Output Format\n\nRespond with valid JSON matching this structure:\n{example}\n"


def build_tier1_prompt(
    entity: EntityKey,
    rules: FieldRules,
    excerpts: Sequence[SourceExcerpt],
) -> TierPrompt:
    user = (
        _header(entity, rules)
        + "## Tier 1 Source Data\n\n"
        + format_sources(excerpts)
        + "\n"
        + _footer(Tier.TRUSTED)
    )
    return TierPrompt(
        tier=Tier.TRUSTED,
        entity=entity,
        field_id=rules.field_id,
        system=_system_prompt(Tier.TRUSTED),
        user=user,
    )


def build_tier2_prompt(
    entity: EntityKey,
    rules: FieldRules,
    tier1: TierSlot,
    excerpts: Sequence[SourceExcerpt],
) -> TierPrompt:
    if isinstance(tier1, TierAnswer) and not tier1.not_present:
        prior = json.dumps(
            {"value": tier1.value, "attribution": tier1.attribution}, indent=2
        )
    else:
        prior = "No tier 1 answer exists; rely on the excerpts below."
    user = (
        _header(entity, rules)
        + f"## Tier 1 Response\n\n{prior}\n\n"
        + "## Tier 2 Additional Source Data\n\n"
        + format_sources(excerpts)
        + "\n"
        + _footer(Tier.EXPANDED)
    )
    return TierPrompt(
        tier=Tier.EXPANDED,
        entity=entity,
        field_id=rules.field_id,
        system=_system_prompt(Tier.EXPANDED),
        user=user,
    )


def build_tier3_prompt(entity: EntityKey, rules: FieldRules) -> TierPrompt:
    return TierPrompt(
        tier=Tier.INDEPENDENT,
        entity=entity,
        field_id=rules.field_id,
        system=_system_prompt(Tier.INDEPENDENT),
        user=_header(entity, rules) + _footer(Tier.INDEPENDENT),
    )
