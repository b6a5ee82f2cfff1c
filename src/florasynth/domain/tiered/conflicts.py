"""Deterministic conflict detection over structured source claims."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from .contracts import Conflict, SourceClaim

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .contracts import FieldRules, SourceExcerpt

TIER1_SOURCE_ID = "tier1"

_WHITESPACE = re.compile(r"\s+")


def normalise_claim(claim: str) -> str:
    return _WHITESPACE.sub(" ", claim).strip().strip(".;,").casefold()


def structured_claims(excerpts: Sequence[SourceExcerpt]) -> list[SourceClaim]:
    return [
        SourceClaim(source_id=excerpt.source_id, claim=excerpt.claim.strip())
        for excerpt in excerpts
        if excerpt.claim is not None and excerpt.claim.strip()
    ]


def detect_conflicts(
    excerpts: Sequence[SourceExcerpt],
    *,
    rules: FieldRules,
    tier1_value: str | None = None,
) -> tuple[Conflict, ...]:
    """Report disagreements among tier 2 claims, and with tier 1 for vocabulary fields.

    Claims are compared after whitespace, case and trailing punctuation are
    normalised, so ``"High"`` and ``"high."`` agree.
    """

    claims = structured_claims(excerpts)
    conflicts: list[Conflict] = []

    if len({normalise_claim(claim.claim) for claim in claims}) > 1:
        conflicts.append(Conflict(claims=tuple(claims)))

    if rules.vocabulary and tier1_value and claims:
        expected = normalise_claim(tier1_value)
        disagreeing = [claim for claim in claims if normalise_claim(claim.claim) != expected]
        if disagreeing:
            conflicts.append(
                Conflict(
                    claims=(
                        SourceClaim(source_id=TIER1_SOURCE_ID, claim=tier1_value),
                        *disagreeing,
                    )
                )
            )

    return tuple(conflicts)
