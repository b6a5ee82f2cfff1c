"""Three-tier processing of one field for one entity."""

from __future__ import annotations

import dataclasses
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from florasynth.domain.errors import CacheError, TierFailure
from florasynth.domain.ports.cache import TierCacheKey

from .conflicts import detect_conflicts, structured_claims
from .contracts import (
    SourceStats,
    Tier,
    TierAnswer,
    TieredFieldResult,
    TierFailureMarker,
)
from .prompts import build_tier1_prompt, build_tier2_prompt, build_tier3_prompt

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from florasynth.domain.ports import (
        FieldRuleProvider,
        SourceProvider,
        TierCache,
        TierInference,
    )
    from florasynth.domain.types import EntityKey

    from .contracts import FieldRules, SourceExcerpt, TierPrompt, TierSlot

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ThreeTierFieldProcessor:
    """Runs the trusted, expanded and independent tiers and keeps them side by side.

    A failing tier becomes a :class:`TierFailureMarker`; the other tiers still run.
    Tier 1 and tier 3 run concurrently when ``concurrent`` is set, tier 2 always
    waits for tier 1.
    """

    def __init__(
        self,
        *,
        trusted_sources: SourceProvider,
        secondary_sources: SourceProvider,
        inference: TierInference,
        rules: FieldRuleProvider,
        cache: TierCache | None = None,
        force_refresh: bool = False,
        concurrent: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._trusted = trusted_sources
        self._secondary = secondary_sources
        self._inference = inference
        self._rules = rules
        self._cache = cache
        self._force_refresh = force_refresh
        self._concurrent = concurrent
        self._clock = clock

    def process(self, entity: EntityKey, field_id: str) -> TieredFieldResult:
        rules = self._rules.rules_for(field_id)
        log.info("Processing %s for %s", field_id, entity)

        if self._concurrent:
            with ThreadPoolExecutor(max_workers=2, thread_name_prefix="tier3") as pool:
                tier3_future = pool.submit(self.run_independent_tier, entity, rules)
                tier1, tier1_count = self._run_trusted_tier(entity, rules)
                tier2, tier2_count = self._run_expanded_tier(entity, rules, tier1)
                tier3 = tier3_future.result()
        else:
            tier1, tier1_count = self._run_trusted_tier(entity, rules)
            tier2, tier2_count = self._run_expanded_tier(entity, rules, tier1)
            tier3 = self.run_independent_tier(entity, rules)

        return TieredFieldResult(
            entity=entity,
            field_id=field_id,
            tier1=tier1,
            tier2=tier2,
            tier3=tier3,
            source_stats=SourceStats(tier1=tier1_count, tier2=tier2_count),
            processed_at=self._clock(),
        )

    def run_independent_tier(self, entity: EntityKey, rules: FieldRules) -> TierSlot:
        """Answer tier 3 from the entity and the field rules alone."""

        return self._answer(build_tier3_prompt(entity, rules), rules)

    def _run_trusted_tier(self, entity: EntityKey, rules: FieldRules) -> tuple[TierSlot, int]:
        excerpts, failure = self._gather(self._trusted, Tier.TRUSTED, entity, rules)
        if failure is not None:
            return failure, 0
        if not excerpts:
            log.debug("No trusted sources for %s %s", entity, rules.field_id)
            return (
                TierAnswer(
                    value=None,
                    attribution="No trusted sources available",
                    not_present=True,
                ),
                0,
            )
        answer = self._answer(build_tier1_prompt(entity, rules, excerpts), rules)
        return answer, _distinct_sources(excerpts)

    def _run_expanded_tier(
        self,
        entity: EntityKey,
        rules: FieldRules,
        tier1: TierSlot,
    ) -> tuple[TierSlot, int]:
        excerpts, failure = self._gather(self._secondary, Tier.EXPANDED, entity, rules)
        if failure is not None:
            return failure, 0
        if not excerpts:
            if isinstance(tier1, TierAnswer) and not tier1.not_present:
                carried = dataclasses.replace(
                    tier1, attribution=f"No secondary sources; tier 1: {tier1.attribution}"
                )
                return carried, 0
            return (
                TierAnswer(
                    value=None,
                    attribution="No secondary sources available",
                    not_present=True,
                ),
                0,
            )

        slot = self._answer(build_tier2_prompt(entity, rules, tier1, excerpts), rules)
        if isinstance(slot, TierAnswer) and structured_claims(excerpts):
            tier1_value = tier1.value if isinstance(tier1, TierAnswer) else None
            slot = dataclasses.replace(
                slot,
                conflicts=detect_conflicts(excerpts, rules=rules, tier1_value=tier1_value),
            )
        return slot, _distinct_sources(excerpts)

    def _gather(
        self,
        provider: SourceProvider,
        tier: Tier,
        entity: EntityKey,
        rules: FieldRules,
    ) -> tuple[Sequence[SourceExcerpt], TierFailureMarker | None]:
        try:
            return provider.excerpts(entity, rules.field_id), None
        except TierFailure as exc:
            log.warning("%s sources unavailable for %s %s: %s", tier, entity, rules.field_id, exc)
            return (), TierFailureMarker(reason=str(exc), transient=exc.transient)

    def _answer(self, prompt: TierPrompt, rules: FieldRules) -> TierSlot:
        key = TierCacheKey(
            entity=prompt.entity,
            field_id=prompt.field_id,
            tier=prompt.tier,
            prompt_hash=prompt.digest,
        )
        if not self._force_refresh:
            cached = self._cached(key)
            if cached is not None:
                log.debug("%s cache hit for %s %s", prompt.tier, prompt.entity, prompt.field_id)
                return cached

        try:
            answer = self._inference.answer(prompt)
        except TierFailure as exc:
            log.warning(
                "%s inference failed for %s %s: %s",
                prompt.tier,
                prompt.entity,
                prompt.field_id,
                exc,
            )
            return TierFailureMarker(reason=str(exc), transient=exc.transient)

        violations = rules.violations(answer)
        if prompt.tier is Tier.INDEPENDENT and answer.granularity is None:
            violations.append("missing granularity")
        if violations:
            reason = "; ".join(violations)
            log.warning(
                "%s answer rejected for %s %s: %s",
                prompt.tier,
                prompt.entity,
                prompt.field_id,
                reason,
            )
            return TierFailureMarker(reason=f"rule violation: {reason}")

        if rules.vocabulary and answer.value:
            answer = dataclasses.replace(
                answer, value=rules.vocabulary_term(answer.value) or answer.value
            )
        self._store(key, answer)
        return answer

    def _cached(self, key: TierCacheKey) -> TierAnswer | None:
        if self._cache is None:
            return None
        try:
            return self._cache.get(key)
        except CacheError as exc:
            log.warning("Tier cache unreadable for %s %s: %s", key.entity, key.field_id, exc)
            return None

    def _store(self, key: TierCacheKey, answer: TierAnswer) -> None:
        if self._cache is None:
            return
        try:
            self._cache.put(key, answer)
        except CacheError as exc:
            log.warning("Not caching %s answer for %s: %s", key.tier, key.entity, exc)


def _distinct_sources(excerpts: Sequence[SourceExcerpt]) -> int:
    return len({excerpt.source_id for excerpt in excerpts})
