"""Combination and ranking of per-strategy matches.

Matches are grouped by record id, weighted by their strategy's fixed
priority and (optionally) a time weight, and only the single strongest
match per record survives. Strategies are never summed across each other.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from collections.abc import Mapping
from datetime import datetime
from datetime import timezone
from types import MappingProxyType

from recallmcp.config import SearchConfig
from recallmcp.memory.schemas import MemoryRecord
from recallmcp.search.schemas import ScoredMatch
from recallmcp.search.schemas import SearchOptions
from recallmcp.search.schemas import StrategyName

_SECONDS_PER_DAY = 24 * 60 * 60

STRATEGY_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {
        StrategyName.exact.value: 1.0,
        StrategyName.tag_based.value: 0.9,
        StrategyName.fuzzy.value: 0.8,
        StrategyName.semantic.value: 0.7,
        StrategyName.partial.value: 0.6,
    }
)

_UNKNOWN_STRATEGY_WEIGHT = 1.0


def strategy_weight(strategy: str) -> float:
    """Fixed priority weight for *strategy*; unknown names weigh 1.0."""
    return STRATEGY_WEIGHTS.get(strategy, _UNKNOWN_STRATEGY_WEIGHT)


def time_weight(
    record: MemoryRecord,
    now: datetime,
    config: SearchConfig | None = None,
) -> float:
    """Blend of creation age, last-access recency and access frequency.

    ``0.4 * ageDecay + 0.4 * recencyDecay + 0.2 * accessWeight`` where both
    decays are ``exp(-elapsed / window)``.
    """
    cfg = config or SearchConfig()
    age_decay = math.exp(
        -record.age_seconds(now) / (cfg.age_decay_days * _SECONDS_PER_DAY)
    )
    recency_decay = math.exp(
        -record.idle_seconds(now) / (cfg.recency_decay_days * _SECONDS_PER_DAY)
    )
    access_weight = math.log10(max(record.access_count, 0) + 1) / cfg.access_log_divisor
    return 0.4 * age_decay + 0.4 * recency_decay + 0.2 * access_weight


def rank_matches(
    matches: Iterable[ScoredMatch],
    options: SearchOptions,
    *,
    corpus_order: Mapping[str, int] | None = None,
    now: datetime | None = None,
    config: SearchConfig | None = None,
) -> list[ScoredMatch]:
    """Group, weight, deduplicate, threshold and sort *matches*.

    Returned matches carry their final score. Ties keep corpus order;
    records missing from *corpus_order* follow in first-seen order.
    """
    now = now or datetime.now(timezone.utc)
    best: dict[str, tuple[float, ScoredMatch]] = {}
    time_weights: dict[str, float] = {}

    for match in matches:
        record_id = match.record.id
        final = match.score * strategy_weight(match.strategy)
        if options.time_weight:
            if record_id not in time_weights:
                time_weights[record_id] = time_weight(match.record, now, config)
            final *= time_weights[record_id]

        current = best.get(record_id)
        if current is None or final > current[0]:
            best[record_id] = (final, match)

    order = dict(corpus_order or {})
    for record_id in best:
        order.setdefault(record_id, len(order))

    ranked = [
        match.model_copy(update={"score": final})
        for final, match in best.values()
        if final >= options.min_score
    ]
    ranked.sort(key=lambda m: (-m.score, order[m.record.id]))
    return ranked


def combine(
    matches: Iterable[ScoredMatch],
    options: SearchOptions,
    *,
    corpus_order: Mapping[str, int] | None = None,
    now: datetime | None = None,
    config: SearchConfig | None = None,
) -> list[ScoredMatch]:
    """``rank_matches`` truncated to ``options.limit``."""
    ranked = rank_matches(
        matches, options, corpus_order=corpus_order, now=now, config=config
    )
    return ranked[: max(options.limit, 0)]
