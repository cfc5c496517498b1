"""Multi-strategy memory search engine.

Pipeline: analyze the query, run every gated strategy over the caller's
corpus snapshot, then combine and rank. The engine keeps no state between
calls beyond its immutable tables and strategy registry, so one instance
may be shared across concurrent callers.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from datetime import datetime
from datetime import timezone
from time import perf_counter
from typing import Any

from recallmcp.config import SearchConfig
from recallmcp.memory.schemas import MemoryRecord
from recallmcp.observability import record_latency
from recallmcp.observability import record_strategy_failure
from recallmcp.search.analyzer import QueryAnalyzer
from recallmcp.search.formatting import format_results
from recallmcp.search.ranking import rank_matches
from recallmcp.search.schemas import QueryAnalysis
from recallmcp.search.schemas import ScoredMatch
from recallmcp.search.schemas import SearchOptions
from recallmcp.search.schemas import SearchOutcome
from recallmcp.search.strategies import default_strategies
from recallmcp.search.strategies import SearchStrategy

logger = logging.getLogger(__name__)


def normalize_options(
    options: SearchOptions | Mapping[str, Any] | None,
    config: SearchConfig | None = None,
) -> SearchOptions:
    """Clamp out-of-range options to safe values instead of rejecting them."""
    cfg = config or SearchConfig()
    if options is None:
        opts = SearchOptions(limit=cfg.default_limit, min_score=cfg.default_min_score)
    elif isinstance(options, SearchOptions):
        opts = options
    else:
        opts = SearchOptions.model_validate(dict(options))

    limit = opts.limit if opts.limit > 0 else cfg.default_limit
    min_score = opts.min_score
    if math.isnan(min_score):
        min_score = cfg.default_min_score
    min_score = min(max(min_score, 0.0), 1.0)

    if limit == opts.limit and min_score == opts.min_score:
        return opts
    return opts.model_copy(update={"limit": limit, "min_score": min_score})


class SearchEngine:
    """Runs the fixed strategy set over a corpus and ranks the hits."""

    def __init__(
        self,
        *,
        analyzer: QueryAnalyzer | None = None,
        strategies: Sequence[SearchStrategy] | None = None,
        config: SearchConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._analyzer = analyzer or QueryAnalyzer()
        self._strategies = tuple(
            default_strategies() if strategies is None else strategies
        )
        self._config = config or SearchConfig()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def strategy_names(self) -> list[str]:
        return [strategy.name.value for strategy in self._strategies]

    def analyze(self, query: str) -> QueryAnalysis:
        return self._analyzer.analyze(query)

    def search(
        self,
        query: str,
        corpus: Iterable[MemoryRecord],
        options: SearchOptions | Mapping[str, Any] | None = None,
    ) -> SearchOutcome:
        """Rank *corpus* against *query*.

        Never raises for empty corpora, empty queries or failing strategies;
        a failing strategy simply contributes no matches.
        """
        start = perf_counter()
        opts = normalize_options(options, self._config)
        analysis = self._analyzer.analyze(query)
        records = list(corpus)

        strategies_used: list[str] = []
        all_matches: list[ScoredMatch] = []
        for strategy in self._strategies:
            if not strategy.should_run(opts, analysis):
                continue
            matches = self._run_strategy(strategy, analysis, records)
            if matches is None:
                continue
            all_matches.extend(matches)
            strategies_used.append(strategy.name.value)

        corpus_order: dict[str, int] = {}
        for index, record in enumerate(records):
            corpus_order.setdefault(record.id, index)

        ranked = rank_matches(
            all_matches,
            opts,
            corpus_order=corpus_order,
            now=self._clock(),
            config=self._config,
        )

        elapsed_ms = (perf_counter() - start) * 1000
        record_latency(operation="search.run", duration_ms=elapsed_ms, ok=True)
        logger.debug(
            "search query=%r type=%s strategies=%s matches=%d returned=%d",
            analysis.normalized_query,
            analysis.query_type.value,
            ",".join(strategies_used),
            len(ranked),
            min(len(ranked), opts.limit),
        )
        return SearchOutcome(
            results=ranked[: opts.limit],
            total_matches=len(ranked),
            search_time_ms=round(elapsed_ms, 3),
            strategies_used=strategies_used,
            query_analysis=analysis,
        )

    def format_results(self, outcome: SearchOutcome) -> str:
        return format_results(outcome, preview_chars=self._config.preview_chars)

    def _run_strategy(
        self,
        strategy: SearchStrategy,
        analysis: QueryAnalysis,
        records: list[MemoryRecord],
    ) -> list[ScoredMatch] | None:
        """Execute one strategy, isolating failures to that strategy."""
        start = perf_counter()
        operation = f"search.strategy.{strategy.name.value}"
        try:
            matches = strategy.execute(analysis, records)
        except Exception:
            logger.exception("search strategy %s failed", strategy.name.value)
            record_strategy_failure(strategy.name.value)
            record_latency(
                operation=operation,
                duration_ms=(perf_counter() - start) * 1000,
                ok=False,
            )
            return None

        record_latency(
            operation=operation,
            duration_ms=(perf_counter() - start) * 1000,
            ok=True,
        )
        return matches
