"""Tests for weighting, deduplication and ordering of matches."""

from __future__ import annotations

import math
from datetime import datetime
from datetime import timedelta
from datetime import timezone

import pytest

from recallmcp.config import SearchConfig
from recallmcp.memory.schemas import MemoryRecord
from recallmcp.search.ranking import combine
from recallmcp.search.ranking import rank_matches
from recallmcp.search.ranking import strategy_weight
from recallmcp.search.ranking import time_weight
from recallmcp.search.schemas import ScoredMatch
from recallmcp.search.schemas import SearchOptions

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

_NO_TIME = SearchOptions(time_weight=False, min_score=0.0)


def _record(record_id: str, *, created=NOW, accessed=None, access_count=0) -> MemoryRecord:
    return MemoryRecord(
        id=record_id,
        content=f"record {record_id}",
        created_at=created,
        last_accessed_at=accessed or created,
        access_count=access_count,
    )


def _match(record: MemoryRecord, score: float, strategy: str = "exact-match") -> ScoredMatch:
    return ScoredMatch(record=record, score=score, strategy=strategy)


class TestStrategyWeight:
    def test_known_weights(self):
        assert strategy_weight("exact-match") == 1.0
        assert strategy_weight("tag-based") == 0.9
        assert strategy_weight("fuzzy-content") == 0.8
        assert strategy_weight("semantic-similarity") == 0.7
        assert strategy_weight("partial-match") == 0.6

    def test_unknown_strategy_weighs_one(self):
        assert strategy_weight("mystery") == 1.0


class TestTimeWeight:
    def test_fresh_unaccessed_record(self):
        assert time_weight(_record("r"), NOW) == pytest.approx(0.8)

    def test_heavily_accessed_record(self):
        record = _record("r", access_count=999)

        assert time_weight(record, NOW) == pytest.approx(1.0)

    def test_month_old_idle_record(self):
        record = _record("r", created=NOW - timedelta(days=30))

        expected = 0.4 * math.exp(-1) + 0.4 * math.exp(-30 / 7)
        assert time_weight(record, NOW) == pytest.approx(expected)

    def test_custom_windows(self):
        record = _record("r", created=NOW - timedelta(days=1))
        config = SearchConfig(age_decay_days=1.0, recency_decay_days=1.0)

        assert time_weight(record, NOW, config) == pytest.approx(0.8 * math.exp(-1))

    def test_future_timestamps_clamp_to_zero_elapsed(self):
        record = _record("r", created=NOW + timedelta(days=3))

        assert time_weight(record, NOW) == pytest.approx(0.8)


class TestRankMatches:
    def test_best_strategy_wins(self):
        record = _record("r1")
        matches = [_match(record, 0.9), _match(record, 0.5, "tag-based")]

        ranked = rank_matches(matches, _NO_TIME)

        assert len(ranked) == 1
        assert ranked[0].score == pytest.approx(0.9)
        assert ranked[0].strategy == "exact-match"

    def test_later_stronger_match_replaces_earlier(self):
        record = _record("r1")
        matches = [_match(record, 1.0, "partial-match"), _match(record, 0.8)]

        ranked = rank_matches(matches, _NO_TIME)

        assert ranked[0].score == pytest.approx(0.8)
        assert ranked[0].strategy == "exact-match"

    def test_equal_weighted_scores_keep_first_match(self):
        record = _record("r1")
        matches = [_match(record, 0.5, "mystery"), _match(record, 0.5)]

        ranked = rank_matches(matches, _NO_TIME)

        assert ranked[0].strategy == "mystery"

    def test_threshold_drops_weak_records(self):
        matches = [
            _match(_record("strong"), 0.8),
            _match(_record("weak"), 0.5, "tag-based"),
        ]

        ranked = rank_matches(matches, SearchOptions(time_weight=False, min_score=0.5))

        assert [m.record.id for m in ranked] == ["strong"]

    def test_sorted_descending_with_corpus_order_tie_break(self):
        r1, r2, r3 = _record("r1"), _record("r2"), _record("r3")
        matches = [_match(r1, 0.7), _match(r2, 0.7), _match(r3, 0.9)]

        ranked = rank_matches(
            matches, _NO_TIME, corpus_order={"r3": 0, "r2": 1, "r1": 2}
        )

        assert [m.record.id for m in ranked] == ["r3", "r2", "r1"]

    def test_time_weight_scales_scores(self):
        ranked = rank_matches(
            [_match(_record("r1"), 1.0)],
            SearchOptions(min_score=0.0),
            now=NOW,
        )

        assert ranked[0].score == pytest.approx(0.8)

    def test_input_matches_are_untouched(self):
        match = _match(_record("r1"), 0.5, "tag-based")

        rank_matches([match], _NO_TIME)

        assert match.score == 0.5


class TestCombine:
    def test_truncates_to_limit(self):
        matches = [_match(_record(f"r{i}"), 0.5 + i / 100) for i in range(8)]

        combined = combine(matches, SearchOptions(limit=3, time_weight=False, min_score=0.0))

        assert [m.record.id for m in combined] == ["r7", "r6", "r5"]
