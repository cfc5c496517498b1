"""In-process timing and failure counters for search and MCP tools.

Operations are keyed by dotted names: ``search.run`` for a whole engine
call, ``search.strategy.<name>`` per strategy pass and ``mcp.<tool>``
per tool call. Strategy exceptions swallowed by the engine are counted
separately so they stay visible.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock

logger = logging.getLogger(__name__)


@dataclass
class OperationTimings:
    """Running timings for one operation name."""

    count: int = 0
    error_count: int = 0
    total_ms: float = 0.0
    min_ms: float = 0.0
    max_ms: float = 0.0
    last_ms: float = 0.0

    def add(self, duration_ms: float, ok: bool) -> None:
        self.min_ms = duration_ms if self.count == 0 else min(self.min_ms, duration_ms)
        self.max_ms = max(self.max_ms, duration_ms)
        self.count += 1
        self.error_count += 0 if ok else 1
        self.total_ms += duration_ms
        self.last_ms = duration_ms

    def as_dict(self) -> dict[str, float | int]:
        avg = self.total_ms / self.count if self.count else 0.0
        return {
            "count": self.count,
            "error_count": self.error_count,
            "total_ms": round(self.total_ms, 3),
            "avg_ms": round(avg, 3),
            "min_ms": round(self.min_ms, 3),
            "max_ms": round(self.max_ms, 3),
            "last_ms": round(self.last_ms, 3),
        }


class _SearchMetrics:
    def __init__(self) -> None:
        self._lock = Lock()
        self._timings: dict[str, OperationTimings] = {}
        self._strategy_failures: dict[str, int] = {}

    def time(self, operation: str, duration_ms: float, ok: bool) -> None:
        duration_ms = max(float(duration_ms), 0.0)
        with self._lock:
            self._timings.setdefault(operation, OperationTimings()).add(duration_ms, ok)
        logger.info(
            "timing operation=%s duration_ms=%.3f ok=%s", operation, duration_ms, ok
        )

    def fail(self, strategy: str) -> None:
        with self._lock:
            self._strategy_failures[strategy] = self._strategy_failures.get(strategy, 0) + 1

    def timings(self) -> dict[str, dict[str, float | int]]:
        with self._lock:
            return {name: t.as_dict() for name, t in sorted(self._timings.items())}

    def failures(self) -> dict[str, int]:
        with self._lock:
            return dict(sorted(self._strategy_failures.items()))

    def clear(self) -> None:
        with self._lock:
            self._timings.clear()
            self._strategy_failures.clear()


_METRICS = _SearchMetrics()


def record_latency(*, operation: str, duration_ms: float, ok: bool = True) -> None:
    """Add one timing sample for *operation*; negative durations count as 0."""
    _METRICS.time(operation, duration_ms, ok)


def record_strategy_failure(strategy: str) -> None:
    _METRICS.fail(strategy)


def latency_metrics_snapshot() -> dict[str, dict[str, float | int]]:
    """Per-operation count, error count and min/avg/max/last milliseconds."""
    return _METRICS.timings()


def strategy_failure_snapshot() -> dict[str, int]:
    return _METRICS.failures()


def reset_metrics() -> None:
    """Drop all timings and failure counts."""
    _METRICS.clear()
