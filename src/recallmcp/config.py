"""Application configuration dataclasses.

Frozen dataclasses with sensible defaults for each subsystem.
No env-var loading or YAML parsing, just plain defaults that can
be overridden at construction time.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SearchConfig:
    """Defaults and decay constants used by the search engine."""

    default_limit: int = 10
    default_min_score: float = 0.3
    # Time weighting
    age_decay_days: float = 30.0
    recency_decay_days: float = 7.0
    access_log_divisor: float = 3.0
    # Formatting
    preview_chars: int = 200


@dataclass(frozen=True)
class StoreConfig:
    """Redis memory store settings."""

    redis_url: str = "redis://localhost:6379"
    key_prefix: str = "recallmcp"
    cleanup_days: int = 30
    cleanup_importance_floor: int = 7
