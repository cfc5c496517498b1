"""Tests for configuration defaults."""

from __future__ import annotations

import dataclasses

import pytest

from recallmcp.config import SearchConfig
from recallmcp.config import StoreConfig


class TestSearchConfig:
    def test_defaults(self):
        config = SearchConfig()

        assert config.default_limit == 10
        assert config.default_min_score == 0.3
        assert config.age_decay_days == 30.0
        assert config.recency_decay_days == 7.0
        assert config.access_log_divisor == 3.0
        assert config.preview_chars == 200

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            SearchConfig().default_limit = 5  # type: ignore[misc]


class TestStoreConfig:
    def test_defaults(self):
        config = StoreConfig()

        assert config.redis_url == "redis://localhost:6379"
        assert config.key_prefix == "recallmcp"
        assert config.cleanup_days == 30
        assert config.cleanup_importance_floor == 7

    def test_override(self):
        config = StoreConfig(key_prefix="test", cleanup_days=7)

        assert config.key_prefix == "test"
        assert config.cleanup_days == 7
