"""Memory domain data models."""

from __future__ import annotations

import json
import math
from datetime import datetime
from datetime import timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic import Field
from pydantic import field_validator

_SECONDS_PER_DAY = 24 * 60 * 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordType(str, Enum):
    """Kinds of memory records kept by the store."""

    observation = "observation"
    entity = "entity"
    relation = "relation"
    preference = "preference"


class MemoryRecord(BaseModel):
    """A single memory record as supplied to the search engine."""

    id: str = Field(
        description="Stable unique identifier (12 hex chars for generated ids).",
    )
    record_type: RecordType = Field(
        default=RecordType.observation,
        description="Record kind; passed through ranking untouched.",
    )
    content: Any = Field(
        default=None,
        description="Arbitrary JSON-compatible payload.",
    )
    tags: list[str] = Field(
        default_factory=list,
        description="Ordered tags, matched case-insensitively.",
    )
    importance: int = Field(
        default=5,
        description="Importance weight in the 0-10 range.",
    )
    created_at: datetime = Field(
        default_factory=_utcnow,
        description="Creation timestamp, immutable.",
    )
    last_accessed_at: datetime = Field(
        default_factory=_utcnow,
        description="Last read or search-hit timestamp.",
    )
    access_count: int = Field(
        default=0,
        description="Number of reads and search hits so far.",
    )

    @field_validator("created_at", "last_accessed_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        """Naive timestamps (e.g. offset-less JSON exports) are read as UTC."""
        if value.tzinfo is None or value.utcoffset() is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    # -- text views --

    def serialized_content(self) -> str:
        """Compact JSON view of ``content`` (case preserved)."""
        return json.dumps(
            self.content, ensure_ascii=False, separators=(",", ":"), default=str
        )

    def content_text(self) -> str:
        """Lower-cased canonical string used for matching."""
        return self.serialized_content().lower()

    def tags_text(self) -> str:
        return " ".join(self.tags).lower()

    # -- time helpers --

    def age_seconds(self, now: datetime) -> float:
        return max((now - self.created_at).total_seconds(), 0.0)

    def idle_seconds(self, now: datetime) -> float:
        return max((now - self.last_accessed_at).total_seconds(), 0.0)

    def relevance_score(self, now: datetime | None = None) -> float:
        """Store-side relevance mixing importance, recency, age and access count.

        Display-only; search ranking uses its own time weight.
        """
        now = now or _utcnow()
        age_score = math.exp(-self.age_seconds(now) / (30 * _SECONDS_PER_DAY))
        recency_score = math.exp(-self.idle_seconds(now) / (7 * _SECONDS_PER_DAY))
        access_score = math.log10(self.access_count + 1) / 3
        importance_score = self.importance / 10
        return (
            importance_score * 0.3
            + recency_score * 0.3
            + age_score * 0.2
            + access_score * 0.2
        )
