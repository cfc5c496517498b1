"""Memory domain: record model, creation factory and Redis store."""

from __future__ import annotations

import hashlib
import json
from datetime import datetime
from datetime import timezone
from typing import Any

from recallmcp.memory.schemas import MemoryRecord
from recallmcp.memory.schemas import RecordType
from recallmcp.memory.store import MemoryStore
from recallmcp.memory.store import RecordStore

__all__ = [
    "MemoryRecord",
    "MemoryStore",
    "RecordStore",
    "RecordType",
    "compute_importance",
    "create_memory_record",
    "generate_record_id",
]

IMPORTANT_KEYWORDS = ("error", "bug", "fix", "important", "critical", "todo", "fixme")
_BASE_IMPORTANCE = 5
_MAX_IMPORTANCE = 10


def generate_record_id(content: Any, now: datetime) -> str:
    """Derive a 12-hex-char id from the serialized content and creation time."""
    seed = json.dumps(content, ensure_ascii=False, default=str) + str(
        int(now.timestamp() * 1000)
    )
    return hashlib.sha256(seed.encode("utf-8")).hexdigest()[:12]


def compute_importance(content: Any) -> int:
    """Base importance of 5, plus one per important keyword present, capped at 10."""
    text = json.dumps(content, ensure_ascii=False, default=str).lower()
    importance = _BASE_IMPORTANCE
    for keyword in IMPORTANT_KEYWORDS:
        if keyword in text:
            importance += 1
    return min(importance, _MAX_IMPORTANCE)


def create_memory_record(
    record_type: RecordType | str,
    content: Any,
    tags: list[str] | None = None,
    *,
    now: datetime | None = None,
) -> MemoryRecord:
    """Factory for creating a MemoryRecord with all domain invariants.

    Creation and last-access timestamps start equal, the access counter
    starts at zero, and importance is derived from the content.
    """
    created = now or datetime.now(timezone.utc)
    return MemoryRecord(
        id=generate_record_id(content, created),
        record_type=RecordType(record_type),
        content=content,
        tags=list(tags or []),
        importance=compute_importance(content),
        created_at=created,
        last_accessed_at=created,
        access_count=0,
    )
