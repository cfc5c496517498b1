"""Unit test fixtures: in-memory record store and FastMCP client."""

from __future__ import annotations

from datetime import datetime
from datetime import timedelta
from datetime import timezone

import pytest
from fastmcp import Client

from recallmcp.memory.schemas import MemoryRecord
from recallmcp.observability import reset_metrics

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class InMemoryRecordStore:
    """Dict-backed ``RecordStore`` used in place of Redis."""

    def __init__(self, clock=lambda: NOW) -> None:
        self.records: dict[str, MemoryRecord] = {}
        self.touched: list[str] = []
        self.closed = False
        self._clock = clock

    async def add(self, record: MemoryRecord) -> str:
        self.records[record.id] = record
        return record.id

    async def get(self, record_id: str) -> MemoryRecord | None:
        return self.records.get(record_id)

    async def get_all_records(self) -> list[MemoryRecord]:
        return sorted(self.records.values(), key=lambda r: r.created_at)

    async def touch_access(self, record_id: str) -> MemoryRecord | None:
        record = self.records.get(record_id)
        if record is None:
            return None
        updated = record.model_copy(
            update={
                "access_count": record.access_count + 1,
                "last_accessed_at": self._clock(),
            }
        )
        self.records[record_id] = updated
        self.touched.append(record_id)
        return updated

    async def get_recent(self, limit: int = 10) -> list[MemoryRecord]:
        ordered = sorted(self.records.values(), key=lambda r: r.created_at, reverse=True)
        return ordered[:limit]

    async def cleanup_old_records(self, *, days: int, importance_floor: int) -> int:
        cutoff = self._clock() - timedelta(days=days)
        stale = [
            rid
            for rid, record in self.records.items()
            if record.last_accessed_at < cutoff and record.importance < importance_floor
        ]
        for rid in stale:
            del self.records[rid]
        return len(stale)

    async def clear(self) -> None:
        self.records.clear()

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _clean_metrics():
    reset_metrics()
    yield
    reset_metrics()


@pytest.fixture()
def memory_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture()
async def mcp_client(memory_store):
    """Yield a FastMCP Client wired to the RecallMCP server."""
    from recallmcp.server import configure
    from recallmcp.server import mcp
    from recallmcp.server import shutdown

    await configure(store=memory_store, clock=lambda: NOW)

    async with Client(mcp) as client:
        yield client

    await shutdown()
