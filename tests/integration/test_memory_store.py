"""Integration tests for the Redis-backed MemoryStore."""

from __future__ import annotations

import asyncio
from datetime import datetime
from datetime import timedelta
from datetime import timezone

import pytest
from redis.asyncio import Redis

from recallmcp.config import StoreConfig
from recallmcp.memory import create_memory_record
from recallmcp.memory import MemoryStore
from recallmcp.memory.schemas import MemoryRecord

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _record(record_id: str, *, created=NOW, accessed=None, importance=5) -> MemoryRecord:
    return MemoryRecord(
        id=record_id,
        content={"note": f"record {record_id}"},
        tags=["test"],
        importance=importance,
        created_at=created,
        last_accessed_at=accessed or created,
    )


@pytest.fixture()
def store(redis_client) -> MemoryStore:
    return MemoryStore(redis_client, config=StoreConfig(key_prefix="test"), clock=lambda: NOW)


class TestAddAndGet:
    async def test_roundtrip(self, store):
        record = create_memory_record("observation", {"note": "fix the bug"}, ["critical"], now=NOW)

        returned_id = await store.add(record)
        loaded = await store.get(record.id)

        assert returned_id == record.id
        assert loaded == record

    async def test_missing_record(self, store):
        assert await store.get("missing") is None

    async def test_count(self, store):
        await store.add(_record("a"))
        await store.add(_record("b"))

        assert await store.count() == 2


class TestSnapshots:
    async def test_all_records_oldest_first(self, store):
        await store.add(_record("new", created=NOW))
        await store.add(_record("old", created=NOW - timedelta(days=2)))
        await store.add(_record("mid", created=NOW - timedelta(days=1)))

        records = await store.get_all_records()

        assert [r.id for r in records] == ["old", "mid", "new"]

    async def test_recent_newest_first(self, store):
        for days in range(5):
            await store.add(_record(f"r{days}", created=NOW - timedelta(days=days)))

        recent = await store.get_recent(limit=2)

        assert [r.id for r in recent] == ["r0", "r1"]
        assert await store.get_recent(limit=0) == []

    async def test_stale_index_entries_are_pruned(self, store, redis_client):
        await store.add(_record("a"))
        await redis_client.delete("test:record:a")

        assert await store.get_all_records() == []
        assert await store.count() == 0

    async def test_malformed_records_are_skipped(self, store, redis_client, caplog):
        await store.add(_record("good"))
        await redis_client.set("test:record:bad", "{not json")
        await redis_client.zadd("test:created", {"bad": NOW.timestamp()})

        records = await store.get_all_records()

        assert [r.id for r in records] == ["good"]
        assert "Skipping malformed memory record bad" in caplog.text


class TestTouchAccess:
    async def test_increments_and_refreshes(self, redis_client):
        later = NOW + timedelta(hours=1)
        store = MemoryStore(redis_client, config=StoreConfig(key_prefix="test"), clock=lambda: later)
        await store.add(_record("a"))

        updated = await store.touch_access("a")

        assert updated.access_count == 1
        assert updated.last_accessed_at == later
        assert updated.created_at == NOW
        assert (await store.get("a")).access_count == 1

    async def test_concurrent_touches_are_not_lost(self, store):
        await store.add(_record("a"))

        await asyncio.gather(*(store.touch_access("a") for _ in range(10)))

        assert (await store.get("a")).access_count == 10

    async def test_touches_from_separate_clients_are_not_lost(self, store, redis_container):
        other_client = Redis.from_url(redis_container)
        other = MemoryStore(other_client, config=StoreConfig(key_prefix="test"), clock=lambda: NOW)
        await store.add(_record("a"))

        try:
            await asyncio.gather(
                *(store.touch_access("a") for _ in range(10)),
                *(other.touch_access("a") for _ in range(10)),
            )
        finally:
            await other_client.aclose()

        assert (await store.get("a")).access_count == 20

    async def test_missing_record(self, store):
        assert await store.touch_access("missing") is None


class TestCleanup:
    async def test_removes_idle_unimportant_records(self, store):
        stale = NOW - timedelta(days=45)
        await store.add(_record("stale", created=stale))
        await store.add(_record("important", created=stale, importance=8))
        await store.add(_record("fresh"))

        removed = await store.cleanup_old_records()

        assert removed == 1
        assert [r.id for r in await store.get_all_records()] == ["important", "fresh"]

    async def test_explicit_thresholds(self, store):
        idle = NOW - timedelta(days=3)
        await store.add(_record("a", created=idle, importance=8))

        removed = await store.cleanup_old_records(days=1, importance_floor=9)

        assert removed == 1

    async def test_delete_and_clear(self, store, redis_client):
        await store.add(_record("a"))
        await store.add(_record("b"))
        await redis_client.set("other:key", "kept")

        await store.delete("a")
        assert await store.get("a") is None

        await store.clear()
        assert await store.count() == 0
        assert await redis_client.get("other:key") == b"kept"

    async def test_naive_stored_timestamps_are_read_as_utc(self, store, redis_client):
        await redis_client.set(
            "test:record:naive",
            '{"id": "naive", "content": "x", "importance": 5,'
            ' "created_at": "2026-01-01T00:00:00",'
            ' "last_accessed_at": "2026-01-01T00:00:00"}',
        )
        await redis_client.zadd("test:created", {"naive": 0})

        removed = await store.cleanup_old_records()

        assert removed == 1
