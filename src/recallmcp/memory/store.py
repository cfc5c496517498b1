"""Redis-backed memory store.

Records are stored as JSON strings keyed by ``{prefix}:record:{id}``.
A sorted set ``{prefix}:created`` tracks creation order (score = epoch
seconds of ``created_at``) so corpus snapshots are returned in a
deterministic order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from datetime import timedelta
from datetime import timezone
from typing import Protocol

from pydantic import ValidationError
from redis.asyncio import Redis  # type: ignore[import-untyped]
from redis.exceptions import WatchError

from recallmcp.config import StoreConfig
from recallmcp.memory.schemas import MemoryRecord

logger = logging.getLogger(__name__)

_CLEAR_BATCH_SIZE = 100


class RecordStore(Protocol):
    """Storage contract consumed by the MCP server."""

    async def add(self, record: MemoryRecord) -> str:
        """Persist a record and return its id."""

    async def get(self, record_id: str) -> MemoryRecord | None:
        """Return a record without touching its access bookkeeping."""

    async def get_all_records(self) -> list[MemoryRecord]:
        """Return a snapshot of every record in creation order."""

    async def touch_access(self, record_id: str) -> MemoryRecord | None:
        """Increment the access counter and refresh ``last_accessed_at``."""

    async def get_recent(self, limit: int = 10) -> list[MemoryRecord]:
        """Return the newest records first."""

    async def cleanup_old_records(
        self, *, days: int, importance_floor: int
    ) -> int:
        """Drop stale, unimportant records and return how many were removed."""

    async def close(self) -> None:
        """Release backend resources."""


def _decode(raw: bytes | str) -> str:
    return raw.decode() if isinstance(raw, bytes) else raw


class MemoryStore:
    """Redis-backed memory record store."""

    def __init__(
        self,
        redis: Redis,
        *,
        config: StoreConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._redis = redis
        self._config = config or StoreConfig()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._record_key = f"{self._config.key_prefix}:record"
        self._created_key = f"{self._config.key_prefix}:created"

    @classmethod
    def from_url(cls, url: str, *, config: StoreConfig | None = None) -> MemoryStore:
        return cls(Redis.from_url(url), config=config)

    # -- write --

    async def add(self, record: MemoryRecord) -> str:
        """Store (or overwrite) a record and return its ID."""
        pipe = self._redis.pipeline()
        pipe.set(f"{self._record_key}:{record.id}", record.model_dump_json())
        pipe.zadd(self._created_key, {record.id: record.created_at.timestamp()})
        await pipe.execute()
        return record.id

    async def touch_access(self, record_id: str) -> MemoryRecord | None:
        """Bump ``access_count`` and set ``last_accessed_at`` to now.

        Runs as a WATCH/MULTI transaction and retries on conflict, so
        concurrent touches from other processes are not lost. Returns the
        updated record, or ``None`` when it no longer exists.
        """
        key = f"{self._record_key}:{record_id}"
        while True:
            try:
                async with self._redis.pipeline(transaction=True) as pipe:
                    await pipe.watch(key)
                    data = await pipe.get(key)
                    if data is None:
                        return None
                    record = MemoryRecord.model_validate_json(data)
                    updated = MemoryRecord.model_validate(
                        {
                            **record.model_dump(),
                            "access_count": record.access_count + 1,
                            "last_accessed_at": self._clock(),
                        }
                    )
                    pipe.multi()
                    pipe.set(key, updated.model_dump_json())
                    await pipe.execute()
                    return updated
            except WatchError:
                logger.debug("Watch conflict while touching %s, retrying", record_id)
                continue

    async def delete(self, record_id: str) -> None:
        pipe = self._redis.pipeline()
        pipe.delete(f"{self._record_key}:{record_id}")
        pipe.zrem(self._created_key, record_id)
        await pipe.execute()

    async def cleanup_old_records(
        self,
        *,
        days: int | None = None,
        importance_floor: int | None = None,
    ) -> int:
        """Remove records idle for more than *days* with importance below the floor."""
        days = self._config.cleanup_days if days is None else days
        floor = (
            self._config.cleanup_importance_floor
            if importance_floor is None
            else importance_floor
        )
        cutoff = self._clock() - timedelta(days=days)

        removed = 0
        for record in await self.get_all_records():
            if record.last_accessed_at < cutoff and record.importance < floor:
                await self.delete(record.id)
                removed += 1
        if removed:
            logger.info("cleanup removed %d stale memory records", removed)
        return removed

    async def clear(self) -> None:
        """Remove all records and indexes under the configured prefix."""
        batch: list = []
        async for key in self._redis.scan_iter(match=f"{self._config.key_prefix}:*"):
            batch.append(key)
            if len(batch) >= _CLEAR_BATCH_SIZE:
                await self._redis.delete(*batch)
                batch.clear()
        if batch:
            await self._redis.delete(*batch)

    # -- read --

    async def get(self, record_id: str) -> MemoryRecord | None:
        """Retrieve a record by ID, or ``None`` if missing."""
        data = await self._redis.get(f"{self._record_key}:{record_id}")
        if data is None:
            return None
        return MemoryRecord.model_validate_json(data)

    async def get_all_records(self) -> list[MemoryRecord]:
        """Return every record, oldest first."""
        ids = await self._redis.zrange(self._created_key, 0, -1)
        return await self._load([_decode(raw_id) for raw_id in ids])

    async def get_recent(self, limit: int = 10) -> list[MemoryRecord]:
        """Return the most recent records, newest first."""
        if limit <= 0:
            return []
        ids = await self._redis.zrevrange(self._created_key, 0, limit - 1)
        return await self._load([_decode(raw_id) for raw_id in ids])

    async def count(self) -> int:
        """Return the number of indexed records."""
        return await self._redis.zcard(self._created_key)

    async def close(self) -> None:
        await self._redis.aclose()

    # -- internal --

    async def _load(self, record_ids: list[str]) -> list[MemoryRecord]:
        if not record_ids:
            return []

        pipe = self._redis.pipeline()
        for rid in record_ids:
            pipe.get(f"{self._record_key}:{rid}")
        raw_results = await pipe.execute()

        stale_ids: list[str] = []
        records: list[MemoryRecord] = []
        for rid, raw in zip(record_ids, raw_results):
            if raw is None:
                stale_ids.append(rid)
                continue
            try:
                records.append(MemoryRecord.model_validate_json(raw))
            except ValidationError:
                logger.warning("Skipping malformed memory record %s", rid)

        if stale_ids:
            cleanup = self._redis.pipeline()
            for rid in stale_ids:
                cleanup.zrem(self._created_key, rid)
            await cleanup.execute()

        return records
