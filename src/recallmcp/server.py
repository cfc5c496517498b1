"""RecallMCP: FastMCP v2 server exposing memory storage and search tools.

Tools delegate to a ``RecordStore`` (Redis-backed by default) for
persistence and to ``SearchEngine`` for ranking. Call
``configure(redis_url=...)`` before using the server.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from datetime import timezone
from time import perf_counter
from typing import Any

from fastmcp import FastMCP
from pydantic import ValidationError

from recallmcp.config import SearchConfig
from recallmcp.config import StoreConfig
from recallmcp.memory import create_memory_record
from recallmcp.memory import MemoryStore
from recallmcp.memory import RecordStore
from recallmcp.models.schemas import AddMemoryInput
from recallmcp.models.schemas import AddMemoryResult
from recallmcp.models.schemas import CleanupResult
from recallmcp.models.schemas import GetMemoryResult
from recallmcp.models.schemas import ListMemoriesResult
from recallmcp.models.schemas import MemoryEntry
from recallmcp.models.schemas import SearchMemoriesInput
from recallmcp.models.schemas import SearchMemoriesResult
from recallmcp.models.schemas import SearchMeta
from recallmcp.models.schemas import SearchResultEntry
from recallmcp.observability import record_latency
from recallmcp.search import SearchEngine

logger = logging.getLogger(__name__)

mcp = FastMCP("RecallMCP")

# ---------------------------------------------------------------------------
# Backend instances (set via configure())
# ---------------------------------------------------------------------------

_store: RecordStore | None = None
_engine: SearchEngine | None = None
_store_config: StoreConfig = StoreConfig()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


_clock: Callable[[], datetime] = _utcnow


async def configure(
    redis_url: str | None = None,
    *,
    store: RecordStore | None = None,
    store_config: StoreConfig | None = None,
    search_config: SearchConfig | None = None,
    clock: Callable[[], datetime] | None = None,
) -> None:
    """Initialize the memory store and search engine.

    Must be called before the MCP tools can function. Pass *store* to
    inject a custom ``RecordStore``; otherwise a Redis store is built from
    *redis_url* (or ``store_config.redis_url``).
    """
    global _store, _engine, _store_config, _clock
    if _store is not None and _store is not store:
        try:
            await _store.close()
        except RuntimeError:
            # Tests may reconfigure across event loops.
            pass

    _store_config = store_config or StoreConfig()
    _clock = clock or _utcnow
    if store is None:
        store = MemoryStore.from_url(
            redis_url or _store_config.redis_url, config=_store_config
        )
    _store = store
    _engine = SearchEngine(config=search_config, clock=_clock)


async def shutdown() -> None:
    """Close backend clients and release server resources."""
    global _store, _engine
    if _store is not None:
        await _store.close()
        _store = None
    _engine = None


async def _reset_store() -> None:
    """Clear the store: exposed for test cleanup."""
    clear = getattr(_store, "clear", None)
    if callable(clear):
        await clear()


def _get_store() -> RecordStore:
    """Return the memory store instance or raise."""
    if _store is None:
        raise RuntimeError("Memory store not configured. Call configure() first.")
    return _store


def _get_engine() -> SearchEngine:
    if _engine is None:
        raise RuntimeError("Memory store not configured. Call configure() first.")
    return _engine


def _validation_message(exc: ValidationError) -> str:
    err = exc.errors()[0] if exc.errors() else {}
    return str(err.get("msg", "Invalid input"))


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@mcp.tool
async def add_memory(
    record_type: str,
    content: Any,
    tags: list[str] | None = None,
) -> AddMemoryResult:
    """Store a new memory.

    Args:
        record_type: One of observation, entity, relation, preference.
        content: Free text or a JSON object.
        tags: Optional tags used by tag-based search.
    """
    start = perf_counter()
    ok = False
    try:
        store = _get_store()
        try:
            validated = AddMemoryInput.model_validate(
                {"record_type": record_type, "content": content, "tags": tags or []}
            )
        except ValidationError as exc:
            return AddMemoryResult(
                memory_id="",
                status="rejected",
                error_code="validation_error",
                message=_validation_message(exc),
            )

        record = create_memory_record(
            validated.record_type,
            validated.content,
            validated.tags,
            now=_clock(),
        )
        await store.add(record)
        ok = True
        return AddMemoryResult(memory_id=record.id, importance=record.importance)
    finally:
        record_latency(
            operation="mcp.add_memory",
            duration_ms=(perf_counter() - start) * 1000,
            ok=ok,
        )


@mcp.tool
async def search_memories(
    query: str,
    limit: int = 10,
    fuzzy: bool = True,
    tag_search: bool = True,
    semantic_search: bool = True,
    min_score: float = 0.3,
    time_weight: bool = True,
    formatted: bool = True,
) -> SearchMemoriesResult:
    """Search memories with exact, tag, fuzzy, semantic and partial matching.

    Args:
        query: Free-text query.
        limit: Max memories returned.
        fuzzy: Enable edit-distance matching.
        tag_search: Enable tag expansion and matching.
        semantic_search: Enable concept/synonym matching.
        min_score: Minimum final score (0-1).
        time_weight: Favour recent and frequently accessed memories.
        formatted: Include a human-readable report.
    """
    start = perf_counter()
    ok = False
    try:
        store = _get_store()
        engine = _get_engine()
        try:
            validated = SearchMemoriesInput.model_validate(
                {
                    "query": query,
                    "limit": limit,
                    "fuzzy": fuzzy,
                    "tag_search": tag_search,
                    "semantic_search": semantic_search,
                    "min_score": min_score,
                    "time_weight": time_weight,
                    "formatted": formatted,
                }
            )
        except ValidationError as exc:
            return SearchMemoriesResult(
                status="error",
                error_code="validation_error",
                message=_validation_message(exc),
            )

        corpus = await store.get_all_records()
        outcome = engine.search(validated.query, corpus, validated.to_options())

        # Access bookkeeping happens after ranking, never inside the engine.
        for match in outcome.results:
            await store.touch_access(match.record.id)

        ok = True
        return SearchMemoriesResult(
            results=[SearchResultEntry.from_match(match) for match in outcome.results],
            meta=SearchMeta.from_outcome(outcome),
            report=engine.format_results(outcome) if validated.formatted else None,
        )
    finally:
        record_latency(
            operation="mcp.search_memories",
            duration_ms=(perf_counter() - start) * 1000,
            ok=ok,
        )


@mcp.tool
async def get_memory(memory_id: str) -> GetMemoryResult:
    """Fetch one memory by ID and record the access.

    Args:
        memory_id: ID returned by add_memory or search_memories.
    """
    start = perf_counter()
    ok = False
    try:
        record = await _get_store().touch_access(memory_id)
        ok = True
        if record is None:
            return GetMemoryResult(status="not_found")
        return GetMemoryResult(memory=MemoryEntry.from_record(record))
    finally:
        record_latency(
            operation="mcp.get_memory",
            duration_ms=(perf_counter() - start) * 1000,
            ok=ok,
        )


@mcp.tool
async def list_recent_memories(limit: int = 10) -> ListMemoriesResult:
    """List the newest memories with their store-side relevance.

    Args:
        limit: Max memories returned.
    """
    store = _get_store()
    records = await store.get_recent(limit=max(limit, 0))
    now = _clock()
    return ListMemoriesResult(
        memories=[
            MemoryEntry.from_record(
                record, relevance=round(record.relevance_score(now), 6)
            )
            for record in records
        ],
        total=len(records),
    )


@mcp.tool
async def cleanup_memories(days: int | None = None) -> CleanupResult:
    """Delete memories not accessed for *days* whose importance is below the floor.

    Args:
        days: Idle threshold in days (defaults to the store configuration).
    """
    store = _get_store()
    cutoff_days = _store_config.cleanup_days if days is None else max(days, 0)
    floor = _store_config.cleanup_importance_floor
    removed = await store.cleanup_old_records(days=cutoff_days, importance_floor=floor)
    logger.info("cleanup_memories removed=%d days=%d", removed, cutoff_days)
    return CleanupResult(removed=removed, days=cutoff_days, importance_floor=floor)


def main() -> None:
    """Console entry point: serve the MCP tools over stdio."""
    import argparse
    import asyncio

    parser = argparse.ArgumentParser(prog="recallmcp")
    parser.add_argument("--redis-url", default=StoreConfig().redis_url)
    args = parser.parse_args()

    asyncio.run(configure(redis_url=args.redis_url))
    mcp.run()
