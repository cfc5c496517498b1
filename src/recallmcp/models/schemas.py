"""Pydantic models for the MCP interface.

Input models validate tool arguments; output models shape responses.
FastMCP v2 serializes Pydantic models automatically.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel
from pydantic import Field

from recallmcp.memory.schemas import MemoryRecord
from recallmcp.memory.schemas import RecordType
from recallmcp.search.schemas import ScoredMatch
from recallmcp.search.schemas import SearchOptions
from recallmcp.search.schemas import SearchOutcome

# ---------------------------------------------------------------------------
# Input models
# ---------------------------------------------------------------------------


class AddMemoryInput(BaseModel):
    """Input for add_memory tool."""

    record_type: RecordType = Field(
        description="observation, entity, relation or preference.",
    )
    content: Any = Field(
        description="Free text or a JSON object describing the memory.",
    )
    tags: list[str] = Field(
        default_factory=list,
        description="Tags used by tag-based search.",
    )


class SearchMemoriesInput(BaseModel):
    """Input for search_memories tool."""

    query: str = Field(
        description="Free-text search query.",
    )
    limit: int = Field(
        default=10,
        description="Maximum number of memories to return.",
    )
    fuzzy: bool = Field(
        default=True,
        description="Enable edit-distance matching.",
    )
    tag_search: bool = Field(
        default=True,
        description="Enable tag expansion and tag matching.",
    )
    semantic_search: bool = Field(
        default=True,
        description="Enable concept/synonym matching.",
    )
    min_score: float = Field(
        default=0.3,
        description="Minimum final score for a memory to be returned.",
    )
    time_weight: bool = Field(
        default=True,
        description="Favour recent and frequently accessed memories.",
    )
    formatted: bool = Field(
        default=True,
        description="Include a human-readable report alongside the results.",
    )

    def to_options(self) -> SearchOptions:
        return SearchOptions(
            limit=self.limit,
            fuzzy=self.fuzzy,
            tag_search=self.tag_search,
            semantic_search=self.semantic_search,
            min_score=self.min_score,
            time_weight=self.time_weight,
        )


# ---------------------------------------------------------------------------
# Output models: shared
# ---------------------------------------------------------------------------


class MemoryEntry(BaseModel):
    """A memory record as returned to MCP clients."""

    id: str
    record_type: RecordType
    content: Any = None
    tags: list[str] = Field(default_factory=list)
    importance: int = 5
    created_at: datetime
    last_accessed_at: datetime
    access_count: int = 0
    relevance: float | None = Field(
        default=None,
        description="Store-side relevance score (list_recent_memories only).",
    )

    @classmethod
    def from_record(
        cls, record: MemoryRecord, *, relevance: float | None = None
    ) -> MemoryEntry:
        return cls(
            id=record.id,
            record_type=record.record_type,
            content=record.content,
            tags=list(record.tags),
            importance=record.importance,
            created_at=record.created_at,
            last_accessed_at=record.last_accessed_at,
            access_count=record.access_count,
            relevance=relevance,
        )


# ---------------------------------------------------------------------------
# Output models: add_memory
# ---------------------------------------------------------------------------


class AddMemoryResult(BaseModel):
    """Response from add_memory."""

    memory_id: str = Field(
        description="ID assigned to the newly created memory.",
    )
    status: str = Field(
        default="accepted",
        description="'accepted' or 'rejected'.",
    )
    importance: int | None = None
    error_code: str | None = None
    message: str | None = None


# ---------------------------------------------------------------------------
# Output models: search_memories
# ---------------------------------------------------------------------------


class SearchResultEntry(BaseModel):
    """One ranked search hit."""

    memory: MemoryEntry
    score: float = Field(
        description="Final weighted score in [0, 1].",
    )
    strategy: str = Field(
        description="Strategy whose match ranked this memory.",
    )
    match_details: list[str] = Field(default_factory=list)

    @classmethod
    def from_match(cls, match: ScoredMatch) -> SearchResultEntry:
        return cls(
            memory=MemoryEntry.from_record(match.record),
            score=round(match.score, 6),
            strategy=match.strategy,
            match_details=list(match.match_details),
        )


class SearchMeta(BaseModel):
    """Query diagnostics for search_memories."""

    query: str
    query_type: str
    confidence: float
    extracted_tags: list[str] = Field(default_factory=list)
    strategies_used: list[str] = Field(default_factory=list)
    total_matches: int = 0
    returned: int = 0
    search_ms: float = 0.0

    @classmethod
    def from_outcome(cls, outcome: SearchOutcome) -> SearchMeta:
        analysis = outcome.query_analysis
        return cls(
            query=analysis.original_query,
            query_type=analysis.query_type.value,
            confidence=analysis.confidence,
            extracted_tags=list(analysis.extracted_tags),
            strategies_used=list(outcome.strategies_used),
            total_matches=outcome.total_matches,
            returned=len(outcome.results),
            search_ms=outcome.search_time_ms,
        )


class SearchMemoriesResult(BaseModel):
    """Response from search_memories."""

    status: str = "ok"
    error_code: str | None = None
    message: str | None = None
    results: list[SearchResultEntry] = Field(default_factory=list)
    meta: SearchMeta | None = None
    report: str | None = Field(
        default=None,
        description="Human-readable report, when requested.",
    )


# ---------------------------------------------------------------------------
# Output models: get / list / cleanup
# ---------------------------------------------------------------------------


class GetMemoryResult(BaseModel):
    """Response from get_memory."""

    status: str = "ok"
    memory: MemoryEntry | None = None


class ListMemoriesResult(BaseModel):
    """Response from list_recent_memories."""

    memories: list[MemoryEntry] = Field(default_factory=list)
    total: int = 0


class CleanupResult(BaseModel):
    """Response from cleanup_memories."""

    removed: int = 0
    days: int
    importance_floor: int
