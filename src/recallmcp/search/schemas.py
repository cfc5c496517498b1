"""Pydantic models for search inputs, intermediate matches and outcomes."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel
from pydantic import Field

from recallmcp.memory.schemas import MemoryRecord

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class QueryType(str, Enum):
    """Classification assigned to a query by the analyzer."""

    exact = "exact"
    fuzzy = "fuzzy"
    semantic = "semantic"
    tag_based = "tag-based"


class StrategyName(str, Enum):
    """The fixed set of scoring strategies, in execution order."""

    exact = "exact-match"
    tag_based = "tag-based"
    fuzzy = "fuzzy-content"
    semantic = "semantic-similarity"
    partial = "partial-match"


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


class SearchOptions(BaseModel):
    """Per-call search options. Out-of-range values are clamped by the engine."""

    limit: int = Field(
        default=10,
        description="Maximum number of ranked results to return.",
    )
    fuzzy: bool = Field(
        default=True,
        description="Run the fuzzy content strategy.",
    )
    tag_search: bool = Field(
        default=True,
        description="Run the tag-based strategy when tags were extracted.",
    )
    semantic_search: bool = Field(
        default=True,
        description="Run the semantic similarity strategy for longer queries.",
    )
    min_score: float = Field(
        default=0.3,
        description="Discard records whose final score is below this value.",
    )
    time_weight: bool = Field(
        default=True,
        description="Scale scores by record age, recency and access frequency.",
    )


# ---------------------------------------------------------------------------
# Intermediate / output models
# ---------------------------------------------------------------------------


class QueryAnalysis(BaseModel):
    """Per-call classification of a raw query."""

    model_config = {"frozen": True}

    original_query: str
    normalized_query: str
    extracted_tags: list[str] = Field(default_factory=list)
    keyword_tags: list[str] = Field(default_factory=list)
    query_type: QueryType = QueryType.fuzzy
    confidence: float = 0.5


class ScoredMatch(BaseModel):
    """One strategy hit against one record."""

    model_config = {"frozen": True}

    record: MemoryRecord = Field(
        description="The matched record (shared reference, never mutated).",
    )
    score: float = Field(
        description="Strategy-local score in [0, 1], or final score after ranking.",
    )
    strategy: str = Field(
        description="Name of the strategy that produced this match.",
    )
    match_details: list[str] = Field(
        default_factory=list,
        description="Human-readable explanations, for display only.",
    )


class SearchOutcome(BaseModel):
    """Result of one engine search call."""

    results: list[ScoredMatch] = Field(default_factory=list)
    total_matches: int = Field(
        default=0,
        description="Records passing min_score before the limit was applied.",
    )
    search_time_ms: float = Field(
        default=0.0,
        description="Wall-clock time spent in the engine.",
    )
    strategies_used: list[str] = Field(
        default_factory=list,
        description="Strategies that actually executed, in order.",
    )
    query_analysis: QueryAnalysis
