"""Query analysis: normalization, tag expansion and query-type classification."""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Mapping
from types import MappingProxyType

from recallmcp.search.schemas import QueryAnalysis
from recallmcp.search.schemas import QueryType

# ---------------------------------------------------------------------------
# Static tables
# ---------------------------------------------------------------------------

TAG_MAPPINGS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        # Problems
        "critical": ("critical-issues", "high-priority", "urgent", "blocking"),
        "issues": ("critical-issues", "problems", "bugs", "errors", "failures"),
        "problems": ("critical-issues", "issues", "bugs", "errors", "failures"),
        "bugs": ("critical-issues", "problems", "errors", "failures", "debugging"),
        "errors": ("critical-issues", "problems", "bugs", "failures", "exceptions"),
        # Development
        "refactoring": (
            "refactoring",
            "architecture",
            "implementation",
            "restructuring",
        ),
        "architecture": ("refactoring", "design", "structure", "implementation"),
        "implementation": ("refactoring", "architecture", "development", "coding"),
        "plan": ("implementation-plan", "phases", "roadmap", "strategy"),
        "planning": ("implementation-plan", "phases", "roadmap", "strategy"),
        # Technologies
        "screen sharing": ("screen-sharing", "webrtc", "media", "streaming"),
        "remote control": ("remote-control", "permissions", "events", "interaction"),
        "webrtc": ("screen-sharing", "media", "streaming", "communication"),
        "socket": ("websocket", "communication", "real-time", "networking"),
        # Participants
        "claude": ("assistant", "ai", "conversation"),
        "session": ("user-session", "conversation", "interaction"),
        # Priority
        "high priority": ("high-priority", "urgent", "critical-issues"),
        "urgent": ("high-priority", "critical-issues", "immediate"),
        "immediate": ("urgent", "high-priority", "blocking"),
        "blocking": ("urgent", "high-priority", "critical-issues"),
    }
)

STOP_WORDS = frozenset(
    {
        "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with",
        "by", "from", "up", "about", "into", "through", "during", "before",
        "after", "above", "below", "between", "among", "within", "without",
        "this", "that", "these", "those", "what", "which", "who", "when",
        "where", "why", "how", "all", "any", "both", "each", "few", "more",
        "most", "other", "some", "such", "only", "own", "same", "so", "than",
        "too", "very", "can", "will", "just", "should", "now", "project",
        "system", "development", "code", "file", "function", "method",
    }
)  # fmt: skip

_MIN_TAG_WORD_LENGTH = 4
_SEMANTIC_MIN_LENGTH = 21
_EXACT_MAX_LENGTH = 9


def normalize_query(query: str) -> str:
    return query.lower().strip()


class QueryAnalyzer:
    """Classifies queries using immutable keyword and stop-word tables."""

    def __init__(
        self,
        tag_mappings: Mapping[str, Iterable[str]] | None = None,
        stop_words: Iterable[str] | None = None,
    ) -> None:
        source = TAG_MAPPINGS if tag_mappings is None else tag_mappings
        self._tag_mappings: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {keyword.lower(): tuple(tags) for keyword, tags in source.items()}
        )
        self._stop_words = frozenset(
            word.lower() for word in (STOP_WORDS if stop_words is None else stop_words)
        )

    def analyze(self, query: str) -> QueryAnalysis:
        """Normalize *query*, extract tags and pick a query type.

        Precedence: long prose matching no table keyword is ``semantic``;
        anything with extracted tags is ``tag-based``; quoted or short
        queries are ``exact``; everything else, a blank query included, falls
        back to ``fuzzy``.
        """
        normalized = normalize_query(query)
        keyword_tags = self.expand_keywords(normalized)
        tags = self.extract_tags(normalized)

        if not normalized:
            query_type, confidence = QueryType.fuzzy, 0.5
        elif len(normalized) >= _SEMANTIC_MIN_LENGTH and not keyword_tags:
            query_type, confidence = QueryType.semantic, 0.7
        elif tags:
            query_type, confidence = QueryType.tag_based, 0.8
        elif '"' in normalized or len(normalized) <= _EXACT_MAX_LENGTH:
            query_type, confidence = QueryType.exact, 0.9
        else:
            query_type, confidence = QueryType.fuzzy, 0.5

        return QueryAnalysis(
            original_query=query,
            normalized_query=normalized,
            extracted_tags=tags,
            keyword_tags=keyword_tags,
            query_type=query_type,
            confidence=confidence,
        )

    def extract_tags(self, normalized_query: str) -> list[str]:
        """Table expansions followed by ad-hoc content words, without duplicates."""
        tags = dict.fromkeys(self.expand_keywords(normalized_query))
        tags.update(dict.fromkeys(self.content_words(normalized_query)))
        return list(tags)

    def expand_keywords(self, normalized_query: str) -> list[str]:
        """Union of mapped tags for every table keyword contained in the query."""
        tags: dict[str, None] = {}
        for keyword, mapped in self._tag_mappings.items():
            if keyword in normalized_query:
                tags.update(dict.fromkeys(mapped))
        return list(tags)

    def content_words(self, normalized_query: str) -> list[str]:
        return [
            word
            for word in normalized_query.split()
            if len(word) >= _MIN_TAG_WORD_LENGTH and word not in self._stop_words
        ]
