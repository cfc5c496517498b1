"""The fixed set of scoring strategies.

Each strategy is a pure pass over the corpus: it reads the query analysis
and the records, never mutates either, and returns one ``ScoredMatch`` per
record it considers relevant (an empty list when nothing matches).
Strategies score in [0, 1]; cross-strategy trade-offs live in
``recallmcp.search.ranking``.
"""

from __future__ import annotations

from abc import ABC
from abc import abstractmethod
from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from types import MappingProxyType

from recallmcp.memory.schemas import MemoryRecord
from recallmcp.search.schemas import QueryAnalysis
from recallmcp.search.schemas import ScoredMatch
from recallmcp.search.schemas import SearchOptions
from recallmcp.search.schemas import StrategyName
from recallmcp.search.similarity import best_token_similarity

CONCEPT_MAP: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "error": ("bug", "issue", "problem", "exception", "failure"),
        "fix": ("solve", "repair", "correct", "resolve"),
        "screen": ("display", "monitor", "view", "visual"),
        "share": ("sharing", "broadcast", "stream", "transmit"),
        "control": ("manage", "handle", "command", "direct"),
    }
)

# Exact match
_CONTENT_HIT = 0.8
_PHRASE_BONUS = 0.2
_TAG_HIT = 0.6
# Tag-based
_TAG_EQUAL = 1.0
_TAG_CONTAINED = 0.5
# Fuzzy
_FUZZY_MIN_WORD = 3
_FUZZY_MIN_SIMILARITY = 0.3
_FUZZY_SCALE = 0.8
# Semantic
_SEMANTIC_MIN_QUERY = 11
_SEMANTIC_MIN_SCORE = 0.2
_CONCEPT_WEIGHT = 0.5
# Partial
_PARTIAL_MIN_QUERY = 6
_PARTIAL_MIN_FRAGMENT = 3


class SearchStrategy(ABC):
    """One independent, explainable scoring pass."""

    name: StrategyName

    @abstractmethod
    def should_run(self, options: SearchOptions, analysis: QueryAnalysis) -> bool:
        """Gate the strategy on caller options and the query analysis."""

    @abstractmethod
    def execute(
        self, analysis: QueryAnalysis, corpus: Sequence[MemoryRecord]
    ) -> list[ScoredMatch]:
        """Score every record in *corpus* against the analysed query."""

    def _match(
        self, record: MemoryRecord, score: float, details: list[str]
    ) -> ScoredMatch:
        return ScoredMatch(
            record=record,
            score=min(score, 1.0),
            strategy=self.name.value,
            match_details=details,
        )


class ExactMatchStrategy(SearchStrategy):
    """Literal substring of the whole query in content and/or tags."""

    name = StrategyName.exact

    def should_run(self, options: SearchOptions, analysis: QueryAnalysis) -> bool:
        return True

    def execute(
        self, analysis: QueryAnalysis, corpus: Sequence[MemoryRecord]
    ) -> list[ScoredMatch]:
        query = analysis.normalized_query
        if not query:
            return []
        multi_word = len(query.split()) > 1

        matches: list[ScoredMatch] = []
        for record in corpus:
            content = record.content_text()
            tags = record.tags_text()
            score = 0.0
            details: list[str] = []
            if query in content:
                score += _CONTENT_HIT
                details.append(f'Content match: "{query}"')
                if multi_word:
                    score += _PHRASE_BONUS
                    details.append("Full phrase match")
            if query in tags:
                score += _TAG_HIT
                details.append(f'Tag match: "{query}"')
            if score > 0:
                matches.append(self._match(record, score, details))
        return matches


class TagBasedStrategy(SearchStrategy):
    """Extracted tags against record tags: equality 1.0, containment 0.5."""

    name = StrategyName.tag_based

    def should_run(self, options: SearchOptions, analysis: QueryAnalysis) -> bool:
        return options.tag_search and bool(analysis.extracted_tags)

    def execute(
        self, analysis: QueryAnalysis, corpus: Sequence[MemoryRecord]
    ) -> list[ScoredMatch]:
        query_tags = analysis.extracted_tags
        if not query_tags:
            return []

        matches: list[ScoredMatch] = []
        for record in corpus:
            record_tags = [tag.lower() for tag in record.tags if tag]
            total = 0.0
            matched: list[str] = []
            for tag in query_tags:
                contribution = _tag_contribution(tag, record_tags)
                if contribution:
                    total += contribution
                    matched.append(tag)
            if total > 0:
                matches.append(
                    self._match(
                        record,
                        total / len(query_tags),
                        [f"Matched tags: {', '.join(matched)}"],
                    )
                )
        return matches


class FuzzyContentStrategy(SearchStrategy):
    """Per-word edit-distance similarity against content and tag tokens."""

    name = StrategyName.fuzzy

    def should_run(self, options: SearchOptions, analysis: QueryAnalysis) -> bool:
        return options.fuzzy

    def execute(
        self, analysis: QueryAnalysis, corpus: Sequence[MemoryRecord]
    ) -> list[ScoredMatch]:
        words = [
            word
            for word in analysis.normalized_query.split()
            if len(word) >= _FUZZY_MIN_WORD
        ]
        if not words:
            return []

        matches: list[ScoredMatch] = []
        for record in corpus:
            text = f"{record.content_text()} {record.tags_text()}"
            total = 0.0
            matched: list[str] = []
            for word in words:
                similarity = best_token_similarity(word, text)
                if similarity > _FUZZY_MIN_SIMILARITY:
                    total += similarity
                    matched.append(word)
            if matched:
                # Scaled so a fuzzy hit never outranks an equally strong exact hit.
                score = total / len(words) * _FUZZY_SCALE
                matches.append(
                    self._match(
                        record, score, [f"Fuzzy matched words: {', '.join(matched)}"]
                    )
                )
        return matches


class SemanticSimilarityStrategy(SearchStrategy):
    """Word overlap plus half-weighted concept/synonym hits."""

    name = StrategyName.semantic

    def __init__(self, concepts: Mapping[str, Iterable[str]] | None = None) -> None:
        source = CONCEPT_MAP if concepts is None else concepts
        self._concepts: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {concept: tuple(terms) for concept, terms in source.items()}
        )

    def should_run(self, options: SearchOptions, analysis: QueryAnalysis) -> bool:
        return (
            options.semantic_search
            and len(analysis.normalized_query) >= _SEMANTIC_MIN_QUERY
        )

    def execute(
        self, analysis: QueryAnalysis, corpus: Sequence[MemoryRecord]
    ) -> list[ScoredMatch]:
        query_words = list(dict.fromkeys(analysis.normalized_query.split()))
        if not query_words:
            return []

        matches: list[ScoredMatch] = []
        for record in corpus:
            content_words = record.content_text().split()
            content_set = set(content_words)
            direct = sum(1 for word in query_words if word in content_set)
            conceptual = sum(
                1
                for word in query_words
                if self._has_related_term(word, content_words)
            )
            score = (direct + _CONCEPT_WEIGHT * conceptual) / len(query_words)
            if score > _SEMANTIC_MIN_SCORE:
                shown = min(score, 1.0)
                matches.append(
                    self._match(
                        record, shown, [f"Semantic similarity: {shown * 100:.1f}%"]
                    )
                )
        return matches

    def _has_related_term(self, word: str, content_words: list[str]) -> bool:
        related = self._concepts.get(word, ())
        return any(term in token for term in related for token in content_words)


class PartialMatchStrategy(SearchStrategy):
    """Fraction of query fragments found anywhere in content or tags."""

    name = StrategyName.partial

    def should_run(self, options: SearchOptions, analysis: QueryAnalysis) -> bool:
        return len(analysis.normalized_query) >= _PARTIAL_MIN_QUERY

    def execute(
        self, analysis: QueryAnalysis, corpus: Sequence[MemoryRecord]
    ) -> list[ScoredMatch]:
        fragments = analysis.normalized_query.split()
        if not fragments:
            return []

        matches: list[ScoredMatch] = []
        for record in corpus:
            content = record.content_text()
            tags = record.tags_text()
            matched = [
                fragment
                for fragment in fragments
                if len(fragment) >= _PARTIAL_MIN_FRAGMENT
                and (fragment in content or fragment in tags)
            ]
            if matched:
                matches.append(
                    self._match(
                        record,
                        len(matched) / len(fragments),
                        [f"Partial matches: {', '.join(matched)}"],
                    )
                )
        return matches


def default_strategies() -> tuple[SearchStrategy, ...]:
    """The registry, in execution order."""
    return (
        ExactMatchStrategy(),
        TagBasedStrategy(),
        FuzzyContentStrategy(),
        SemanticSimilarityStrategy(),
        PartialMatchStrategy(),
    )


def _tag_contribution(tag: str, record_tags: list[str]) -> float:
    if tag in record_tags:
        return _TAG_EQUAL
    if any(tag in record_tag or record_tag in tag for record_tag in record_tags):
        return _TAG_CONTAINED
    return 0.0
