"""Search domain: query analysis, scoring strategies and ranking."""

from recallmcp.search.analyzer import QueryAnalyzer
from recallmcp.search.analyzer import STOP_WORDS
from recallmcp.search.analyzer import TAG_MAPPINGS
from recallmcp.search.engine import normalize_options
from recallmcp.search.engine import SearchEngine
from recallmcp.search.formatting import format_results
from recallmcp.search.ranking import combine
from recallmcp.search.ranking import rank_matches
from recallmcp.search.ranking import STRATEGY_WEIGHTS
from recallmcp.search.ranking import strategy_weight
from recallmcp.search.ranking import time_weight
from recallmcp.search.schemas import QueryAnalysis
from recallmcp.search.schemas import QueryType
from recallmcp.search.schemas import ScoredMatch
from recallmcp.search.schemas import SearchOptions
from recallmcp.search.schemas import SearchOutcome
from recallmcp.search.schemas import StrategyName
from recallmcp.search.strategies import CONCEPT_MAP
from recallmcp.search.strategies import default_strategies
from recallmcp.search.strategies import ExactMatchStrategy
from recallmcp.search.strategies import FuzzyContentStrategy
from recallmcp.search.strategies import PartialMatchStrategy
from recallmcp.search.strategies import SearchStrategy
from recallmcp.search.strategies import SemanticSimilarityStrategy
from recallmcp.search.strategies import TagBasedStrategy

__all__ = [
    "CONCEPT_MAP",
    "ExactMatchStrategy",
    "FuzzyContentStrategy",
    "PartialMatchStrategy",
    "QueryAnalysis",
    "QueryAnalyzer",
    "QueryType",
    "STOP_WORDS",
    "STRATEGY_WEIGHTS",
    "ScoredMatch",
    "SearchEngine",
    "SearchOptions",
    "SearchOutcome",
    "SearchStrategy",
    "SemanticSimilarityStrategy",
    "StrategyName",
    "TAG_MAPPINGS",
    "TagBasedStrategy",
    "combine",
    "default_strategies",
    "format_results",
    "normalize_options",
    "rank_matches",
    "strategy_weight",
    "time_weight",
]
