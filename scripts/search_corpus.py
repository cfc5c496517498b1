"""Run the search engine against a JSON export of memory records.

Usage:
    uv run python scripts/search_corpus.py \
      --corpus exports/memories.json \
      --query "login bug" --limit 5
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from pydantic import TypeAdapter

from recallmcp.memory.schemas import MemoryRecord
from recallmcp.search import SearchEngine
from recallmcp.search import SearchOptions

_RECORDS = TypeAdapter(list[MemoryRecord])


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    parser.add_argument("--corpus", required=True)
    parser.add_argument("--query", required=True)
    parser.add_argument("--limit", type=int, default=10)
    parser.add_argument("--min-score", type=float, default=0.3)
    parser.add_argument("--no-fuzzy", action="store_true")
    parser.add_argument("--no-tags", action="store_true")
    parser.add_argument("--no-semantic", action="store_true")
    parser.add_argument("--no-time-weight", action="store_true")
    parser.add_argument("--json", action="store_true", help="Emit the raw outcome.")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def load_corpus(path: Path) -> list[MemoryRecord]:
    """Load a JSON array of records (as exported by the store)."""
    return _RECORDS.validate_json(path.read_text(encoding="utf-8"))


def run(argv: list[str] | None = None) -> str:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    corpus = load_corpus(Path(args.corpus))
    options = SearchOptions(
        limit=args.limit,
        fuzzy=not args.no_fuzzy,
        tag_search=not args.no_tags,
        semantic_search=not args.no_semantic,
        min_score=args.min_score,
        time_weight=not args.no_time_weight,
    )
    engine = SearchEngine()
    outcome = engine.search(args.query, corpus, options)
    if args.json:
        return outcome.model_dump_json(indent=2)
    return engine.format_results(outcome)


def main() -> None:
    print(run())


if __name__ == "__main__":
    main()
