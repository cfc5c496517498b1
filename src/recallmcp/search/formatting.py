"""Plain-text rendering of search outcomes."""

from __future__ import annotations

from recallmcp.search.schemas import ScoredMatch
from recallmcp.search.schemas import SearchOutcome

_RULE = "-" * 60

NO_RESULTS_TIPS = (
    'Try broader terms (e.g. "screen" instead of "screen sharing bug").',
    "Use specific identifiers such as project or file names.",
    'Search by tags (e.g. "critical", "webrtc", "refactoring").',
    "Check which strategies ran; short queries skip the semantic and partial passes.",
)


def format_results(outcome: SearchOutcome, *, preview_chars: int = 200) -> str:
    """Render ranked results plus query diagnostics as a text report."""
    analysis = outcome.query_analysis
    lines = [
        "Memory Search Results",
        _RULE,
        f'Query: "{analysis.original_query}"',
        f"Search Type: {analysis.query_type.value}",
        f"Confidence: {analysis.confidence * 100:.1f}%",
        f"Strategies Used: {', '.join(outcome.strategies_used) or '(none)'}",
        f"Total Matches: {outcome.total_matches}",
        f"Search Time: {outcome.search_time_ms:.1f}ms",
    ]
    if analysis.extracted_tags:
        lines.append(f"Extracted Tags: {', '.join(analysis.extracted_tags)}")
    lines.extend([_RULE, ""])

    if not outcome.results:
        lines.append("No memories found matching your query.")
        lines.append("")
        lines.append("Search tips:")
        lines.extend(f"  - {tip}" for tip in NO_RESULTS_TIPS)
        return "\n".join(lines) + "\n"

    for position, match in enumerate(outcome.results, start=1):
        lines.extend(_format_match(position, match, preview_chars))
        lines.append("")
    return "\n".join(lines)


def _format_match(position: int, match: ScoredMatch, preview_chars: int) -> list[str]:
    record = match.record
    lines = [
        f"{position}. Memory ID: {record.id} ({record.record_type.value})",
        f"   Score: {match.score * 100:.1f}% | Strategy: {match.strategy}",
        f"   Tags: {', '.join(record.tags) or '(none)'}",
        f"   Created: {record.created_at.date().isoformat()}",
        f"   Accessed: {record.access_count} times",
    ]
    if match.match_details:
        lines.append(f"   Match Details: {'; '.join(match.match_details)}")
    lines.append(f"   Content: {content_preview(match, preview_chars)}")
    return lines


def content_preview(match: ScoredMatch, preview_chars: int = 200) -> str:
    text = match.record.serialized_content()
    if len(text) <= preview_chars:
        return text
    return text[:preview_chars] + "..."
