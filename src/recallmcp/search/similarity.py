"""String-distance helpers used by the fuzzy content strategy."""

from __future__ import annotations


def levenshtein(a: str, b: str) -> int:
    """Edit distance counting single-character insertions, deletions and substitutions."""
    if len(a) < len(b):
        return levenshtein(b, a)
    if len(b) == 0:
        return len(a)

    prev_row = list(range(len(b) + 1))
    for i, ca in enumerate(a):
        curr_row = [i + 1]
        for j, cb in enumerate(b):
            cost = 0 if ca == cb else 1
            curr_row.append(
                min(
                    prev_row[j + 1] + 1,  # deletion
                    curr_row[j] + 1,  # insertion
                    prev_row[j] + cost,  # substitution
                )
            )
        prev_row = curr_row
    return prev_row[-1]


def edit_similarity(a: str, b: str) -> float:
    """1.0 = identical, 0.0 = completely different."""
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return 1.0 - levenshtein(a, b) / max_len


def best_token_similarity(word: str, text: str) -> float:
    """Best similarity of *word* against the whitespace tokens of *text*.

    A literal substring hit anywhere in *text* short-circuits to 1.0.
    """
    if word in text:
        return 1.0

    best = 0.0
    for token in text.split():
        similarity = edit_similarity(word, token)
        if similarity > best:
            best = similarity
    return best
