"""Fuzzy candidate ranking — forgiving typos without guessing wildly.

Used in two places:

- correcting an unknown command name (``lls`` → ``ls``);
- recovering from a path that does not exist (``cd bokos`` → ``cd books/``).

Each candidate is scored on three signals against the lowercased query:

1. **Prefix** — the candidate starts with the query.
2. **Substring** — the query appears somewhere inside the candidate.
3. **Edit distance** — the Levenshtein distance between the two.

A candidate is eligible when any of the three holds, where "close
enough" means a distance within a threshold that grows with the query
length.  Short queries get a tight threshold so ``ab`` does not match
half the vocabulary.

Candidates sort by ``(group, distance, name)`` where group is 0 for a
prefix match, 1 for a substring match, and 2 for everything else.  The
result is deterministic for identical inputs.
"""

from __future__ import annotations

from collections.abc import Iterable

_SHORT_QUERY = 4
_MEDIUM_QUERY = 8


def max_edit_distance(query_length: int) -> int:
    """Return the largest edit distance accepted for a query length."""
    if query_length <= _SHORT_QUERY:
        return 2
    if query_length <= _MEDIUM_QUERY:
        return 3
    return 4


def levenshtein(a: str, b: str) -> int:
    """Return the Levenshtein distance between *a* and *b*.

    Classic dynamic program with unit costs, keeping only two rows so
    memory is linear in ``len(b)``.
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    prev_row = list(range(len(b) + 1))
    for i, a_char in enumerate(a, start=1):
        next_row = [i] + [0] * len(b)
        for j, b_char in enumerate(b, start=1):
            cost = 0 if a_char == b_char else 1
            next_row[j] = min(
                prev_row[j] + 1,  # deletion
                next_row[j - 1] + 1,  # insertion
                prev_row[j - 1] + cost,  # substitution
            )
        prev_row = next_row
    return prev_row[-1]


def rank_candidates(query: str, candidates: Iterable[str], limit: int) -> list[str]:
    """Rank *candidates* against *query* and return at most *limit* of them.

    Args:
        query: What the visitor typed.
        candidates: Names to choose from, in their original case.
        limit: Maximum number of results.

    Returns:
        The eligible candidates, best first.  A blank query returns the
        first *limit* candidates in their given order.

    """
    pool = list(candidates)
    normalized = query.strip().lower()
    if not normalized:
        return pool[:limit]

    threshold = max_edit_distance(len(normalized))
    scored: list[tuple[int, int, str]] = []
    for candidate in pool:
        lowered = candidate.lower()
        starts = lowered.startswith(normalized)
        contains = normalized in lowered
        distance = levenshtein(normalized, lowered)
        if not (starts or contains or distance <= threshold):
            continue
        group = 0 if starts else 1 if contains else 2
        scored.append((group, distance, candidate))

    scored.sort()
    return [candidate for _group, _distance, candidate in scored[:limit]]
