"""Fuzzy text filtering.

A query matches a candidate string when every query character appears in
it in order, ignoring case. Matches are ranked by a score that rewards
runs of consecutive characters and characters that start a word.
"""

from collections.abc import Callable, Iterable  # noqa: TC003 - needed at runtime for signatures

_CONSECUTIVE_BONUS = 5
_WORD_START_BONUS = 3
_MATCH_SCORE = 1


def fuzzy_score(query: str, candidate: str) -> int | None:
    """Score ``candidate`` against ``query``.

    Returns:
        A positive score when ``query`` is a case-insensitive subsequence of
        ``candidate``, 0 for an empty query, or None when it does not match.

    Example:
        >>> fuzzy_score("sum", "Summarize text") > fuzzy_score("sum", "a simple user manual")
        True
    """
    needle = query.casefold().strip()
    if not needle:
        return 0
    haystack = candidate.casefold()

    score = 0
    position = 0
    previous = -2
    for char in needle:
        found = haystack.find(char, position)
        if found < 0:
            return None
        score += _MATCH_SCORE
        if found == previous + 1:
            score += _CONSECUTIVE_BONUS
        if found == 0 or not haystack[found - 1].isalnum():
            score += _WORD_START_BONUS
        previous = found
        position = found + 1
    return score


def fuzzy_filter[T](
    query: str,
    items: Iterable[T],
    key: Callable[[T], Iterable[str]],
) -> list[T]:
    """Keep items with a field matching ``query``, best matches first.

    Each item scores the best of its fields. Items with equal scores keep
    their input order. An empty query keeps every item in order.

    Args:
        query: Text to look for.
        items: Candidates.
        key: Returns the searchable fields of an item.
    """
    if not query.strip():
        return list(items)

    scored: list[tuple[int, int, T]] = []
    for index, item in enumerate(items):
        scores = [
            score
            for field in key(item)
            if field and (score := fuzzy_score(query, field)) is not None
        ]
        if scores:
            scored.append((-max(scores), index, item))

    scored.sort(key=lambda entry: (entry[0], entry[1]))
    return [item for _, _, item in scored]
