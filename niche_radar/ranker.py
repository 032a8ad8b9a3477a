"""Deduplication and ordering of scored trend items."""
from __future__ import annotations

from typing import Iterable, List, Sequence, TypeVar

from .matching import normalize
from .models import ScoredItem

T = TypeVar("T")


def rank(scored_items: Iterable[ScoredItem]) -> List[ScoredItem]:
    """Drop non-positive scores, de-duplicate by topic and sort by score.

    Items are expected in corpus order. Among items with the same normalized
    topic the first one in corpus order is kept, whatever the later duplicates
    scored. Ties keep corpus order (``sorted`` is stable).
    """
    seen: set[str] = set()
    unique: List[ScoredItem] = []
    for scored in sorted(scored_items, key=lambda s: s.position):
        if scored.relevance_score <= 0:
            continue
        key = normalize(scored.topic)
        if key in seen:
            continue
        seen.add(key)
        unique.append(scored)

    return sorted(unique, key=lambda s: s.relevance_score, reverse=True)


def top(items: Sequence[T], k: int) -> List[T]:
    """Return at most the first *k* items."""
    return list(items[: max(k, 0)])
