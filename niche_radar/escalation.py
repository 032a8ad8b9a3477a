"""Corpus fetch with a single escalation to a fresh (non-cached) fetch."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Sequence

from .exceptions import EmptyCorpusError
from .models import TrendItem

logger = logging.getLogger(__name__)

CorpusFetcher = Callable[[bool], Awaitable[Sequence[TrendItem]]]


@dataclass(frozen=True)
class CorpusFetch:
    """Outcome of :func:`fetch_corpus`."""
    items: List[TrendItem]
    escalated: bool = False


async def fetch_corpus(fetch: CorpusFetcher, *, min_viable: int, source: str = "corpus") -> CorpusFetch:
    """Fetch the corpus from cache, escalating once to a fresh fetch if it is too small.

    The escalation fires on data insufficiency only (fewer than *min_viable*
    items); transport errors from *fetch* propagate untouched. If the fresh
    fetch comes back empty the cached items are kept; when both are empty
    :class:`EmptyCorpusError` is raised.
    """
    cached = list(await fetch(False))
    if len(cached) >= min_viable:
        logger.info(f"Using cached {source} corpus ({len(cached)} items)")
        return CorpusFetch(items=cached)

    logger.info(f"Cached {source} corpus has {len(cached)} items (< {min_viable}), requesting fresh data")
    fresh = list(await fetch(True))
    items = fresh or cached
    if not items:
        raise EmptyCorpusError(source)

    logger.info(f"Fresh {source} fetch returned {len(fresh)} items, using {len(items)}")
    return CorpusFetch(items=items, escalated=True)
