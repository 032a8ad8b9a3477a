"""Concurrent snippet enrichment of the top-ranked items.

Every item gets its own task and its own deadline. A task that times out or
raises only marks its own item as ``enrichment_failed``; the orchestrator
always waits for all tasks and returns results in rank order.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Sequence

from .models import EnrichedItem, ScoredItem, Snippet

logger = logging.getLogger(__name__)

SnippetFetcher = Callable[[str, int], Awaitable[Sequence[Snippet]]]


def _enriched(scored: ScoredItem, snippets: Sequence[Snippet], failed: bool) -> EnrichedItem:
    return EnrichedItem(
        item=scored.item,
        relevance_score=scored.relevance_score,
        position=scored.position,
        snippets=list(snippets),
        enrichment_failed=failed,
    )


async def enrich(
    top_items: Sequence[ScoredItem],
    fetch_snippets: SnippetFetcher,
    *,
    timeout: float = 6.0,
    max_snippets: int = 5,
    max_concurrency: int | None = None,
) -> List[EnrichedItem]:
    """Attach snippets to each of *top_items*, preserving their order.

    Parameters
    ----------
    fetch_snippets:
        ``await fetch_snippets(topic, limit)`` returning a sequence of
        :class:`Snippet`.
    timeout:
        Per-item deadline in seconds.
    max_concurrency:
        Upper bound on in-flight lookups; defaults to ``len(top_items)``.
    """
    if not top_items:
        return []

    semaphore = asyncio.Semaphore(max_concurrency or len(top_items))
    results: List[EnrichedItem | None] = [None] * len(top_items)

    async def _enrich_one(rank_idx: int, scored: ScoredItem) -> None:
        topic = scored.topic
        async with semaphore:
            try:
                snippets = await asyncio.wait_for(fetch_snippets(topic, max_snippets), timeout=timeout)
                results[rank_idx] = _enriched(scored, list(snippets or [])[:max_snippets], failed=False)
            except asyncio.TimeoutError:
                logger.warning(f"Snippet lookup for '{topic}' timed out after {timeout:.1f}s")
                results[rank_idx] = _enriched(scored, [], failed=True)
            except Exception as exc:  # noqa: BLE001 - one item's failure must not touch the others
                logger.warning(f"Snippet lookup for '{topic}' failed: {exc}")
                results[rank_idx] = _enriched(scored, [], failed=True)

    await asyncio.gather(*(_enrich_one(idx, scored) for idx, scored in enumerate(top_items)))

    failed = sum(1 for r in results if r is not None and r.enrichment_failed)
    logger.info(f"Enriched {len(results) - failed}/{len(results)} items ({failed} failed)")
    return [r for r in results if r is not None]
