"""End-to-end niche radar pipeline.

corpus (with escalation) -> score -> rank/dedup -> top ``k_enrich`` ->
concurrent snippet enrichment -> top ``k_final`` -> :class:`PipelineResult`.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Protocol, Sequence

from .config import RadarSettings
from .enrichment import SnippetFetcher, enrich
from .escalation import fetch_corpus
from .models import NicheProfile, NicheSummary, PipelineResult, TrendItem
from .ranker import rank, top
from .scorer import RelevanceScorer

logger = logging.getLogger(__name__)


class ProfileProvider(Protocol):
    def analyze(self, keywords: List[str]) -> NicheProfile: ...


class CorpusProvider(Protocol):
    def corpus_fetcher(self, source: str, profile: NicheProfile) -> Callable[[bool], Awaitable[Sequence[TrendItem]]]: ...


class NicheRadarPipeline:
    """Rank a trend corpus against a niche and enrich the best matches."""

    def __init__(
        self,
        settings: RadarSettings,
        corpus_provider: CorpusProvider,
        fetch_snippets: SnippetFetcher,
        profile_provider: ProfileProvider | None = None,
    ):
        self.settings = settings
        self.corpus_provider = corpus_provider
        self.fetch_snippets = fetch_snippets
        self.profile_provider = profile_provider
        self.scorer = RelevanceScorer(settings)

    async def resolve_profile(self, keywords: List[str]) -> NicheProfile:
        """Ask the profile provider for a profile, degrading to keywords on any failure."""
        if self.profile_provider is None:
            logger.info("No profile provider configured, using keyword-only profile")
            return NicheProfile.degraded_from(keywords)
        try:
            return await asyncio.to_thread(self.profile_provider.analyze, keywords)
        except Exception as exc:  # noqa: BLE001 - extraction failure is never fatal
            logger.warning(f"Niche analysis failed, using keyword-only profile: {exc}")
            return NicheProfile.degraded_from(keywords)

    async def run(
        self,
        keywords: List[str] | None = None,
        profile: NicheProfile | None = None,
        source: str = "reddit",
    ) -> PipelineResult:
        """Run the full pipeline for *profile* (or for *keywords* via the profile provider).

        Raises:
            EmptyCorpusError: cached and fresh corpus fetches were both empty
            httpx.HTTPError: the corpus backend could not be reached
        """
        if profile is None:
            if not keywords:
                raise ValueError("Either keywords or a profile is required")
            profile = await self.resolve_profile(keywords)

        fetch = self.corpus_provider.corpus_fetcher(source, profile)
        corpus = await fetch_corpus(fetch, min_viable=self.settings.min_viable_for(source), source=source)

        ranked = rank(self.scorer.score_corpus(corpus.items, profile))
        logger.info(f"{len(ranked)}/{len(corpus.items)} {source} items matched the niche")

        enriched = await enrich(
            top(ranked, self.settings.k_enrich),
            self.fetch_snippets,
            timeout=self.settings.snippet_timeout,
            max_snippets=self.settings.max_snippets,
            max_concurrency=self.settings.enrichment_concurrency,
        )

        return PipelineResult(
            niche=NicheSummary.from_profile(profile),
            trends=top(enriched, self.settings.k_final),
            total_analyzed=len(corpus.items),
            total_matched=len(ranked),
            source=source,
            escalated=corpus.escalated,
        )
