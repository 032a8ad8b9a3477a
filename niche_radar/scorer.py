"""Relevance scoring of trend items against a niche profile."""

import logging
import math
import time
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from .config import GatePolicy, RadarSettings, ScoringWeights
from .matching import matches, matches_any, normalize
from .models import NicheProfile, ScoredItem, TrendItem

EXCLUDED = -1.0


@dataclass(frozen=True)
class _PreparedProfile:
    """Normalized view of a profile, built once per scoring pass."""
    keywords: Tuple[str, ...]
    phrases: Tuple[str, ...]
    categories: Tuple[str, ...]
    exclusions: Tuple[str, ...]


class RelevanceScorer:
    """Weighted keyword/phrase/category scoring with hard exclusions."""

    def __init__(self, settings: RadarSettings | None = None):
        """Initialize the scorer from *settings* (defaults when omitted)."""
        settings = settings or RadarSettings()
        self.weights: ScoringWeights = settings.weights
        self.gate_policy: GatePolicy = settings.gate_policy
        self.logger = logging.getLogger(__name__)

    def score(self, item: TrendItem, profile: NicheProfile) -> float:
        """Score one item; ``-1`` means the item is hard-excluded."""
        return self._score_prepared(item, self._prepare(profile))

    def score_corpus(self, items: Iterable[TrendItem], profile: NicheProfile) -> List[ScoredItem]:
        """Score every corpus item, keeping corpus order and positions."""
        start_time = time.time()
        prepared = self._prepare(profile)

        scored = [
            ScoredItem(item=item, relevance_score=self._score_prepared(item, prepared), position=idx)
            for idx, item in enumerate(items)
        ]

        excluded = sum(1 for s in scored if s.relevance_score == EXCLUDED)
        positive = sum(1 for s in scored if s.relevance_score > 0)
        elapsed = time.time() - start_time
        self.logger.info(
            f"Scored {len(scored)} items in {elapsed:.2f}s "
            f"({positive} positive, {excluded} excluded, policy={self.gate_policy.value})"
        )
        return scored

    def _prepare(self, profile: NicheProfile) -> _PreparedProfile:
        min_len = self.weights.min_phrase_length
        return _PreparedProfile(
            keywords=tuple(filter(None, map(normalize, profile.keywords))),
            phrases=tuple(p for p in map(normalize, profile.match_phrases) if len(p) > min_len),
            categories=tuple(filter(None, map(normalize, profile.categories))),
            exclusions=tuple(filter(None, map(normalize, profile.exclude_terms))),
        )

    def _score_prepared(self, item: TrendItem, profile: _PreparedProfile) -> float:
        w = self.weights
        topic = normalize(item.topic)

        # 1. Hard exclusion wins over every other signal
        if any(term in topic for term in profile.exclusions):
            return EXCLUDED

        # 2. Category gate
        overlaps = self._category_overlaps(item.categories, profile.categories)
        if profile.categories and overlaps == 0:
            return 0.0

        # 3. Term matches
        relevance = 0.0
        related = [normalize(t) for t in item.related_terms]
        for keyword in profile.keywords:
            if matches(topic, keyword):
                relevance += w.keyword_match
        for phrase in profile.phrases:
            if matches(topic, phrase):
                relevance += w.phrase_match
            if matches_any(related, phrase):
                relevance += w.related_term_match

        # 4. Category bonus, or floor for gated-in items without term matches.
        # Floor items get no popularity so they always rank below a genuine match.
        if relevance == 0:
            return w.category_floor if self.gate_policy is GatePolicy.LENIENT else 0.0
        relevance += w.category_bonus * overlaps

        # 5. Popularity tie-break
        relevance += self._popularity(item.popularity_volume, item.popularity_growth)
        return relevance

    @staticmethod
    def _category_overlaps(item_categories: Iterable[str], profile_categories: Tuple[str, ...]) -> int:
        """Count profile categories that overlap any item category (substring either way)."""
        if not profile_categories:
            return 0
        normalized = [c for c in map(normalize, item_categories) if c]
        return sum(
            1 for wanted in profile_categories
            if any(wanted in have or have in wanted for have in normalized)
        )

    def _popularity(self, volume: float, growth: float) -> float:
        w = self.weights
        volume_part = min(math.log10(max(volume, 0.0) + 1) * w.volume_coefficient, w.volume_cap)
        growth_part = min(max(growth, 0.0) / w.growth_divisor, w.growth_cap)
        return volume_part + growth_part
