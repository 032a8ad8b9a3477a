"""Niche Radar.

Ranks a corpus of trending topics (Reddit posts, search trends) against a
creator's niche profile and attaches live social snippets to the best matches.
"""

from .models import (
    EnrichedItem,
    NicheProfile,
    PipelineResult,
    RedditPost,
    ScoredItem,
    SearchTrend,
    Snippet,
)

__all__ = [
    "EnrichedItem",
    "NicheProfile",
    "PipelineResult",
    "RedditPost",
    "ScoredItem",
    "SearchTrend",
    "Snippet",
]

__version__ = "0.1.0"
