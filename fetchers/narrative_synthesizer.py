"""Distill a Reddit thread's top comments into content narratives via Claude."""

import asyncio
import json
import logging
from typing import Any, Dict, List, Sequence

import httpx

from niche_radar.config import RadarSettings
from niche_radar.exceptions import NicheRadarError
from niche_radar.models import EnrichedItem, Narrative, RedditPost

from .niche_analyzer import strip_code_fences
from .trend_backend import TrendBackendClient

MAX_COMMENTS = 15
MAX_NARRATIVES = 3


def format_comments(comments: List[Dict[str, Any]], limit: int = MAX_COMMENTS) -> str:
    """Render comments as numbered ``[i] (score upvotes): body`` lines."""
    lines = []
    for i, comment in enumerate(comments[:limit], 1):
        lines.append(f"[{i}] ({comment.get('score', 0)} upvotes): {comment.get('body', '')}")
    return "\n\n".join(lines)


class NarrativeSynthesizer:
    """Extract the three most distinct narratives from a post's comments."""

    MODEL = "claude-haiku-4-5-20251001"

    def __init__(self, settings: RadarSettings, backend: TrendBackendClient):
        self.backend = backend
        self.logger = logging.getLogger(__name__)
        self.client = None
        if settings.anthropic_api_key:
            import anthropic
            self.client = anthropic.Anthropic(api_key=settings.anthropic_api_key)

    def _prompt(self, title: str, comments_text: str) -> str:
        return f"""You are analyzing Reddit comments to extract the top 3 narratives for a content creator.

Post title: "{title}"

Top comments by upvotes:
{comments_text}

Identify the 3 most distinct narratives or perspectives people express in these comments. Each should be a meaningful angle a content creator could make content about.

Return ONLY valid JSON (no markdown, no explanation):
{{
  "narratives": [
    {{"headline": "5-8 word punchy headline", "insight": "1-2 sentences on what people say and why it matters", "angle": "one specific content idea"}}
  ]
}}"""

    def parse_narratives(self, response_text: str) -> List[Narrative]:
        """Parse the model answer into at most three narratives."""
        try:
            data = json.loads(strip_code_fences(response_text))
        except json.JSONDecodeError as e:
            raise NicheRadarError(f"Unparseable narrative response: {e}") from e
        rows = data.get("narratives") if isinstance(data, dict) else None
        return [Narrative.model_validate(row) for row in (rows or [])[:MAX_NARRATIVES] if isinstance(row, dict)]

    async def synthesize(self, post_url: str, title: str) -> List[Narrative]:
        """Fetch the post's comments and ask Claude for its narratives."""
        if self.client is None:
            raise NicheRadarError("ANTHROPIC_API_KEY is not configured")

        comments = await self.backend.fetch_comments(post_url, amount=20)
        if not comments:
            raise NicheRadarError(f"No comments found for {post_url}")

        response = await asyncio.to_thread(
            self.client.messages.create,
            model=self.MODEL,
            max_tokens=600,
            messages=[{"role": "user", "content": self._prompt(title, format_comments(comments))}],
        )
        text = response.content[0].text if response.content else ""
        narratives = self.parse_narratives(text)
        self.logger.info(f"Synthesized {len(narratives)} narratives from {len(comments)} comments")
        return narratives

    async def synthesize_top(self, trends: Sequence[EnrichedItem], count: int) -> Dict[str, List[Narrative]]:
        """Narratives for the first *count* Reddit posts in *trends*, keyed by post URL.

        Posts whose thread has no comments, or whose lookup fails, are logged
        and left out.
        """
        posts = [t.item for t in trends if isinstance(t.item, RedditPost) and t.item.url][:count]
        narratives: Dict[str, List[Narrative]] = {}
        for post in posts:
            try:
                narratives[post.url] = await self.synthesize(post.url, post.title)
            except (NicheRadarError, httpx.HTTPError) as e:
                self.logger.warning(f"No narratives for '{post.title[:60]}': {e}")
        return narratives
