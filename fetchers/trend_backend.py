"""Async client for the trends backend.

Endpoints used
--------------
``GET /trends/{source}?limit=&fresh=true``                     search-style trends (Google etc.)
``GET /trends/reddit?subreddits=&limit=&fresh=``               posts from the niche's subreddits
``GET /trends/twitter/search?query=&limit=``                   tweets about one topic (snippets)
``GET /trends/reddit/comments?url=&amount=``                   top comments of one post
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List

import httpx

from niche_radar.config import RadarSettings
from niche_radar.exceptions import BackendError, SnippetFetchError
from niche_radar.models import NicheProfile, RedditPost, Snippet, TrendItem, parse_trend_item

from .category_tagger import CategoryTagger

logger = logging.getLogger(__name__)

USER_AGENT = "NicheRadar/0.1 (+trend relevance pipeline)"


class TrendBackendClient:
    """Thin async wrapper over the trends backend HTTP API."""

    def __init__(
        self,
        settings: RadarSettings,
        client: httpx.AsyncClient | None = None,
        tagger: CategoryTagger | None = None,
    ):
        self.settings = settings
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=settings.api_url,
            timeout=httpx.Timeout(settings.timeout_for("reddit")),
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )
        self.tagger = tagger or CategoryTagger()

    async def __aenter__(self) -> "TrendBackendClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    # ------------------------------------------------------------------
    # Corpus
    # ------------------------------------------------------------------

    async def fetch_trends(
        self,
        source: str,
        *,
        limit: int,
        fresh: bool = False,
        subreddits: List[str] | None = None,
    ) -> List[TrendItem]:
        """Fetch one corpus page from *source*; HTTP errors propagate."""
        if source == "reddit":
            params: Dict[str, Any] = {
                "subreddits": ",".join(subreddits or []),
                "limit": limit,
                "fresh": "true" if fresh else "false",
            }
        else:
            params = {"limit": limit}
            if fresh:
                params["fresh"] = "true"

        payload = await self._get_json(f"/trends/{source}", params, self.settings.timeout_for(source))
        if payload.get("success") is False:
            raise BackendError(payload.get("error") or f"Backend refused {source} trends")

        if source == "reddit":
            rows = payload.get("posts") or []
            posts: List[RedditPost] = [parse_trend_item(row, "reddit") for row in rows if isinstance(row, dict)]
            items: List[TrendItem] = list(self.tagger.tag_posts(posts))
        else:
            data = payload.get("data") if isinstance(payload.get("data"), dict) else payload
            rows = data.get("trends") or []
            items = [parse_trend_item(row, "search") for row in rows if isinstance(row, dict)]

        logger.info(f"Fetched {len(items)} {source} items (limit={limit}, fresh={fresh})")
        return items

    def corpus_fetcher(self, source: str, profile: NicheProfile) -> Callable[[bool], Awaitable[List[TrendItem]]]:
        """Bind *source* and *profile* into a ``fetch(fresh)`` callable for escalation."""
        limit = self.settings.limit_for(source)

        async def _fetch(fresh: bool) -> List[TrendItem]:
            return await self.fetch_trends(source, limit=limit, fresh=fresh, subreddits=profile.subreddits)

        return _fetch

    # ------------------------------------------------------------------
    # Snippets & comments
    # ------------------------------------------------------------------

    async def fetch_snippets(self, topic: str, limit: int = 5) -> List[Snippet]:
        """Return up to *limit* tweets about *topic*; any failure raises :class:`SnippetFetchError`."""
        try:
            response = await self.client.get(
                "/trends/twitter/search",
                params={"query": topic, "limit": limit},
                timeout=self.settings.snippet_timeout,
            )
        except httpx.HTTPError as exc:
            raise SnippetFetchError(f"Twitter search for '{topic}' failed: {exc}") from exc

        if not response.is_success:
            raise SnippetFetchError(f"Twitter search for '{topic}' returned HTTP {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise SnippetFetchError(f"Twitter search for '{topic}' returned invalid JSON") from exc
        if payload.get("success") is False:
            raise SnippetFetchError(payload.get("error") or f"Twitter search for '{topic}' failed")

        tweets = payload.get("tweets")
        if tweets is None and isinstance(payload.get("data"), dict):
            tweets = payload["data"].get("tweets")
        return [Snippet.model_validate(t) for t in (tweets or [])[:limit] if isinstance(t, dict)]

    async def fetch_comments(self, post_url: str, amount: int = 20) -> List[Dict[str, Any]]:
        """Return the top comments (``{"score", "body"}`` dicts) of a Reddit post."""
        payload = await self._get_json(
            "/trends/reddit/comments",
            {"url": post_url, "amount": amount},
            self.settings.comments_timeout,
        )
        if payload.get("success") is False:
            raise BackendError(payload.get("error") or "Backend refused comments request")
        return [c for c in payload.get("comments") or [] if isinstance(c, dict)]

    async def _get_json(self, path: str, params: Dict[str, Any], timeout: float) -> Dict[str, Any]:
        response = await self.client.get(path, params=params, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise BackendError(f"Unexpected payload from {path}: {type(payload).__name__}")
        return payload
