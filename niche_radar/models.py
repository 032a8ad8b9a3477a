"""Pydantic data models used across the niche radar pipeline."""
from __future__ import annotations

from typing import Annotated, Any, List, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator

DEFAULT_SUBREDDITS = ["entrepreneur", "productivity", "SideProject"]


def _clean_terms(values: Any) -> List[str]:
    """Drop blanks and non-strings from a term list; ``None`` becomes ``[]``."""
    if not values:
        return []
    if not isinstance(values, (list, tuple, set)):
        values = [values]
    return [str(v).strip() for v in values if v is not None and str(v).strip()]


def _non_negative(value: Any) -> float:
    """Coerce a counter to a non-negative float (missing/garbage -> 0)."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if number > 0 else 0.0


class NicheProfile(BaseModel):
    """Creator intent the corpus is ranked against."""

    keywords: List[str] = Field(..., description="Raw user terms, e.g. ['ai tools', 'productivity']")
    match_phrases: List[str] = Field(default_factory=list, description="Phrases expected verbatim in relevant items")
    categories: List[str] = Field(default_factory=list, description="Coarse topical buckets; empty disables gating")
    exclude_terms: List[str] = Field(default_factory=list, description="Hard-negative terms")
    description: str = Field("", description="One sentence describing the audience")
    subreddits: List[str] = Field(default_factory=lambda: list(DEFAULT_SUBREDDITS))
    degraded: bool = Field(False, description="True when built without the profile provider")

    model_config = {
        "frozen": True,
    }

    @field_validator("keywords", "match_phrases", "categories", "exclude_terms", "subreddits", mode="before")
    @classmethod
    def _strip_terms(cls, value: Any) -> List[str]:
        return _clean_terms(value)

    @field_validator("keywords")
    @classmethod
    def _require_keywords(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("keywords must contain at least one non-blank term")
        return value

    @model_validator(mode="before")
    @classmethod
    def _apply_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        keywords = _clean_terms(data.get("keywords"))
        if not _clean_terms(data.get("match_phrases")):
            data["match_phrases"] = keywords
        if not str(data.get("description") or "").strip():
            data["description"] = ", ".join(keywords)
        if not _clean_terms(data.get("subreddits")):
            data["subreddits"] = list(DEFAULT_SUBREDDITS)
        return data

    @classmethod
    def degraded_from(cls, keywords: List[str]) -> "NicheProfile":
        """Keyword-only profile used when the profile provider is unavailable."""
        return cls(keywords=keywords, match_phrases=keywords, degraded=True)


class RedditPost(BaseModel):
    """A post from one of the niche's subreddits."""

    kind: Literal["reddit"] = "reddit"
    title: str
    subreddit: str = ""
    score: float = 0.0
    num_comments: float = 0.0
    engagement: float = 0.0
    upvote_ratio: float = 0.0
    flair: str = ""
    url: str = ""
    author: str = ""
    preview: str = ""
    tags: List[str] = Field(default_factory=list, description="Coarse categories assigned by the tagger")

    model_config = {
        "frozen": True,
    }

    @field_validator("score", "num_comments", "engagement", "upvote_ratio", mode="before")
    @classmethod
    def _counter(cls, value: Any) -> float:
        return _non_negative(value)

    @field_validator("title", "subreddit", "flair", "url", "author", "preview", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> List[str]:
        return _clean_terms(value)

    @property
    def topic(self) -> str:
        return self.title

    @property
    def categories(self) -> List[str]:
        return self.tags + _clean_terms([self.subreddit])

    @property
    def related_terms(self) -> List[str]:
        return _clean_terms([self.subreddit, self.flair])

    @property
    def popularity_volume(self) -> float:
        return self.score

    @property
    def popularity_growth(self) -> float:
        return self.engagement


class SearchTrend(BaseModel):
    """A Google-Trends-style search entry."""

    kind: Literal["search"] = "search"
    query: str
    search_volume: float = 0.0
    increase_percentage: float = 0.0
    category_names: List[str] = Field(default_factory=list)
    related_queries: List[str] = Field(default_factory=list)

    model_config = {
        "frozen": True,
    }

    @field_validator("search_volume", "increase_percentage", mode="before")
    @classmethod
    def _counter(cls, value: Any) -> float:
        return _non_negative(value)

    @field_validator("query", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("category_names", "related_queries", mode="before")
    @classmethod
    def _names(cls, value: Any) -> List[str]:
        # backend ships categories as [{"id": 18, "name": "Technology"}, ...]
        if isinstance(value, list):
            value = [v.get("name") if isinstance(v, dict) else v for v in value]
        return _clean_terms(value)

    @property
    def topic(self) -> str:
        return self.query

    @property
    def categories(self) -> List[str]:
        return self.category_names

    @property
    def related_terms(self) -> List[str]:
        return self.related_queries

    @property
    def popularity_volume(self) -> float:
        return self.search_volume

    @property
    def popularity_growth(self) -> float:
        return self.increase_percentage


TrendItem = Annotated[Union[RedditPost, SearchTrend], Field(discriminator="kind")]

_TREND_ITEM_ADAPTER: TypeAdapter[TrendItem] = TypeAdapter(TrendItem)


def parse_trend_item(raw: dict, kind: str | None = None) -> RedditPost | SearchTrend:
    """Adapt a raw backend dict into the matching :data:`TrendItem` variant.

    ``kind`` overrides whatever tag the dict carries; without either, an entry
    that has a ``query`` is treated as a search trend and anything else as a
    Reddit post.
    """
    data = {k: v for k, v in raw.items() if v is not None}
    if kind is None:
        kind = data.get("kind") or ("search" if "query" in data else "reddit")
    data["kind"] = kind
    if kind == "search":
        data.setdefault("query", "")
        if "categories" in data and "category_names" not in data:
            data["category_names"] = data.pop("categories")
    else:
        data.setdefault("title", "")
    return _TREND_ITEM_ADAPTER.validate_python(data)


class Snippet(BaseModel):
    """Supplementary social-conversation record (a tweet) attached to a trend."""

    text: str = ""
    author: str = ""
    likes: int = 0
    retweets: int = 0
    replies: int = 0
    created_at: str | None = None
    url: str | None = None

    model_config = {
        "frozen": True,
        "extra": "ignore",
    }

    @field_validator("likes", "retweets", "replies", mode="before")
    @classmethod
    def _counter(cls, value: Any) -> int:
        return int(_non_negative(value))

    @field_validator("text", "author", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)


class ScoredItem(BaseModel):
    """A trend item with its relevance score; ``-1`` marks a hard exclusion."""

    item: TrendItem
    relevance_score: float
    position: int = Field(..., ge=0, description="Index of the item in the raw corpus")

    model_config = {
        "frozen": True,
    }

    @property
    def topic(self) -> str:
        return self.item.topic


class EnrichedItem(ScoredItem):
    """A ranked item after the snippet enrichment stage."""

    snippets: List[Snippet] = Field(default_factory=list)
    enrichment_failed: bool = False


class Narrative(BaseModel):
    """One content angle distilled from a post's comment thread."""

    headline: str
    insight: str = ""
    angle: str = ""

    model_config = {
        "frozen": True,
    }


class NicheSummary(BaseModel):
    """The effective niche the result set was ranked against."""

    keywords: List[str]
    description: str
    categories: List[str] = Field(default_factory=list)
    subreddits: List[str] = Field(default_factory=list)
    degraded: bool = False

    @classmethod
    def from_profile(cls, profile: NicheProfile) -> "NicheSummary":
        return cls(
            keywords=list(profile.keywords),
            description=profile.description,
            categories=list(profile.categories),
            subreddits=list(profile.subreddits),
            degraded=profile.degraded,
        )


class PipelineResult(BaseModel):
    """Structured response of one pipeline run."""

    success: bool = True
    niche: NicheSummary
    trends: List[EnrichedItem] = Field(default_factory=list)
    total_analyzed: int = Field(0, ge=0, description="Corpus items scored")
    total_matched: int = Field(0, ge=0, description="Items left after dropping and de-duplication")
    source: str = "reddit"
    escalated: bool = False
