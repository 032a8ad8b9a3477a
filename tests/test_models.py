import pytest
from pydantic import ValidationError

from niche_radar.config import GatePolicy, RadarSettings
from niche_radar.models import NicheProfile, RedditPost, SearchTrend, parse_trend_item


def test_profile_defaults_match_phrases_to_keywords() -> None:
    profile = NicheProfile(keywords=[" AI tools ", "", "productivity"])
    assert profile.keywords == ["AI tools", "productivity"]
    assert profile.match_phrases == ["AI tools", "productivity"]
    assert profile.description == "AI tools, productivity"


def test_profile_requires_keywords() -> None:
    with pytest.raises(ValidationError):
        NicheProfile(keywords=["  "])


def test_degraded_profile() -> None:
    profile = NicheProfile.degraded_from(["solopreneurs"])
    assert profile.degraded
    assert profile.categories == []
    assert profile.exclude_terms == []
    assert profile.match_phrases == ["solopreneurs"]


def test_profile_is_frozen() -> None:
    profile = NicheProfile(keywords=["x"])
    with pytest.raises(ValidationError):
        profile.keywords = ["y"]  # type: ignore[misc]


def test_parse_trend_item_tolerates_missing_fields() -> None:
    post = parse_trend_item({"title": "Hello", "score": None, "num_comments": "n/a"}, "reddit")
    assert isinstance(post, RedditPost)
    assert post.popularity_volume == 0
    assert post.num_comments == 0

    trend = parse_trend_item({"query": "notion ai", "categories": [{"id": 1, "name": "Technology"}]})
    assert isinstance(trend, SearchTrend)
    assert trend.categories == ["Technology"]
    assert trend.related_terms == []


def test_parse_trend_item_coerces_non_string_text() -> None:
    post = parse_trend_item({"title": 2025, "subreddit": "entrepreneur", "score": 10, "tags": 7}, "reddit")
    assert post.topic == "2025"
    assert post.tags == ["7"]

    trend = parse_trend_item({"query": 404, "related_queries": "404 error"}, "search")
    assert trend.topic == "404"
    assert trend.related_terms == ["404 error"]


def test_settings_validate_slices() -> None:
    with pytest.raises(ValidationError):
        RadarSettings(k_enrich=5, k_final=10)


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NICHE_RADAR_API_URL", "http://backend.test/")
    monkeypatch.setenv("NICHE_RADAR_K_FINAL", "7")
    monkeypatch.setenv("NICHE_RADAR_GATE_POLICY", "STRICT")

    settings = RadarSettings.from_env()
    assert settings.api_url == "http://backend.test"
    assert settings.k_final == 7
    assert settings.gate_policy is GatePolicy.STRICT
    assert settings.enrichment_concurrency == settings.k_enrich


def test_settings_source_tables_are_read_only() -> None:
    settings = RadarSettings(corpus_limit={"google": 50, "reddit": 10})
    assert settings.limit_for("google") == 50
    assert settings.limit_for("twitter") == 25

    with pytest.raises(TypeError):
        settings.corpus_limit["google"] = 1  # type: ignore[index]
    with pytest.raises(TypeError):
        RadarSettings().corpus_timeout["reddit"] = 0.1  # type: ignore[index]
    assert RadarSettings().timeout_for("reddit") == 20.0
