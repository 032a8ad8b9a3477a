import math

import pytest

from niche_radar.config import GatePolicy, RadarSettings
from niche_radar.models import NicheProfile, RedditPost, SearchTrend
from niche_radar.scorer import EXCLUDED, RelevanceScorer


@pytest.fixture
def profile() -> NicheProfile:
    return NicheProfile(
        keywords=["ai tools", "productivity", "solopreneurs"],
        categories=["Technology", "Business"],
    )


@pytest.fixture
def scorer() -> RelevanceScorer:
    return RelevanceScorer(RadarSettings())


def _strict() -> RelevanceScorer:
    return RelevanceScorer(RadarSettings(gate_policy=GatePolicy.STRICT))


def test_openai_item_scores_with_all_signals(scorer: RelevanceScorer, profile: NicheProfile) -> None:
    """Keyword + phrase + category bonus + popularity tie-break."""
    item = SearchTrend(
        query="OpenAI launches new agent tools for solopreneurs",
        category_names=["Technology"],
        search_volume=50000,
        increase_percentage=300,
    )
    expected = 50 + 30 + 15 + math.log10(50001) * 1.4 + 3
    assert scorer.score(item, profile) == pytest.approx(expected)


def test_item_without_category_overlap_is_gated_out(scorer: RelevanceScorer, profile: NicheProfile) -> None:
    item = SearchTrend(query="Local weather forecast for approval", search_volume=900000)
    assert scorer.score(item, profile) == 0


def test_exclusion_wins_over_matches(scorer: RelevanceScorer) -> None:
    profile = NicheProfile(keywords=["ai tools", "solopreneurs"], exclude_terms=["Crypto"])
    item = SearchTrend(
        query="Crypto AI tools for solopreneurs",
        category_names=["Technology"],
        search_volume=10**6,
    )
    assert scorer.score(item, profile) == EXCLUDED


def test_empty_categories_never_more_restrictive(scorer: RelevanceScorer) -> None:
    item = RedditPost(title="Best productivity system for 2025", subreddit="GetMotivated", tags=["Lifestyle"])
    gated = NicheProfile(keywords=["productivity"], categories=["Technology"])
    ungated = NicheProfile(keywords=["productivity"])

    assert scorer.score(item, gated) == 0
    assert scorer.score(item, ungated) > 0


def test_lenient_floor_for_on_topic_item_without_terms(profile: NicheProfile) -> None:
    item = SearchTrend(query="Quarterly chip earnings", category_names=["Technology"], search_volume=10**9)

    assert RelevanceScorer(RadarSettings()).score(item, profile) == 5.0
    assert _strict().score(item, profile) == 0


def test_popularity_never_promotes_zero_relevance() -> None:
    """Under the strict policy popularity alone cannot lift an item above 0."""
    profile = NicheProfile(keywords=["solopreneurs"])
    quiet = SearchTrend(query="Weather this weekend", search_volume=0)
    loud = SearchTrend(query="Weather this weekend", search_volume=10**9, increase_percentage=5000)

    scorer = _strict()
    assert scorer.score(quiet, profile) == 0
    assert scorer.score(loud, profile) == 0


def test_floor_items_rank_below_any_genuine_match(scorer: RelevanceScorer) -> None:
    profile = NicheProfile(keywords=["solopreneurs"], match_phrases=["sideproject"])
    floor_item = SearchTrend(query="Celebrity news", search_volume=10**9, increase_percentage=10**6)
    weak_match = RedditPost(title="Weekly thread", subreddit="SideProject")

    assert scorer.score(floor_item, profile) == 5.0
    assert scorer.score(weak_match, profile) > scorer.score(floor_item, profile)


def test_popularity_contribution_is_capped(scorer: RelevanceScorer) -> None:
    profile = NicheProfile(keywords=["solopreneurs"])
    small = SearchTrend(query="Tools for solopreneurs")
    huge = SearchTrend(query="Tools for solopreneurs", search_volume=10**15, increase_percentage=10**9)

    assert scorer.score(huge, profile) - scorer.score(small, profile) == pytest.approx(12 + 5)


def test_short_token_does_not_match_inside_longer_word() -> None:
    profile = NicheProfile(keywords=["app"])
    item = SearchTrend(query="Approval process changes")
    assert _strict().score(item, profile) == 0


def test_short_phrases_are_ignored() -> None:
    """Match phrases of 3 characters or fewer are noise and add nothing."""
    profile = NicheProfile(keywords=["solopreneurs"], match_phrases=["ai", "solopreneurs"])
    item = SearchTrend(query="AI for everyone")
    assert _strict().score(item, profile) == 0


def test_related_terms_add_low_weight(scorer: RelevanceScorer) -> None:
    profile = NicheProfile(keywords=["founders"], match_phrases=["sideproject"])
    item = RedditPost(title="Show me what you built this week", subreddit="SideProject")
    assert scorer.score(item, profile) == pytest.approx(8.0)


def test_score_is_idempotent(scorer: RelevanceScorer, profile: NicheProfile) -> None:
    item = RedditPost(title="AI tools every solopreneur needs", subreddit="ChatGPT", score=1200, tags=["Technology"])
    assert scorer.score(item, profile) == scorer.score(item, profile)


def test_score_corpus_keeps_positions(scorer: RelevanceScorer, profile: NicheProfile) -> None:
    items = [
        SearchTrend(query="weather", search_volume=10),
        SearchTrend(query="Solopreneurs love AI tools", category_names=["Business"]),
    ]
    scored = scorer.score_corpus(items, profile)

    assert [s.position for s in scored] == [0, 1]
    assert scored[0].relevance_score == 0
    assert scored[1].relevance_score > 0
