import httpx
import pytest

from fetchers.trend_backend import TrendBackendClient
from niche_radar.config import RadarSettings
from niche_radar.exceptions import BackendError, SnippetFetchError
from niche_radar.models import NicheProfile, RedditPost, SearchTrend

REDDIT_PAYLOAD = {
    "success": True,
    "count": 2,
    "posts": [
        {
            "id": "abc",
            "title": "I automated my freelance invoicing with ChatGPT",
            "subreddit": "Entrepreneur",
            "score": 1543,
            "num_comments": 212,
            "engagement": 87.5,
            "url": "https://reddit.com/r/Entrepreneur/abc",
            "flair": None,
        },
        {"title": "Weekly feedback thread", "subreddit": "SideProject", "score": -3},
    ],
}

GOOGLE_PAYLOAD = {
    "trends": [
        {
            "query": "notion ai",
            "search_volume": 200000,
            "increase_percentage": 450,
            "categories": [{"id": 18, "name": "Technology"}],
        },
        {"query": "weekend weather"},
    ],
    "count": 2,
}


def _client(handler, requests: list | None = None) -> TrendBackendClient:
    def _recording(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return handler(request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(_recording), base_url="http://backend.test")
    return TrendBackendClient(RadarSettings(api_url="http://backend.test"), client=http)


@pytest.mark.asyncio
async def test_reddit_posts_are_parsed_and_tagged() -> None:
    requests: list[httpx.Request] = []
    backend = _client(lambda request: httpx.Response(200, json=REDDIT_PAYLOAD), requests)

    items = await backend.fetch_trends("reddit", limit=25, fresh=True, subreddits=["Entrepreneur", "SideProject"])

    assert requests[0].url.path == "/trends/reddit"
    assert requests[0].url.params["subreddits"] == "Entrepreneur,SideProject"
    assert requests[0].url.params["fresh"] == "true"
    assert all(isinstance(item, RedditPost) for item in items)
    first, second = items
    assert first.popularity_volume == 1543
    assert first.popularity_growth == 87.5
    assert "Business" in first.categories
    assert "Technology" in first.categories
    assert second.popularity_volume == 0


@pytest.mark.asyncio
async def test_google_trends_are_parsed() -> None:
    requests: list[httpx.Request] = []
    backend = _client(lambda request: httpx.Response(200, json=GOOGLE_PAYLOAD), requests)

    items = await backend.fetch_trends("google", limit=381)

    assert requests[0].url.path == "/trends/google"
    assert "fresh" not in requests[0].url.params
    assert all(isinstance(item, SearchTrend) for item in items)
    assert items[0].categories == ["Technology"]
    assert items[1].categories == []
    assert items[1].popularity_volume == 0


@pytest.mark.asyncio
async def test_corpus_fetcher_binds_profile_subreddits() -> None:
    requests: list[httpx.Request] = []
    backend = _client(lambda request: httpx.Response(200, json=REDDIT_PAYLOAD), requests)
    profile = NicheProfile(keywords=["ai tools"], subreddits=["ChatGPT", "nocode"])

    fetch = backend.corpus_fetcher("reddit", profile)
    await fetch(False)

    assert requests[0].url.params["subreddits"] == "ChatGPT,nocode"
    assert requests[0].url.params["limit"] == "25"
    assert requests[0].url.params["fresh"] == "false"


@pytest.mark.asyncio
async def test_corpus_http_errors_propagate() -> None:
    backend = _client(lambda request: httpx.Response(502, json={"error": "bad gateway"}))
    with pytest.raises(httpx.HTTPStatusError):
        await backend.fetch_trends("google", limit=10)


@pytest.mark.asyncio
async def test_backend_refusal_raises() -> None:
    backend = _client(lambda request: httpx.Response(200, json={"success": False, "error": "rate limited"}))
    with pytest.raises(BackendError, match="rate limited"):
        await backend.fetch_trends("reddit", limit=10, subreddits=["x"])


@pytest.mark.asyncio
async def test_snippets_are_parsed_and_limited() -> None:
    tweets = [{"text": f"tweet {i}", "author": "someone", "likes": i, "engagement_score": 3} for i in range(8)]
    requests: list[httpx.Request] = []
    backend = _client(lambda request: httpx.Response(200, json={"success": True, "tweets": tweets}), requests)

    snippets = await backend.fetch_snippets("notion ai", limit=5)

    assert requests[0].url.path == "/trends/twitter/search"
    assert requests[0].url.params["query"] == "notion ai"
    assert [s.text for s in snippets] == [f"tweet {i}" for i in range(5)]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, json={"success": False}),
        httpx.Response(200, json={"success": False, "error": "quota"}),
        httpx.Response(200, text="<html>oops</html>"),
    ],
)
async def test_snippet_failures_raise_snippet_error(response: httpx.Response) -> None:
    backend = _client(lambda request: response)
    with pytest.raises(SnippetFetchError):
        await backend.fetch_snippets("notion ai")


@pytest.mark.asyncio
async def test_snippet_transport_error_is_wrapped() -> None:
    def _boom(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    backend = _client(_boom)
    with pytest.raises(SnippetFetchError):
        await backend.fetch_snippets("notion ai")


@pytest.mark.asyncio
async def test_fetch_comments() -> None:
    payload = {"success": True, "count": 2, "comments": [{"score": 40, "body": "great"}, {"score": 2, "body": "meh"}]}
    requests: list[httpx.Request] = []
    backend = _client(lambda request: httpx.Response(200, json=payload), requests)

    comments = await backend.fetch_comments("https://reddit.com/r/x/abc", amount=20)

    assert requests[0].url.params["amount"] == "20"
    assert [c["body"] for c in comments] == ["great", "meh"]
