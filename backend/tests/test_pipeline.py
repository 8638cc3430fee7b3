"""Pipeline tests — end-to-end discovery → retrieval → extraction, placeholders,
OAuth credential mode, and the ``redditSearch`` tool surface.

External APIs are replaced with ``httpx.MockTransport``; pacing delays are
patched out.
"""

import os
import sys

# Ensure the backend package is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from threadpulse.schemas.post_schema import CandidateLink, CanonicalPost
from threadpulse.services.pipeline import (
    fetch_posts_from_links,
    fetch_reddit_posts,
    is_placeholder,
    no_posts_placeholder,
)
from threadpulse.services.tool import REDDIT_SEARCH_TOOL, run_reddit_search_tool

THREAD_URL = "https://www.reddit.com/r/x/comments/abc/title/"

ENV = {"GOOGLE_API_KEY": "test-key", "GOOGLE_CSE_ID": "test-cx"}


# ---------------------------------------------------------------------------
# Fixtures & helpers
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def no_sleep():
    with patch("threadpulse.services.retrieval._sleep", new=AsyncMock()) as sleep:
        yield sleep


@pytest.fixture(autouse=True)
def env():
    with patch.dict(os.environ, ENV):
        for key in ("REDDIT_AUTH_MODE", "REDDIT_CLIENT_ID", "REDDIT_CLIENT_SECRET", "REDDIT_MAX_RETRIES"):
            os.environ.pop(key, None)
        yield


def _reference_payload():
    return [
        {
            "kind": "Listing",
            "data": {
                "children": [
                    {"kind": "t3", "data": {"title": "Great product", "selftext": "Works well"}}
                ]
            },
        },
        {
            "kind": "Listing",
            "data": {
                "children": [
                    {"kind": "t1", "data": {"body": "Love it", "score": 10}},
                    {"kind": "t1", "data": {"body": "[deleted]", "score": 5}},
                    {"kind": "t1", "data": {"body": "Decent", "score": -3}},
                ]
            },
        },
    ]


def _search_body(*links):
    return {"items": [{"title": f"hit {i}", "link": link} for i, link in enumerate(links)]}


def _run(handler, coro_factory):
    seen = []

    def recording(request):
        seen.append(request)
        return handler(request)

    async def main():
        async with httpx.AsyncClient(transport=httpx.MockTransport(recording)) as client:
            return await coro_factory(client)

    return asyncio.run(main()), seen


# ---------------------------------------------------------------------------
# fetch_reddit_posts
# ---------------------------------------------------------------------------

class TestFetchRedditPosts:
    def test_end_to_end_reference_thread(self):
        def handler(request):
            if request.url.host == "www.googleapis.com":
                return httpx.Response(200, json=_search_body(THREAD_URL))
            return httpx.Response(200, json=_reference_payload())

        posts, requests = _run(handler, lambda c: fetch_reddit_posts("acme", client=c))

        assert posts == [
            CanonicalPost(title="Great product", post="Works well", comments=["Love it", "Decent"])
        ]
        reddit_requests = [r for r in requests if r.url.host.endswith("reddit.com")]
        assert len(reddit_requests) == 1
        assert str(reddit_requests[0].url) == THREAD_URL + ".json"

    def test_every_candidate_failing_yields_single_placeholder(self):
        def handler(request):
            if request.url.host == "www.googleapis.com":
                return httpx.Response(
                    200,
                    json=_search_body(THREAD_URL, "https://www.reddit.com/r/y/comments/def/"),
                )
            return httpx.Response(429)

        posts, requests = _run(handler, lambda c: fetch_reddit_posts("acme", client=c))

        assert len(posts) == 1
        assert posts[0].title == "No posts found"
        assert posts[0].comments == ["No posts found"]
        # two candidates x (1 + 1 retry) walks x 5 variations
        assert len([r for r in requests if r.url.host.endswith("reddit.com")]) == 20

    def test_failed_candidate_is_skipped(self):
        bad = "https://www.reddit.com/r/y/comments/def/"

        def handler(request):
            if request.url.host == "www.googleapis.com":
                return httpx.Response(200, json=_search_body(bad, THREAD_URL))
            if "/def" in request.url.path:
                return httpx.Response(503)
            return httpx.Response(200, json=_reference_payload())

        posts, _ = _run(handler, lambda c: fetch_reddit_posts("acme", client=c))
        assert [p.title for p in posts] == ["Great product"]

    def test_no_search_results_yields_placeholder(self):
        posts, _ = _run(
            lambda r: httpx.Response(200, json={}),
            lambda c: fetch_reddit_posts("acme", client=c),
        )
        assert posts == [no_posts_placeholder()]

    def test_missing_credentials_yields_configuration_placeholder(self):
        os.environ.pop("GOOGLE_CSE_ID")
        posts, requests = _run(
            lambda r: httpx.Response(500), lambda c: fetch_reddit_posts("acme", client=c)
        )
        assert requests == []
        assert len(posts) == 1
        assert posts[0].title == "Configuration Error"
        assert "GOOGLE_CSE_ID" in posts[0].post
        assert is_placeholder(posts[0])

    def test_unexpected_error_yields_error_placeholder(self):
        with patch(
            "threadpulse.services.pipeline.search_reddit_links",
            new=AsyncMock(side_effect=RuntimeError("boom")),
        ):
            posts, _ = _run(lambda r: httpx.Response(200), lambda c: fetch_reddit_posts("acme", client=c))
        assert len(posts) == 1
        assert posts[0].title == "Error"
        assert posts[0].comments == ["Error: boom"]
        assert '"acme"' in posts[0].post

    def test_threads_fetched_sequentially_with_pacing(self, no_sleep):
        links = [THREAD_URL, "https://www.reddit.com/r/y/comments/def/"]

        def handler(request):
            if request.url.host == "www.googleapis.com":
                return httpx.Response(200, json=_search_body(*links))
            return httpx.Response(200, json=_reference_payload())

        posts, _ = _run(handler, lambda c: fetch_reddit_posts("acme", client=c))
        assert len(posts) == 2
        between_threads = [a.args[0] for a in no_sleep.await_args_list if a.args[0] >= 2.0]
        assert len(between_threads) == 1
        assert 2.0 <= between_threads[0] <= 4.0


class TestFetchPostsFromLinks:
    def test_non_reddit_links_dropped_before_fetch(self):
        links = [CandidateLink(title="x", url="https://example.com/review")]
        posts, requests = _run(
            lambda r: httpx.Response(200, json=_reference_payload()),
            lambda c: fetch_posts_from_links(links, client=c),
        )
        assert requests == []
        assert posts == [no_posts_placeholder()]

    def test_oversized_numbers_do_not_discard_the_batch(self):
        huge = _reference_payload()
        huge[1]["data"]["children"][0]["data"]["score"] = 10**400
        huge[0]["data"]["children"][0]["data"]["created_utc"] = 10**400
        other_url = "https://www.reddit.com/r/x/comments/def/other/"

        def handler(request):
            if "abc" in request.url.path:
                return httpx.Response(200, content=json.dumps(huge).encode())
            return httpx.Response(200, json=_reference_payload())

        links = [CandidateLink(url=THREAD_URL), CandidateLink(url=other_url)]
        posts, _ = _run(handler, lambda c: fetch_posts_from_links(links, client=c))

        assert len(posts) == 2
        assert posts[0].created_at is None
        assert posts[0].comments == ["Love it", "Decent"]
        assert not any(is_placeholder(p) for p in posts)


class TestPlaceholderMarker:
    def test_real_thread_with_placeholder_title_is_not_a_placeholder(self):
        payload = _reference_payload()
        payload[0]["data"]["children"][0]["data"]["title"] = "Error"
        posts, _ = _run(
            lambda r: httpx.Response(200, json=payload),
            lambda c: fetch_posts_from_links([CandidateLink(url=THREAD_URL)], client=c),
        )
        assert posts[0].title == "Error"
        assert posts[0].created_at is None
        assert not is_placeholder(posts[0])

    def test_built_placeholders_are_marked(self):
        assert is_placeholder(no_posts_placeholder())
        assert not is_placeholder(CanonicalPost(title="No posts found"))

    def test_marker_not_serialised(self):
        dumped = no_posts_placeholder().model_dump(by_alias=True, exclude_none=True)
        assert dumped == {
            "title": "No posts found",
            "post": "No posts found",
            "comments": ["No posts found"],
        }


class TestOAuthMode:
    def test_token_fetched_once_and_used(self):
        oauth_env = {
            "REDDIT_AUTH_MODE": "oauth",
            "REDDIT_CLIENT_ID": "cid",
            "REDDIT_CLIENT_SECRET": "secret",
        }

        def handler(request):
            if request.url.path == "/api/v1/access_token":
                return httpx.Response(200, json={"access_token": "tok", "token_type": "bearer"})
            return httpx.Response(200, json=_reference_payload())

        links = [CandidateLink(url=THREAD_URL), CandidateLink(url=THREAD_URL)]
        with patch.dict(os.environ, oauth_env):
            posts, requests = _run(handler, lambda c: fetch_posts_from_links(links, client=c))

        assert len(posts) == 2
        token_requests = [r for r in requests if r.url.path == "/api/v1/access_token"]
        assert len(token_requests) == 1
        assert token_requests[0].headers["Authorization"].startswith("Basic ")
        thread_requests = [r for r in requests if r not in token_requests]
        assert all(r.url.host == "oauth.reddit.com" for r in thread_requests)
        assert all(r.headers["Authorization"] == "Bearer tok" for r in thread_requests)

    def test_token_failure_falls_back_to_anonymous(self):
        oauth_env = {
            "REDDIT_AUTH_MODE": "oauth",
            "REDDIT_CLIENT_ID": "cid",
            "REDDIT_CLIENT_SECRET": "secret",
        }

        def handler(request):
            if request.url.path == "/api/v1/access_token":
                return httpx.Response(401)
            return httpx.Response(200, json=_reference_payload())

        with patch.dict(os.environ, oauth_env):
            posts, requests = _run(
                handler, lambda c: fetch_posts_from_links([CandidateLink(url=THREAD_URL)], client=c)
            )

        assert posts[0].title == "Great product"
        assert requests[-1].url.host == "www.reddit.com"
        assert "Authorization" not in requests[-1].headers

    def test_oauth_ignored_without_mode_flag(self):
        with patch.dict(os.environ, {"REDDIT_CLIENT_ID": "cid", "REDDIT_CLIENT_SECRET": "secret"}):
            _, requests = _run(
                lambda r: httpx.Response(200, json=_reference_payload()),
                lambda c: fetch_posts_from_links([CandidateLink(url=THREAD_URL)], client=c),
            )
        assert [r.url.host for r in requests] == ["www.reddit.com"]


# ---------------------------------------------------------------------------
# redditSearch tool
# ---------------------------------------------------------------------------

class TestRedditSearchTool:
    def test_definition(self):
        function = REDDIT_SEARCH_TOOL["function"]
        assert function["name"] == "redditSearch"
        assert function["parameters"]["required"] == ["query"]
        assert function["parameters"]["properties"]["query"]["type"] == "string"

    def test_runs_pipeline_with_json_arguments(self):
        post = CanonicalPost(title="Great product", post="Works well", comments=["Love it"])
        with patch(
            "threadpulse.services.tool.fetch_reddit_posts", new=AsyncMock(return_value=[post])
        ) as fetch:
            result = asyncio.run(run_reddit_search_tool(json.dumps({"query": " acme "})))

        fetch.assert_awaited_once_with("acme")
        assert result == {
            "query": "acme",
            "posts": [{"title": "Great product", "post": "Works well", "comments": ["Love it"]}],
        }

    def test_created_at_serialised_with_alias(self):
        post = CanonicalPost(title="t", createdAt=123.0)
        with patch(
            "threadpulse.services.tool.fetch_reddit_posts", new=AsyncMock(return_value=[post])
        ):
            result = asyncio.run(run_reddit_search_tool({"query": "acme"}))
        assert result["posts"][0]["createdAt"] == 123.0

    @pytest.mark.parametrize("arguments", [None, "", "not json", "[1, 2]", {"query": ""}, {"q": "x"}])
    def test_invalid_arguments_return_error(self, arguments):
        with patch("threadpulse.services.tool.fetch_reddit_posts", new=AsyncMock()) as fetch:
            result = asyncio.run(run_reddit_search_tool(arguments))
        assert "error" in result
        fetch.assert_not_awaited()
