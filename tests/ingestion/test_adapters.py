"""
Tests for source adapters.

All HTTP goes through FakeSession; no real network calls.
"""

from datetime import datetime, timezone

import pytest
import requests

from trendscan.core.run_context import ScanContext
from trendscan.ingestion.capture.adapters import (
    ADAPTER_REGISTRY,
    BlueskyAdapter,
    HackerNewsAdapter,
    RedditAdapter,
    RssFeedsAdapter,
    SourceFetchError,
    XSearchHintsAdapter,
    build_adapters,
)
from trendscan.ingestion.capture.adapters.bluesky import SEARCH_URL
from trendscan.ingestion.capture.adapters.hacker_news import API_BASE, is_ai_title
from trendscan.ingestion.capture.adapters.rss_feeds import FeedSource, parse_feed
from tests.helpers.fakes import FakeResponse, FakeSession, StaticAdapter


RSS_DOC = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example</title>
    {items}
  </channel>
</rss>"""

ATOM_DOC = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example</title>
  <id>urn:example</id>
  <updated>2026-03-01T08:00:00Z</updated>
  <entry>
    <title>Gemini gets faster</title>
    <id>urn:example:1</id>
    <link href="https://blog.google/technology/ai/gemini-faster/"/>
    <updated>2026-03-01T08:00:00Z</updated>
  </entry>
</feed>"""


def rss_item(title, link="https://example.com/post", pub_date="Mon, 02 Mar 2026 10:00:00 GMT"):
    return f"<item><title>{title}</title><link>{link}</link><pubDate>{pub_date}</pubDate></item>"


def rss_response(*titles):
    body = RSS_DOC.format(items="".join(rss_item(t, link=f"https://example.com/{i}") for i, t in enumerate(titles)))
    return FakeResponse(content=body.encode("utf-8"))


class TestAdapterRegistry:
    """Tests for adapter registry and construction."""

    def test_registry_order(self):
        """Registry lists adapters in merge order."""
        assert list(ADAPTER_REGISTRY) == ["hacker_news", "reddit", "bluesky", "x_hints", "rss"]

    def test_build_adapters_excludes_x_hints_by_default(self):
        """The placeholder adapter is opt-in."""
        names = [a.name for a in build_adapters()]
        assert names == ["hacker_news", "reddit", "bluesky", "rss"]

    def test_build_adapters_with_x_hints(self):
        names = [a.name for a in build_adapters(enable_x_hints=True)]
        assert "x_hints" in names

    def test_build_adapters_passes_subreddits_and_timeout(self):
        adapters = build_adapters(subreddits=["LocalLLaMA"], request_timeout=3.0)
        reddit = next(a for a in adapters if a.name == "reddit")
        assert reddit.subreddits == ("LocalLLaMA",)
        assert all(a.request_timeout == 3.0 for a in adapters)


class TestBaseAdapterFailureIsolation:
    """fetch() never raises for source failures."""

    @pytest.mark.parametrize(
        "error",
        [
            SourceFetchError("boom"),
            requests.ConnectionError("refused"),
            requests.Timeout("slow"),
            ValueError("bad payload"),
        ],
    )
    def test_errors_become_empty_result(self, error):
        adapter = StaticAdapter("flaky", error=error)
        assert adapter.fetch() == []

    def test_expired_context_stops_requests(self):
        """No request is issued once the scan deadline has passed."""
        session = FakeSession()
        ctx = ScanContext()
        ctx.cancel_event.set()

        assert HackerNewsAdapter(session=session).fetch(ctx) == []
        assert session.calls == []

    def test_request_carries_timeout_and_user_agent(self):
        session = FakeSession({f"{API_BASE}/topstories.json": [], f"{API_BASE}/newstories.json": []})
        HackerNewsAdapter(session=session, request_timeout=4.0).fetch()

        assert session.calls
        for call in session.calls:
            assert call["timeout"] == 4.0
            assert call["headers"]["User-Agent"] == "AI-Trend-Digest/1.0"


class TestHackerNewsAdapter:
    """Tests for the Hacker News adapter."""

    def _session(self):
        return FakeSession({
            f"{API_BASE}/topstories.json": [1, 2, 3],
            f"{API_BASE}/newstories.json": [3, 4],
            f"{API_BASE}/item/1.json": {
                "id": 1, "title": "OpenAI ships a new GPT model", "score": 120,
                "descendants": 40, "time": 1772445600, "by": "pg", "url": "https://example.com/gpt",
            },
            f"{API_BASE}/item/2.json": {
                "id": 2, "title": "Show HN: A faster SQL formatter", "score": 300, "time": 1772445600,
            },
            f"{API_BASE}/item/3.json": {
                "id": 3, "title": "Claude writes a compiler", "score": 80, "time": 1772445600,
            },
            # item 4 answers 404 and is skipped
        })

    def test_keeps_only_ai_stories(self):
        items = HackerNewsAdapter(session=self._session()).fetch()

        assert [i.title for i in items] == ["OpenAI ships a new GPT model", "Claude writes a compiler"]

    def test_maps_fields(self):
        first = HackerNewsAdapter(session=self._session()).fetch()[0]

        assert first.source == "HackerNews"
        assert first.engagement == 120
        assert first.comments == 40
        assert first.author == "pg"
        assert first.url == "https://example.com/gpt"
        assert first.timestamp == datetime.fromtimestamp(1772445600, tz=timezone.utc)

    def test_missing_descendants_means_zero_comments(self):
        items = HackerNewsAdapter(session=self._session()).fetch()
        assert items[1].comments == 0

    def test_story_ids_are_deduplicated(self):
        session = self._session()
        HackerNewsAdapter(session=session).fetch()

        item_urls = [c["url"] for c in session.calls if "/item/" in c["url"]]
        assert sorted(item_urls) == sorted(f"{API_BASE}/item/{i}.json" for i in (1, 2, 3, 4))

    def test_listing_failure_yields_empty(self):
        session = FakeSession({f"{API_BASE}/topstories.json": requests.ConnectionError("down")})
        assert HackerNewsAdapter(session=session).fetch() == []

    def test_is_ai_title(self):
        assert is_ai_title("Anthropic raises again")
        assert not is_ai_title("Show HN: A faster SQL formatter")


class TestRedditAdapter:
    """Tests for the Reddit adapter."""

    @staticmethod
    def _listing(*posts):
        return {"data": {"children": [{"data": p} for p in posts]}}

    @staticmethod
    def _post(key, score, title=None):
        return {
            "title": title or f"Post {key}",
            "score": score,
            "num_comments": 12,
            "permalink": f"/r/LocalLLaMA/comments/{key}",
            "created_utc": 1772445600,
            "author": "someone",
        }

    def test_merges_filters_and_maps(self):
        session = FakeSession({
            "https://www.reddit.com/r/LocalLLaMA/hot.json": self._listing(
                self._post("a", 100), self._post("b", 10)
            ),
            "https://www.reddit.com/r/LocalLLaMA/top.json": self._listing(
                self._post("a", 100), self._post("c", 31)
            ),
        })
        items = RedditAdapter(subreddits=["LocalLLaMA"], session=session).fetch()

        assert [i.title for i in items] == ["Post a", "Post c"]
        assert items[0].source == "r/LocalLLaMA"
        assert items[0].url == "https://reddit.com/r/LocalLLaMA/comments/a"
        assert items[0].comments == 12

    def test_score_floor_is_strict(self):
        session = FakeSession({
            "https://www.reddit.com/r/LocalLLaMA/hot.json": self._listing(self._post("x", 30)),
            "https://www.reddit.com/r/LocalLLaMA/top.json": self._listing(),
        })
        assert RedditAdapter(subreddits=["LocalLLaMA"], session=session).fetch() == []

    def test_caps_posts_per_subreddit(self):
        posts = [self._post(str(n), 50 + n) for n in range(20)]
        session = FakeSession({
            "https://www.reddit.com/r/LocalLLaMA/hot.json": self._listing(*posts),
            "https://www.reddit.com/r/LocalLLaMA/top.json": self._listing(),
        })
        assert len(RedditAdapter(subreddits=["LocalLLaMA"], session=session).fetch()) == 15

    def test_failing_subreddit_does_not_affect_siblings(self):
        session = FakeSession({
            "https://www.reddit.com/r/LocalLLaMA/hot.json": self._listing(self._post("a", 100)),
            "https://www.reddit.com/r/LocalLLaMA/top.json": self._listing(),
            "https://www.reddit.com/r/broken/hot.json": requests.ConnectionError("reset"),
            "https://www.reddit.com/r/broken/top.json": self._listing(),
        })
        items = RedditAdapter(subreddits=["LocalLLaMA", "broken"], session=session).fetch()

        assert [i.source for i in items] == ["r/LocalLLaMA"]

    def test_missing_variant_only_empties_that_variant(self):
        """A 404 on top.json keeps the hot listing."""
        session = FakeSession({
            "https://www.reddit.com/r/LocalLLaMA/hot.json": self._listing(self._post("a", 100)),
        })
        items = RedditAdapter(subreddits=["LocalLLaMA"], session=session).fetch()
        assert len(items) == 1

    def test_request_params(self):
        session = FakeSession()
        RedditAdapter(subreddits=["LocalLLaMA"], session=session).fetch()

        params = {c["url"]: c["params"] for c in session.calls}
        assert params["https://www.reddit.com/r/LocalLLaMA/hot.json"] == {"limit": 20}
        assert params["https://www.reddit.com/r/LocalLLaMA/top.json"] == {"t": "day", "limit": 10}

    def test_empty_subreddit_list_uses_defaults(self):
        adapter = RedditAdapter(subreddits=[])
        assert "LocalLLaMA" in adapter.subreddits


class TestBlueskyAdapter:
    """Tests for the Bluesky search adapter."""

    @staticmethod
    def _post(rkey, likes=0, reposts=0, replies=0, handle="alice.bsky.social"):
        return {
            "uri": f"at://did:plc:abc/app.bsky.feed.post/{rkey}",
            "cid": "cid",
            "author": {"handle": handle},
            "record": {"text": f"Post {rkey} about LLMs", "createdAt": "2026-03-02T11:00:00.000Z"},
            "likeCount": likes,
            "repostCount": reposts,
            "replyCount": replies,
        }

    def test_search_filter_and_dedupe(self):
        session = FakeSession({
            (SEARCH_URL, "artificial intelligence"): {
                "posts": [self._post("p1", likes=10, reposts=1, replies=2), self._post("p2", likes=1)]
            },
            (SEARCH_URL, "ChatGPT"): {
                "posts": [self._post("p1", likes=10, reposts=1, replies=2), self._post("p3", reposts=3)]
            },
            (SEARCH_URL, "Claude AI"): requests.ConnectionError("rate limited"),
        })
        items = BlueskyAdapter(session=session).fetch()

        assert [i.title for i in items] == ["Post p1 about LLMs", "Post p3 about LLMs"]
        assert items[0].engagement == 10 + 2 * 1 + 2
        assert items[0].url == "https://bsky.app/profile/alice.bsky.social/post/p1"
        assert items[0].source == "Bluesky"
        assert items[0].author == "alice.bsky.social"

    def test_only_first_four_terms_searched(self):
        session = FakeSession()
        BlueskyAdapter(session=session).fetch()

        terms = [c["params"]["q"] for c in session.calls]
        assert terms == ["artificial intelligence", "ChatGPT", "Claude AI", "GPT-4"]
        assert all(c["params"]["sort"] == "top" and c["params"]["limit"] == 30 for c in session.calls)

    def test_title_truncated(self):
        post = self._post("long", likes=50)
        post["record"]["text"] = "x" * 400
        session = FakeSession({(SEARCH_URL, "artificial intelligence"): {"posts": [post]}})

        items = BlueskyAdapter(session=session).fetch()
        assert len(items[0].title) == 250

    def test_malformed_payload_is_a_fetch_failure(self):
        session = FakeSession({(SEARCH_URL, "artificial intelligence"): {"posts": [{"uri": 1}]}})
        assert BlueskyAdapter(session=session).fetch() == []


class TestFeedParsing:
    """Tests for RSS/Atom normalization."""

    def test_rss_item(self):
        doc = RSS_DOC.format(items=rss_item("Claude 5 is here", link="https://www.anthropic.com/news/c5"))
        [item] = parse_feed(doc.encode("utf-8"))

        assert item.title == "Claude 5 is here"
        assert item.link == "https://www.anthropic.com/news/c5"
        assert item.published_at == datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)

    def test_atom_entry_with_href_link_and_updated(self):
        [item] = parse_feed(ATOM_DOC.encode("utf-8"))

        assert item.title == "Gemini gets faster"
        assert item.link == "https://blog.google/technology/ai/gemini-faster/"
        assert item.published_at == datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)

    def test_atom_prefers_updated_over_published(self):
        doc = ATOM_DOC.replace(
            "<updated>2026-03-01T08:00:00Z</updated>\n  </entry>",
            "<published>2026-01-01T00:00:00Z</published>\n    <updated>2026-03-01T08:00:00Z</updated>\n  </entry>",
        )
        [item] = parse_feed(doc.encode("utf-8"))

        assert item.published_at == datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)

    def test_atom_published_only(self):
        doc = ATOM_DOC.replace(
            "<updated>2026-03-01T08:00:00Z</updated>\n  </entry>",
            "<published>2026-01-01T00:00:00Z</published>\n  </entry>",
        )
        [item] = parse_feed(doc.encode("utf-8"))

        assert item.published_at == datetime(2026, 1, 1, 0, 0, tzinfo=timezone.utc)

    def test_missing_date(self):
        doc = RSS_DOC.format(items="<item><title>No date</title><link>https://example.com</link></item>")
        [item] = parse_feed(doc.encode("utf-8"))
        assert item.published_at is None

    def test_not_a_feed(self):
        with pytest.raises(SourceFetchError):
            parse_feed(b"this is not a feed at all")


class TestRssFeedsAdapter:
    """Tests for the RSS feeds adapter."""

    def test_tier_filtering_and_engagement(self):
        feeds = [
            FeedSource("Anthropic Blog", "https://feeds.test/anthropic", 1),
            FeedSource("TechCrunch AI", "https://feeds.test/techcrunch", 2),
            FeedSource("Broken Feed", "https://feeds.test/broken", 2),
        ]
        session = FakeSession({
            "https://feeds.test/anthropic": rss_response("Company update"),
            "https://feeds.test/techcrunch": rss_response("New AI chip unveiled", "Best phones of 2026"),
            "https://feeds.test/broken": FakeResponse(status_code=500),
        })
        items = RssFeedsAdapter(feeds=feeds, session=session).fetch()

        assert [(i.title, i.source, i.engagement) for i in items] == [
            ("Company update", "Anthropic Blog", 1000),
            ("New AI chip unveiled", "TechCrunch AI", 500),
        ]

    def test_first_five_entries_per_feed(self):
        feeds = [FeedSource("OpenAI Blog", "https://feeds.test/openai", 1)]
        session = FakeSession({
            "https://feeds.test/openai": rss_response(*[f"Post {n}" for n in range(7)]),
        })
        items = RssFeedsAdapter(feeds=feeds, session=session).fetch()
        assert [i.title for i in items] == [f"Post {n}" for n in range(5)]


class TestXSearchHintsAdapter:
    """Tests for the X/Twitter placeholder adapter."""

    def test_emits_static_hints_without_http(self):
        session = FakeSession()
        items = XSearchHintsAdapter(session=session).fetch()

        assert len(items) == 7
        assert all(i.source == "Twitter/X" for i in items)
        assert items[2].url == "https://x.com/karpathy"
        assert session.calls == []
