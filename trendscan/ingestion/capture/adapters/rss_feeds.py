"""
RSS / Atom Feeds Adapter.

Feeds are downloaded with requests (so the per-request timeout applies) and
parsed with feedparser, which handles both RSS (<item>, <pubDate>,
<link>text</link>) and Atom (<entry>, <updated>/<published>,
<link href="...">). Entries are reduced to one FeedItem shape.

Official lab blogs (tier 1) are kept unconditionally. Entries from general
tech news feeds are kept only when the title is AI related.
"""

from __future__ import annotations

import calendar
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Sequence

import feedparser
import requests

from trendscan.core.run_context import ScanContext
from trendscan.ingestion.capture.base import (
    USER_AGENT,
    BaseSourceAdapter,
    RawCandidate,
    SourceFetchError,
)
from trendscan.ingestion.capture.schemas import FeedItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedSource:
    """A configured feed."""
    name: str
    url: str
    tier: int


DEFAULT_FEEDS = (
    # Official lab blogs
    FeedSource("Anthropic Blog", "https://www.anthropic.com/rss.xml", 1),
    FeedSource("OpenAI Blog", "https://openai.com/blog/rss.xml", 1),
    FeedSource("Google AI Blog", "https://blog.google/technology/ai/rss/", 1),
    FeedSource("DeepMind Blog", "https://deepmind.google/blog/rss.xml", 1),
    # Tech news
    FeedSource("TechCrunch AI", "https://techcrunch.com/category/artificial-intelligence/feed/", 2),
    FeedSource("The Verge AI", "https://www.theverge.com/rss/ai-artificial-intelligence/index.xml", 2),
    FeedSource("Ars Technica AI", "https://feeds.arstechnica.com/arstechnica/technology-lab", 2),
    FeedSource("MIT Tech Review", "https://www.technologyreview.com/feed/", 2),
    FeedSource("The Decoder", "https://the-decoder.com/feed/", 2),
    FeedSource("VentureBeat AI", "https://venturebeat.com/category/ai/feed/", 2),
)

ENTRIES_PER_FEED = 5
TIER1_ENGAGEMENT = 1000
DEFAULT_ENGAGEMENT = 500
MAX_PARALLEL_FEEDS = 5

AI_TITLE_PATTERN = re.compile(
    r"\b(ai|artificial intelligence|gpt|llm|claude|machine learning|neural|"
    r"chatbot|openai|anthropic|gemini)\b",
    re.IGNORECASE,
)
_TAG_PATTERN = re.compile(r"<[^>]+>")

FEED_ACCEPT = "application/rss+xml, application/atom+xml, application/xml, text/xml"


def _struct_to_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromtimestamp(calendar.timegm(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        return None


def _entry_link(entry: Any) -> str | None:
    """<link>text</link> (RSS) first, then the first <link href> (Atom)."""
    link = entry.get("link")
    if link:
        return link
    for candidate in entry.get("links", []):
        href = candidate.get("href")
        if href:
            return href
    return None


def parse_feed(content: bytes | str) -> list[FeedItem]:
    """
    Parse an RSS or Atom document into FeedItems.

    Entries without a title are skipped. The date comes from <pubDate>
    for RSS items, and from <updated> then <published> for Atom entries.

    Raises:
        SourceFetchError: If the document is not a feed at all.
    """
    parsed = feedparser.parse(content)
    if parsed.bozo and not parsed.entries:
        raise SourceFetchError(
            f"Unparseable feed: {parsed.get('bozo_exception')}",
            original_error=parsed.get("bozo_exception"),
        )

    # feedparser reports both <pubDate> and Atom <published> as published_parsed.
    if parsed.get("version", "").startswith("atom"):
        date_keys = ("updated_parsed", "published_parsed")
    else:
        date_keys = ("published_parsed", "updated_parsed")

    items = []
    for entry in parsed.entries:
        title = _TAG_PATTERN.sub("", entry.get("title", "")).strip()
        if not title:
            continue
        published = None
        for key in date_keys:
            published = _struct_to_datetime(entry.get(key))
            if published is not None:
                break
        items.append(FeedItem(title=title, link=_entry_link(entry), published_at=published))
    return items


class RssFeedsAdapter(BaseSourceAdapter):
    """
    Adapter for official lab blogs and AI tech news feeds.
    """

    name = "rss"

    def __init__(self, feeds: Sequence[FeedSource] = DEFAULT_FEEDS, **kwargs):
        super().__init__(**kwargs)
        self.feeds = tuple(feeds)

    def _fetch(self, ctx: ScanContext) -> list[RawCandidate]:
        with ThreadPoolExecutor(max_workers=MAX_PARALLEL_FEEDS) as executor:
            per_feed = list(executor.map(lambda feed: self._fetch_feed(feed, ctx), self.feeds))

        items: list[RawCandidate] = []
        for feed_items in per_feed:
            items.extend(feed_items)
        return items

    def _fetch_feed(self, feed: FeedSource, ctx: ScanContext) -> list[RawCandidate]:
        """Fetch one feed; a failing feed yields nothing but spares its siblings."""
        if ctx.expired():
            return []
        try:
            response = self.session.get(
                feed.url,
                headers={"User-Agent": USER_AGENT, "Accept": FEED_ACCEPT},
                timeout=ctx.clip_timeout(self.request_timeout),
            )
            response.raise_for_status()
            entries = parse_feed(response.content)
        except (requests.RequestException, SourceFetchError) as e:
            logger.info(
                "Feed fetch failed",
                extra={"feed": feed.name, "error": str(e)[:200]},
            )
            return []

        items = []
        for entry in entries[:ENTRIES_PER_FEED]:
            if feed.tier != 1 and not AI_TITLE_PATTERN.search(entry.title):
                continue
            items.append(
                RawCandidate(
                    title=entry.title,
                    source=feed.name,
                    engagement=TIER1_ENGAGEMENT if feed.tier == 1 else DEFAULT_ENGAGEMENT,
                    url=entry.link,
                    timestamp=entry.published_at,
                )
            )
        return items
