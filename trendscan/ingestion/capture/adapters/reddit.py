"""
Reddit Subreddit Adapter.

Uses requests to fetch JSON from Reddit's public listing endpoints.
No authentication required for public subreddits.

For each subreddit the hot and daily-top listings are fetched concurrently,
merged by permalink, and filtered by a minimum score.

FRAGILITY: Low - Reddit JSON endpoints are stable.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

import requests
from pydantic import ValidationError

from trendscan.core.run_context import ScanContext
from trendscan.ingestion.capture.base import BaseSourceAdapter, RawCandidate
from trendscan.ingestion.capture.schemas import RedditListing, RedditPost

logger = logging.getLogger(__name__)

DEFAULT_SUBREDDITS = (
    "LocalLLaMA",
    "MachineLearning",
    "artificial",
    "ClaudeAI",
    "ChatGPT",
    "OpenAI",
    "StableDiffusion",
    "singularity",
)

MIN_SCORE = 30
MAX_POSTS_PER_SUBREDDIT = 15
MAX_PARALLEL_SUBREDDITS = 4


class RedditAdapter(BaseSourceAdapter):
    """
    Adapter for Reddit hot + top-of-day posts across subreddits.
    """

    name = "reddit"

    def __init__(self, subreddits: Sequence[str] | None = None, **kwargs):
        """Initialize adapter; an empty subreddit list falls back to the defaults."""
        super().__init__(**kwargs)
        self.subreddits = tuple(subreddits) if subreddits else DEFAULT_SUBREDDITS

    def _fetch(self, ctx: ScanContext) -> list[RawCandidate]:
        with ThreadPoolExecutor(max_workers=MAX_PARALLEL_SUBREDDITS) as executor:
            per_subreddit = list(
                executor.map(lambda sub: self._fetch_subreddit(sub, ctx), self.subreddits)
            )

        items: list[RawCandidate] = []
        for posts in per_subreddit:
            items.extend(posts)
        return items

    def _fetch_subreddit(self, subreddit: str, ctx: ScanContext) -> list[RawCandidate]:
        """
        Fetch one subreddit. A failing subreddit yields no posts but does not
        affect its siblings.
        """
        base = f"https://www.reddit.com/r/{subreddit}"
        try:
            with ThreadPoolExecutor(max_workers=2) as executor:
                hot_future = executor.submit(self._listing, f"{base}/hot.json", ctx, limit=20)
                top_future = executor.submit(
                    self._listing, f"{base}/top.json", ctx, t="day", limit=10
                )
                posts = [*hot_future.result(), *top_future.result()]
        except (requests.RequestException, ValidationError) as e:
            logger.warning(
                "Reddit subreddit fetch failed",
                extra={"subreddit": subreddit, "error": str(e)[:200]},
            )
            return []

        seen_permalinks: set[str] = set()
        kept: list[RedditPost] = []
        for post in posts:
            if post.permalink in seen_permalinks:
                continue
            seen_permalinks.add(post.permalink)
            if post.score > MIN_SCORE:
                kept.append(post)

        return [
            RawCandidate(
                title=post.title,
                source=f"r/{subreddit}",
                author=post.author,
                engagement=post.score,
                comments=post.num_comments,
                url=f"https://reddit.com{post.permalink}",
                timestamp=post.created_at,
            )
            for post in kept[:MAX_POSTS_PER_SUBREDDIT]
        ]

    def _listing(self, url: str, ctx: ScanContext, **params) -> list[RedditPost]:
        """One listing variant; a non-2xx status only empties this variant."""
        try:
            payload = self._get_json(url, ctx, **params)
        except requests.HTTPError as e:
            logger.info("Reddit listing unavailable", extra={"url": url, "error": str(e)})
            return []
        listing = RedditListing.model_validate(payload)
        return [child.data for child in listing.data.children]
