"""
Bluesky Search Adapter.

Uses the public AppView search endpoint (app.bsky.feed.searchPosts).
No authentication required.

FRAGILITY: Medium - the public search endpoint is occasionally rate limited.
"""

from __future__ import annotations

import logging

import requests

from trendscan.core.run_context import ScanContext
from trendscan.ingestion.capture.base import BaseSourceAdapter, RawCandidate
from trendscan.ingestion.capture.schemas import BlueskyPost, BlueskySearchResponse

logger = logging.getLogger(__name__)

SEARCH_URL = "https://public.api.bsky.app/xrpc/app.bsky.feed.searchPosts"

SEARCH_TERMS = (
    "artificial intelligence",
    "ChatGPT",
    "Claude AI",
    "GPT-4",
    "LLM",
    "machine learning",
    "OpenAI",
    "Anthropic",
)

# Only the first few terms are searched per scan
TERMS_PER_SCAN = 4
MAX_POSTS_PER_TERM = 8
MIN_LIKES = 5
MIN_REPOSTS = 2
TITLE_MAX_CHARS = 250


def post_engagement(post: BlueskyPost) -> int:
    """Likes + 2 x reposts + replies."""
    return (post.likeCount or 0) + (post.repostCount or 0) * 2 + (post.replyCount or 0)


class BlueskyAdapter(BaseSourceAdapter):
    """
    Adapter for Bluesky top posts matching AI search terms.
    """

    name = "bluesky"

    def _fetch(self, ctx: ScanContext) -> list[RawCandidate]:
        results: list[RawCandidate] = []

        for term in SEARCH_TERMS[:TERMS_PER_SCAN]:
            try:
                payload = self._get_json(SEARCH_URL, ctx, q=term, limit=30, sort="top")
            except requests.RequestException as e:
                logger.info(
                    "Bluesky search failed",
                    extra={"term": term, "error": str(e)[:200]},
                )
                continue

            response = BlueskySearchResponse.model_validate(payload)
            popular = [
                post
                for post in response.posts
                if (post.likeCount or 0) >= MIN_LIKES or (post.repostCount or 0) >= MIN_REPOSTS
            ]
            for post in popular[:MAX_POSTS_PER_TERM]:
                handle = post.author.handle
                results.append(
                    RawCandidate(
                        title=post.record.text[:TITLE_MAX_CHARS],
                        source="Bluesky",
                        author=handle,
                        engagement=post_engagement(post),
                        url=f"https://bsky.app/profile/{handle}/post/{post.post_id}",
                        timestamp=post.record.createdAt,
                    )
                )

        # Popular posts match several terms
        seen: set[str] = set()
        unique = []
        for item in results:
            if item.url in seen:
                continue
            seen.add(item.url)
            unique.append(item)
        return unique
