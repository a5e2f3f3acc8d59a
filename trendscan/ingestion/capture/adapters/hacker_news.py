"""
Hacker News Adapter.

Uses the public Firebase item API. No authentication required.

Fetches the top and new story id lists, then the individual items
concurrently, and keeps stories whose title mentions an AI keyword.

FRAGILITY: Low - the item API has been stable for years.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

import requests

from trendscan.core.run_context import ScanContext
from trendscan.ingestion.capture.base import BaseSourceAdapter, RawCandidate
from trendscan.ingestion.capture.schemas import HackerNewsItem

logger = logging.getLogger(__name__)

API_BASE = "https://hacker-news.firebaseio.com/v0"

TOP_STORY_LIMIT = 50
NEW_STORY_LIMIT = 30
MAX_ITEMS = 70
MAX_PARALLEL = 10

AI_KEYWORDS = (
    "ai", "gpt", "llm", "claude", "openai", "anthropic", "gemini",
    "machine learning", "neural", "transformer", "chatbot", "language model",
    "diffusion", "stable", "midjourney", "copilot", "llama", "mistral",
    "deepmind", "hugging face", "pytorch", "tensorflow", "cursor", "ai agent",
    "chatgpt", "grok", "perplexity", "artificial intelligence", "deep learning",
)


def is_ai_title(title: str) -> bool:
    """Substring match of the lowercase title against AI_KEYWORDS."""
    lowered = title.lower()
    return any(keyword in lowered for keyword in AI_KEYWORDS)


class HackerNewsAdapter(BaseSourceAdapter):
    """
    Adapter for Hacker News top + new stories.
    """

    name = "hacker_news"

    def _fetch(self, ctx: ScanContext) -> list[RawCandidate]:
        with ThreadPoolExecutor(max_workers=2) as executor:
            top_future = executor.submit(self._get_json, f"{API_BASE}/topstories.json", ctx)
            new_future = executor.submit(self._get_json, f"{API_BASE}/newstories.json", ctx)
            top_ids = top_future.result()
            new_ids = new_future.result()

        if not isinstance(top_ids, list) or not isinstance(new_ids, list):
            raise ValueError("Story id listing is not a JSON array")

        # Union, top stories first
        story_ids = list(dict.fromkeys([*top_ids[:TOP_STORY_LIMIT], *new_ids[:NEW_STORY_LIMIT]]))
        story_ids = story_ids[:MAX_ITEMS]

        with ThreadPoolExecutor(max_workers=MAX_PARALLEL) as executor:
            stories = list(executor.map(lambda sid: self._fetch_item(sid, ctx), story_ids))

        items = []
        for story in stories:
            if story is None or not story.title or not is_ai_title(story.title):
                continue
            items.append(
                RawCandidate(
                    title=story.title,
                    source="HackerNews",
                    author=story.by,
                    engagement=story.score,
                    comments=story.descendants or 0,
                    url=story.url,
                    timestamp=story.created_at,
                )
            )
        return items

    def _fetch_item(self, story_id: int, ctx: ScanContext) -> HackerNewsItem | None:
        """Fetch one story; a network failure drops only that story."""
        try:
            payload = self._get_json(f"{API_BASE}/item/{story_id}.json", ctx)
        except requests.RequestException as e:
            logger.debug(
                "HackerNews item fetch failed",
                extra={"story_id": story_id, "error": str(e)},
            )
            return None
        if payload is None:
            return None
        return HackerNewsItem.model_validate(payload)
