"""
Source adapters.

Each adapter implements BaseSourceAdapter for one public source.
"""

from __future__ import annotations

from typing import Sequence

import requests

from trendscan.ingestion.capture.base import (
    BaseSourceAdapter,
    RawCandidate,
    SourceFetchError,
)
from trendscan.ingestion.capture.adapters.bluesky import BlueskyAdapter
from trendscan.ingestion.capture.adapters.hacker_news import HackerNewsAdapter
from trendscan.ingestion.capture.adapters.reddit import RedditAdapter
from trendscan.ingestion.capture.adapters.rss_feeds import RssFeedsAdapter
from trendscan.ingestion.capture.adapters.x_hints import XSearchHintsAdapter

# Registry of available adapters by name, in merge order
ADAPTER_REGISTRY: dict[str, type[BaseSourceAdapter]] = {
    "hacker_news": HackerNewsAdapter,
    "reddit": RedditAdapter,
    "bluesky": BlueskyAdapter,
    "x_hints": XSearchHintsAdapter,
    "rss": RssFeedsAdapter,
}


def build_adapters(
    subreddits: Sequence[str] | None = None,
    request_timeout: float = 8.0,
    enable_x_hints: bool = False,
    session: requests.Session | None = None,
) -> list[BaseSourceAdapter]:
    """
    Instantiate the configured adapters in registry order.

    Args:
        subreddits: Caller subreddit list for the Reddit adapter
        request_timeout: Per-request timeout in seconds
        enable_x_hints: Include the X/Twitter placeholder adapter
        session: Optional shared HTTP session
    """
    adapters: list[BaseSourceAdapter] = []
    for name, adapter_cls in ADAPTER_REGISTRY.items():
        if name == "x_hints" and not enable_x_hints:
            continue
        kwargs = {"session": session, "request_timeout": request_timeout}
        if adapter_cls is RedditAdapter:
            kwargs["subreddits"] = subreddits
        adapters.append(adapter_cls(**kwargs))
    return adapters


__all__ = [
    "ADAPTER_REGISTRY",
    "BaseSourceAdapter",
    "BlueskyAdapter",
    "HackerNewsAdapter",
    "RawCandidate",
    "RedditAdapter",
    "RssFeedsAdapter",
    "SourceFetchError",
    "XSearchHintsAdapter",
    "build_adapters",
]
