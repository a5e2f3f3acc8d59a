"""
X/Twitter Search Hints Adapter.

There is no X API access. Instead of content, this adapter emits placeholder
entries that point the summarization model at live X searches and at the
timelines of trusted authors. It performs no HTTP calls.

Disabled by default (TRENDSCAN_ENABLE_X_HINTS); the entries carry synthetic
engagement and would otherwise compete with real items in the ranking.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from trendscan.core.run_context import ScanContext
from trendscan.ingestion.capture.base import BaseSourceAdapter, RawCandidate
from trendscan.ingestion.ranking_config import DEFAULT_RANKING_CONFIG, RankingConfig

logger = logging.getLogger(__name__)

MAX_AUTHOR_HINTS = 5


class XSearchHintsAdapter(BaseSourceAdapter):
    """
    Placeholder adapter for X/Twitter.
    """

    name = "x_hints"

    def __init__(self, ranking_config: RankingConfig = DEFAULT_RANKING_CONFIG, **kwargs):
        super().__init__(**kwargs)
        self.ranking_config = ranking_config

    def _fetch(self, ctx: ScanContext) -> list[RawCandidate]:
        now = datetime.now(timezone.utc)
        hints = [
            RawCandidate(
                title="[X/Twitter] Recent AI discussions from @karpathy, @ylecun, @sama and other AI leaders",
                source="Twitter/X",
                author="multiple",
                engagement=500,
                url="https://x.com/search?q=AI%20OR%20LLM%20OR%20GPT&f=live",
                timestamp=now,
            ),
            RawCandidate(
                title="[X/Twitter] Trending: AI announcements and releases",
                source="Twitter/X",
                author="trending",
                engagement=400,
                url="https://x.com/search?q=AI%20announcement%20OR%20AI%20release&f=live",
                timestamp=now,
            ),
        ]

        for handle in list(self.ranking_config.trusted_authors)[:MAX_AUTHOR_HINTS]:
            hints.append(
                RawCandidate(
                    title=f"[X/Twitter] Recent posts from @{handle} about AI",
                    source="Twitter/X",
                    author=handle,
                    engagement=300,
                    url=f"https://x.com/{handle}",
                    timestamp=now,
                )
            )
        return hints
