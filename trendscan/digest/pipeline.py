"""
Trend scan pipeline orchestrator.

Sequence for one scan:

    aggregate -> (short-circuit when no candidates) -> tag cross-platform
    -> score -> rank -> dedupe against recent titles -> select top-N
    -> format -> summarize -> ScanResult

The short-circuit on zero aggregated candidates is the only one: it saves
the LLM call when every source failed. Everything before summarization is best-effort;
only summarization can abort the scan.

The pipeline holds no state across runs beyond its read-only configuration.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable, Sequence

from trendscan.core.observability import log_pipeline_event
from trendscan.core.run_context import ScanContext, create_scan_context
from trendscan.digest.dto import ScanOptions, TrendAnalysis
from trendscan.digest.formatting import format_for_summary
from trendscan.digest.summarizer import TrendSummarizer
from trendscan.ingestion.capture.adapters import build_adapters
from trendscan.ingestion.capture.base import BaseSourceAdapter
from trendscan.ingestion.jobs.aggregate import aggregate_sources, tag_cross_platform
from trendscan.ingestion.jobs.dedupe import dedupe_candidates
from trendscan.ingestion.jobs.score import (
    RankingOptions,
    ScoredCandidate,
    rank_trends,
    score_candidates,
    select_top,
)
from trendscan.ingestion.ranking_config import DEFAULT_RANKING_CONFIG, RankingConfig

logger = logging.getLogger(__name__)


# =============================================================================
# SETTINGS
# =============================================================================


@dataclass(frozen=True)
class ScanSettings:
    """
    Scan-level knobs.

    Environment Variables:
    - TRENDSCAN_SOURCE_TIMEOUT: Per-request timeout in seconds (default: 8)
    - TRENDSCAN_ADAPTER_TIMEOUT: Join deadline per adapter in seconds (default: 25)
    - TRENDSCAN_SCAN_DEADLINE: Whole-scan deadline in seconds (default: 120)
    - TRENDSCAN_TOP_N: Candidates handed to the LLM (default: 30)
    - TRENDSCAN_DEDUP_THRESHOLD: Jaccard similarity above which titles are duplicates (default: 0.8)
    - TRENDSCAN_DEDUP_LOOKBACK_HOURS: History window for the dedup seed (default: 48)
    - TRENDSCAN_ENABLE_X_HINTS: Include X/Twitter placeholder entries (default: false)
    """

    source_timeout: float = 8.0
    adapter_timeout: float = 25.0
    scan_deadline: float = 120.0
    top_n: int = 30
    dedup_threshold: float = 0.8
    dedup_lookback_hours: int = 48
    enable_x_hints: bool = False


def load_scan_settings() -> ScanSettings:
    """Load ScanSettings from the environment; malformed values fall back to defaults."""
    defaults = ScanSettings()

    def _float(name: str, default: float) -> float:
        try:
            return float(os.getenv(name, str(default)))
        except ValueError:
            return default

    def _int(name: str, default: int) -> int:
        try:
            return int(os.getenv(name, str(default)))
        except ValueError:
            return default

    threshold = _float("TRENDSCAN_DEDUP_THRESHOLD", defaults.dedup_threshold)
    if not 0.0 <= threshold <= 1.0:
        logger.warning(
            "TRENDSCAN_DEDUP_THRESHOLD out of range, using default",
            extra={"value": threshold},
        )
        threshold = defaults.dedup_threshold

    x_hints = os.getenv("TRENDSCAN_ENABLE_X_HINTS", "").lower().strip() in ("true", "1", "yes", "on")

    return ScanSettings(
        source_timeout=_float("TRENDSCAN_SOURCE_TIMEOUT", defaults.source_timeout),
        adapter_timeout=_float("TRENDSCAN_ADAPTER_TIMEOUT", defaults.adapter_timeout),
        scan_deadline=_float("TRENDSCAN_SCAN_DEADLINE", defaults.scan_deadline),
        top_n=max(_int("TRENDSCAN_TOP_N", defaults.top_n), 1),
        dedup_threshold=threshold,
        dedup_lookback_hours=_int("TRENDSCAN_DEDUP_LOOKBACK_HOURS", defaults.dedup_lookback_hours),
        enable_x_hints=x_hints,
    )


# =============================================================================
# RESULT
# =============================================================================


@dataclass
class ScanResult:
    """
    Output of one pipeline run.

    Attributes:
        trends: Analysed trends, in the order the model returned them
        source_breakdown: Candidate count per adapter, plus "total"
        source_errors: adapter name -> failure summary
        selected: The ranked, deduplicated candidates sent to the model
    """

    trends: list[TrendAnalysis] = field(default_factory=list)
    source_breakdown: dict[str, int] = field(default_factory=dict)
    source_errors: dict[str, str] = field(default_factory=dict)
    selected: list[ScoredCandidate] = field(default_factory=list)


# =============================================================================
# PIPELINE
# =============================================================================


class TrendScanPipeline:
    """
    Orchestrates one scan from source fan-out to analysed trends.

    Usage:
        pipeline = TrendScanPipeline(summarizer=TrendSummarizer(notifier=notifier))
        result = pipeline.run(ScanOptions(topics=["agents"]), recent_titles=titles)
    """

    def __init__(
        self,
        summarizer: TrendSummarizer | None = None,
        settings: ScanSettings | None = None,
        ranking_config: RankingConfig = DEFAULT_RANKING_CONFIG,
        adapters: Sequence[BaseSourceAdapter] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Args:
            summarizer: Summarization client (a default one is built if None)
            settings: Scan settings (loaded from env if None)
            ranking_config: Ranking tables
            adapters: Fixed adapter list; built per run from options if None
            clock: Reference-time source for velocity scoring
        """
        self.summarizer = summarizer or TrendSummarizer()
        self.settings = settings or load_scan_settings()
        self.ranking_config = ranking_config
        self.adapters = list(adapters) if adapters is not None else None
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _adapters_for(self, options: ScanOptions) -> list[BaseSourceAdapter]:
        if self.adapters is not None:
            return self.adapters
        return build_adapters(
            subreddits=options.subreddits or None,
            request_timeout=self.settings.source_timeout,
            enable_x_hints=self.settings.enable_x_hints,
        )

    def run(
        self,
        options: ScanOptions | None = None,
        recent_titles: Iterable[str] = (),
        ctx: ScanContext | None = None,
    ) -> ScanResult:
        """
        Run one scan.

        Args:
            options: Caller preferences (subreddits, topics, authors, style)
            recent_titles: Dedup seed from the lookback window
            ctx: Scan context; one with the configured deadline is created if None

        Returns:
            ScanResult (empty trends when no source returned anything)

        Raises:
            LLMCallError, StructuredOutputError, ScanDeadlineExceeded:
                From the summarization step only.
        """
        options = options or ScanOptions()
        ctx = ctx or create_scan_context(deadline_seconds=self.settings.scan_deadline)
        log_pipeline_event(ctx, "scan", "start")

        aggregated = aggregate_sources(
            self._adapters_for(options), ctx, adapter_timeout=self.settings.adapter_timeout
        )
        breakdown = {**aggregated.counts, "total": aggregated.total}

        if aggregated.total == 0:
            log_pipeline_event(ctx, "scan", "skipped", extra={"reason": "no_candidates"})
            return ScanResult(source_breakdown=breakdown, source_errors=dict(aggregated.errors))

        tagged = tag_cross_platform(aggregated.candidates, self.ranking_config.key_terms)
        ranking_options = RankingOptions(
            trusted_authors=tuple(options.trusted_authors),
            topics=tuple(options.topics),
            now=self.clock(),
        )
        ranked = rank_trends(score_candidates(tagged, self.ranking_config, ranking_options))
        unique = dedupe_candidates(ranked, recent_titles, self.settings.dedup_threshold)
        selected = select_top(unique, self.settings.top_n)

        log_pipeline_event(
            ctx, "rank", "success",
            extra={
                "scored": len(ranked),
                "after_dedupe": len(unique),
                "selected": len(selected),
                "top_score": selected[0].final_score if selected else 0,
            },
        )

        trends = self.summarizer.analyze(format_for_summary(selected), options, ctx)

        log_pipeline_event(
            ctx,
            "scan",
            "partial" if aggregated.errors else "success",
            extra={"trend_count": len(trends), "source_breakdown": breakdown},
        )
        return ScanResult(
            trends=trends,
            source_breakdown=breakdown,
            source_errors=dict(aggregated.errors),
            selected=selected,
        )
