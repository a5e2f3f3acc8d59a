"""
Daily scan job.

Reads recent titles from the store, runs the pipeline seeded with them,
drops analysed trends that still duplicate recent history, and replaces the
day's rows.

Today's own rows are left out of the dedup seed: they are about to be
replaced, and including them would make a same-day re-run discard
everything.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta

from django.utils import timezone

from trendscan.core.observability import log_pipeline_event
from trendscan.core.run_context import ScanContext, create_scan_context
from trendscan.digest.dto import ScanOptions, TrendAnalysis
from trendscan.digest.pipeline import TrendScanPipeline
from trendscan.digest.store import DjangoTrendStore, TrendStore
from trendscan.ingestion.jobs.dedupe import is_duplicate

logger = logging.getLogger(__name__)


@dataclass
class DailyScanSummary:
    """Outcome of one daily scan."""

    date: date
    count: int = 0
    duplicates_skipped: int = 0
    source_breakdown: dict[str, int] = field(default_factory=dict)
    source_errors: dict[str, str] = field(default_factory=dict)
    titles: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.count:
            return "Scan complete"
        if self.duplicates_skipped:
            return "No new unique trends found"
        return "No trends found"


def filter_new_trends(
    trends: list[TrendAnalysis],
    existing_titles: list[str],
    threshold: float,
) -> list[TrendAnalysis]:
    """Keep trends not near-duplicating existing titles or trends kept before them."""
    seen = list(existing_titles)
    kept = []
    for trend in trends:
        if is_duplicate(trend.title, seen, threshold):
            logger.info("Skipping duplicate trend", extra={"title": trend.title})
            continue
        kept.append(trend)
        seen.append(trend.title)
    return kept


def run_daily_scan(
    options: ScanOptions | None = None,
    store: TrendStore | None = None,
    pipeline: TrendScanPipeline | None = None,
    today: date | None = None,
    ctx: ScanContext | None = None,
) -> DailyScanSummary:
    """
    Scan, deduplicate against history, and persist today's trends.

    Args:
        options: Caller scan preferences
        store: Trend store (TrendRecord-backed if None)
        pipeline: Pipeline to run (default settings if None)
        today: Date bucket to write (current date if None)
        ctx: Scan context (a cron context with the configured deadline if None)

    Returns:
        DailyScanSummary

    Raises:
        Whatever the summarization step raises; nothing is written then.
    """
    store = store or DjangoTrendStore()
    pipeline = pipeline or TrendScanPipeline()
    settings = pipeline.settings
    now = timezone.now()
    today = today or now.date()
    ctx = ctx or create_scan_context(trigger_source="cron", deadline_seconds=settings.scan_deadline)

    lookback_start = (now - timedelta(hours=settings.dedup_lookback_hours)).date()
    recent_titles = store.recent_titles(since=lookback_start, before=today)

    result = pipeline.run(options, recent_titles=recent_titles, ctx=ctx)
    summary = DailyScanSummary(
        date=today,
        source_breakdown=result.source_breakdown,
        source_errors=result.source_errors,
    )
    if not result.trends:
        log_pipeline_event(ctx, "persist", "skipped", extra={"reason": "no_trends"})
        return summary

    unique = filter_new_trends(result.trends, recent_titles, settings.dedup_threshold)
    summary.duplicates_skipped = len(result.trends) - len(unique)
    if not unique:
        log_pipeline_event(
            ctx, "persist", "skipped",
            extra={"reason": "all_duplicates", "duplicates_skipped": summary.duplicates_skipped},
        )
        return summary

    summary.count = store.replace_for_date(today, unique)
    summary.titles = [t.title for t in unique]
    log_pipeline_event(
        ctx, "persist", "success",
        extra={
            "date": today.isoformat(),
            "count": summary.count,
            "duplicates_skipped": summary.duplicates_skipped,
        },
    )
    return summary
