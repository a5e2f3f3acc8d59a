"""
Management command to run a daily trend scan.

Usage:
    python scripts/run_manage.py scan_trends
    python scripts/run_manage.py scan_trends --topic agents --topic "open source" --style youtube
    python scripts/run_manage.py scan_trends --dry-run
"""

from __future__ import annotations

import logging

from django.core.management.base import BaseCommand, CommandError

from trendscan.core.enums import ContentStyle
from trendscan.core.guardrails import ConfigurationError, require_llm_configured
from trendscan.core.run_context import ScanDeadlineExceeded, create_scan_context
from trendscan.digest.dto import ScanOptions
from trendscan.digest.llm_client import LLMCallError, LLMClient, StructuredOutputError, load_config_from_env
from trendscan.digest.notifier import EmailAlertNotifier, LoggingNotifier
from trendscan.digest.pipeline import TrendScanPipeline, load_scan_settings
from trendscan.digest.scan_job import run_daily_scan
from trendscan.digest.store import DjangoTrendStore, InMemoryTrendStore
from trendscan.digest.summarizer import TrendSummarizer

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Scan all sources, summarize the top trends, and store today's digest"

    def add_arguments(self, parser):
        parser.add_argument(
            "--subreddit",
            action="append",
            default=[],
            help="Subreddit to scan (repeatable; default set if omitted)",
        )
        parser.add_argument(
            "--topic",
            action="append",
            default=[],
            help="Focus topic; boosts matching titles (repeatable)",
        )
        parser.add_argument(
            "--trusted-author",
            action="append",
            default=[],
            help="Personal trusted author handle (repeatable)",
        )
        parser.add_argument(
            "--style",
            choices=ContentStyle.values,
            default=ContentStyle.TIKTOK.value,
            help="Script format (default: tiktok)",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Run the scan but keep results in memory and log alerts only",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]

        llm_config = load_config_from_env()
        try:
            require_llm_configured(llm_config)
        except ConfigurationError as e:
            raise CommandError(str(e)) from e

        settings = load_scan_settings()
        notifier = LoggingNotifier() if dry_run else EmailAlertNotifier()
        store = InMemoryTrendStore() if dry_run else DjangoTrendStore()
        pipeline = TrendScanPipeline(
            summarizer=TrendSummarizer(LLMClient(llm_config), notifier=notifier),
            settings=settings,
        )
        scan_options = ScanOptions(
            subreddits=options["subreddit"],
            topics=options["topic"],
            trusted_authors=options["trusted_author"],
            content_style=options["style"],
        )
        ctx = create_scan_context(trigger_source="manual", deadline_seconds=settings.scan_deadline)

        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN - results will not be stored"))
        self.stdout.write(f"Starting trend scan (run_id={ctx.run_id})...")

        try:
            summary = run_daily_scan(scan_options, store=store, pipeline=pipeline, ctx=ctx)
        except (LLMCallError, StructuredOutputError, ScanDeadlineExceeded) as e:
            raise CommandError(f"Scan failed: {e}") from e

        self.stdout.write("Sources:")
        for name, count in summary.source_breakdown.items():
            suffix = f" (failed: {summary.source_errors[name]})" if name in summary.source_errors else ""
            self.stdout.write(f"  {name}: {count}{suffix}")

        for title in summary.titles:
            self.stdout.write(f"  - {title}")

        self.stdout.write(
            self.style.SUCCESS(
                f"{summary.message}: {summary.count} trends saved for {summary.date.isoformat()}, "
                f"{summary.duplicates_skipped} duplicates skipped"
            )
        )
