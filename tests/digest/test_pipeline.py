"""
Pipeline orchestration tests.

Adapters are StaticAdapters and the summarizer is a MagicMock, so no
network or LLM calls happen.
"""

from unittest.mock import MagicMock, patch

import pytest

from trendscan.core.run_context import ScanContext
from trendscan.digest.dto import ScanOptions
from trendscan.digest.llm_client import RateLimitError
from trendscan.digest.pipeline import ScanSettings, TrendScanPipeline, load_scan_settings
from tests.helpers.fakes import FIXED_NOW, StaticAdapter, make_trend


def make_pipeline(adapters, summarizer=None, **settings):
    if summarizer is None:
        summarizer = MagicMock()
        summarizer.analyze.return_value = [make_trend()]
    return TrendScanPipeline(
        summarizer=summarizer,
        settings=ScanSettings(**settings),
        adapters=adapters,
        clock=lambda: FIXED_NOW,
    )


class TestTrendScanPipeline:
    """Tests for TrendScanPipeline.run."""

    def test_no_candidates_skips_summarization(self):
        summarizer = MagicMock()
        pipeline = make_pipeline(
            [StaticAdapter("HackerNews"), StaticAdapter("Reddit", error=RuntimeError("down"))],
            summarizer=summarizer,
        )

        result = pipeline.run(ScanOptions(), ctx=ScanContext())

        summarizer.analyze.assert_not_called()
        assert result.trends == []
        assert result.source_breakdown == {"HackerNews": 0, "Reddit": 0, "total": 0}

    def test_scenario_seeded_dedup_and_tier_ordering(self, make_candidate):
        """Tier-1 candidate leads; the one near-duplicating history is dropped."""
        low_title = "quantum widget maker opens second factory near northern lake shore"
        adapters = [
            StaticAdapter("Other", [
                make_candidate("Startup releases tiny robot vacuum", source="Other", engagement=10),
                make_candidate(low_title, source="Other", engagement=5),
            ]),
            StaticAdapter("Blogs", [
                make_candidate("Anthropic publishes interpretability notes", source="Anthropic Blog", engagement=50),
            ]),
        ]
        pipeline = make_pipeline(adapters)

        result = pipeline.run(ScanOptions(), recent_titles=[low_title + " today"], ctx=ScanContext())

        assert [s.source for s in result.selected] == ["Anthropic Blog", "Other"]
        formatted = pipeline.summarizer.analyze.call_args.args[0]
        assert "Anthropic publishes interpretability notes" in formatted
        assert low_title not in formatted
        assert result.source_breakdown == {"Other": 2, "Blogs": 1, "total": 3}

    def test_failed_source_is_partial_not_fatal(self, make_candidate, capture_logger):
        handler = capture_logger("trendscan.pipeline")
        adapters = [
            StaticAdapter("HackerNews", [make_candidate("Claude update", source="HackerNews")]),
            StaticAdapter("Bluesky", error=RuntimeError("auth")),
        ]

        result = make_pipeline(adapters).run(ScanOptions(), ctx=ScanContext())

        assert len(result.trends) == 1
        assert result.source_breakdown == {"HackerNews": 1, "Bluesky": 0, "total": 1}
        assert "Bluesky" in result.source_errors
        scan_end = [r for r in handler.records if r.stage == "scan" and r.status != "start"]
        assert scan_end[-1].status == "partial"

    def test_options_reach_scoring_and_summarizer(self, make_candidate):
        adapters = [StaticAdapter("HackerNews", [
            make_candidate("New agents framework", source="HackerNews", author="friend"),
        ])]
        pipeline = make_pipeline(adapters)
        options = ScanOptions(topics=["agents"], trusted_authors=["@friend"])

        result = pipeline.run(options, ctx=ScanContext())

        [selected] = result.selected
        assert selected.breakdown.topic_boost == 1.5
        assert selected.breakdown.author_boost == 2.0
        assert pipeline.summarizer.analyze.call_args.args[1] is options

    def test_top_n_caps_selection(self, make_candidate):
        words = ["alpha", "bravo", "charlie", "delta", "echo", "foxtrot", "golf", "hotel", "india", "juliet"]
        items = [make_candidate(f"{word} headline", engagement=i) for i, word in enumerate(words)]
        result = make_pipeline([StaticAdapter("Other", items)], top_n=3).run(ScanOptions(), ctx=ScanContext())

        assert [s.candidate.engagement for s in result.selected] == [9, 8, 7]

    def test_summarizer_failure_propagates(self, make_candidate):
        summarizer = MagicMock()
        summarizer.analyze.side_effect = RateLimitError("429")
        pipeline = make_pipeline([StaticAdapter("Other", [make_candidate()])], summarizer=summarizer)

        with pytest.raises(RateLimitError):
            pipeline.run(ScanOptions(), ctx=ScanContext())

    def test_builds_adapters_from_options(self, make_candidate):
        summarizer = MagicMock()
        summarizer.analyze.return_value = []
        pipeline = TrendScanPipeline(summarizer=summarizer, settings=ScanSettings(source_timeout=3.0))

        with patch("trendscan.digest.pipeline.build_adapters", return_value=[]) as build:
            pipeline.run(ScanOptions(subreddits=["LocalLLaMA"]), ctx=ScanContext())

        build.assert_called_once_with(subreddits=["LocalLLaMA"], request_timeout=3.0, enable_x_hints=False)


class TestLoadScanSettings:
    """Tests for load_scan_settings."""

    def test_defaults(self, monkeypatch):
        for name in (
            "TRENDSCAN_SOURCE_TIMEOUT",
            "TRENDSCAN_ADAPTER_TIMEOUT",
            "TRENDSCAN_SCAN_DEADLINE",
            "TRENDSCAN_TOP_N",
            "TRENDSCAN_DEDUP_THRESHOLD",
            "TRENDSCAN_DEDUP_LOOKBACK_HOURS",
            "TRENDSCAN_ENABLE_X_HINTS",
        ):
            monkeypatch.delenv(name, raising=False)

        assert load_scan_settings() == ScanSettings()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("TRENDSCAN_TOP_N", "12")
        monkeypatch.setenv("TRENDSCAN_DEDUP_THRESHOLD", "0.6")
        monkeypatch.setenv("TRENDSCAN_SCAN_DEADLINE", "45")
        monkeypatch.setenv("TRENDSCAN_ENABLE_X_HINTS", "true")

        settings = load_scan_settings()

        assert settings.top_n == 12
        assert settings.dedup_threshold == 0.6
        assert settings.scan_deadline == 45.0
        assert settings.enable_x_hints is True

    def test_invalid_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("TRENDSCAN_TOP_N", "0")
        monkeypatch.setenv("TRENDSCAN_DEDUP_THRESHOLD", "1.7")
        monkeypatch.setenv("TRENDSCAN_SOURCE_TIMEOUT", "fast")

        settings = load_scan_settings()

        assert settings.top_n == 1
        assert settings.dedup_threshold == 0.8
        assert settings.source_timeout == 8.0
