"""
Candidate scoring and ranking job.

Computes a deterministic multiplicative relevance score per candidate:

    final = round(base * tier * author * velocity * cross_platform * keyword * topic)

where base = engagement + 0.5 * comments. Every multiplier is evaluated
independently, so a strong signal on any single axis can dominate without the
other axes agreeing.

The score is a pure function of (candidate, RankingConfig, RankingOptions);
the reference "now" for velocity is part of RankingOptions.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Sequence

from trendscan.ingestion.capture.base import RawCandidate
from trendscan.ingestion.ranking_config import DEFAULT_RANKING_CONFIG, RankingConfig

logger = logging.getLogger(__name__)

COMMENT_WEIGHT = 0.5
DEFAULT_TOP_N = 30


@dataclass(frozen=True)
class RankingOptions:
    """
    Per-run scoring options.

    Attributes:
        trusted_authors: Caller's personal trusted handles
        topics: Caller's focus topics
        now: Reference time for velocity windows
    """

    trusted_authors: tuple[str, ...] = ()
    topics: tuple[str, ...] = ()
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class ScoreBreakdown:
    """Each multiplier that went into a final score."""
    base_engagement: float
    source_tier: float
    author_boost: float
    velocity: float
    cross_platform: float
    keyword_boost: float
    topic_boost: float


@dataclass(frozen=True)
class ScoredCandidate:
    """A RawCandidate with its final score and breakdown."""
    candidate: RawCandidate
    final_score: int
    breakdown: ScoreBreakdown

    @property
    def title(self) -> str:
        return self.candidate.title

    @property
    def source(self) -> str:
        return self.candidate.source


# =============================================================================
# MULTIPLIERS
# =============================================================================


def source_tier_multiplier(source: str, config: RankingConfig = DEFAULT_RANKING_CONFIG) -> float:
    """First tier with a source name contained in `source` (case-insensitive)."""
    normalized = source.lower()
    for tier in config.tiers:
        if any(name.lower() in normalized for name in tier.sources):
            return tier.multiplier
    return config.default_tier_multiplier


def normalize_handle(author: str) -> str:
    return author.strip().lower().lstrip("@")


def author_boost(
    author: str | None,
    personal_trusted: Iterable[str] = (),
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
) -> float:
    """Caller's own trusted list first, then the global table."""
    if not author:
        return 1.0
    handle = normalize_handle(author)
    if any(normalize_handle(a) == handle for a in personal_trusted):
        return config.personal_author_boost
    return config.trusted_authors.get(handle, 1.0)


def velocity_multiplier(
    engagement: float,
    timestamp: datetime | None,
    now: datetime,
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
) -> float:
    """
    First velocity window satisfied by both age and engagement.

    Missing timestamp means 1.0 unconditionally.
    """
    if timestamp is None:
        return 1.0
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)

    hours_ago = (now - timestamp).total_seconds() / 3600
    for window in config.velocity_windows:
        if hours_ago <= window.max_age_hours and engagement >= window.min_engagement:
            return window.multiplier
    return 1.0


def cross_platform_multiplier(platform_count: int, config: RankingConfig = DEFAULT_RANKING_CONFIG) -> float:
    for rule in config.cross_platform_rules:
        if platform_count >= rule.min_platforms:
            return rule.multiplier
    return 1.0


def keyword_boost(text: str, config: RankingConfig = DEFAULT_RANKING_CONFIG) -> float:
    """Highest multiplier among the keywords found in the text (not a product)."""
    normalized = text.lower()
    boost = 1.0
    for keyword, multiplier in config.keyword_boosts.items():
        if keyword.lower() in normalized:
            boost = max(boost, multiplier)
    return boost


def topic_boost(title: str, topics: Iterable[str], config: RankingConfig = DEFAULT_RANKING_CONFIG) -> float:
    title_lower = title.lower()
    if any(topic and topic.lower() in title_lower for topic in topics):
        return config.topic_boost
    return 1.0


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# =============================================================================
# SCORING
# =============================================================================


def score_candidate(
    candidate: RawCandidate,
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
    options: RankingOptions | None = None,
) -> ScoredCandidate:
    """
    Compute the final weighted score for one candidate.

    Args:
        candidate: Candidate to score
        config: Ranking tables
        options: Per-run options (personal authors, topics, reference time)

    Returns:
        ScoredCandidate with a non-negative integer score
    """
    options = options or RankingOptions()

    base = max(candidate.engagement, 0) + COMMENT_WEIGHT * max(candidate.comments or 0, 0)
    breakdown = ScoreBreakdown(
        base_engagement=base,
        source_tier=source_tier_multiplier(candidate.source, config),
        author_boost=author_boost(candidate.author, options.trusted_authors, config),
        velocity=velocity_multiplier(candidate.engagement, candidate.timestamp, options.now, config),
        cross_platform=cross_platform_multiplier(len(candidate.platforms) or 1, config),
        keyword_boost=keyword_boost(candidate.title, config),
        topic_boost=topic_boost(candidate.title, options.topics, config),
    )

    final = _round_half_up(
        breakdown.base_engagement
        * breakdown.source_tier
        * breakdown.author_boost
        * breakdown.velocity
        * breakdown.cross_platform
        * breakdown.keyword_boost
        * breakdown.topic_boost
    )
    return ScoredCandidate(candidate=candidate, final_score=final, breakdown=breakdown)


def score_candidates(
    candidates: Iterable[RawCandidate],
    config: RankingConfig = DEFAULT_RANKING_CONFIG,
    options: RankingOptions | None = None,
) -> list[ScoredCandidate]:
    """Score candidates, preserving input order."""
    options = options or RankingOptions()
    return [score_candidate(c, config, options) for c in candidates]


def rank_trends(scored: Sequence[ScoredCandidate]) -> list[ScoredCandidate]:
    """
    Sort descending by final score.

    The sort is stable: equal scores keep their input order.
    """
    return sorted(scored, key=lambda s: s.final_score, reverse=True)


def select_top(ranked: Sequence[ScoredCandidate], limit: int = DEFAULT_TOP_N) -> list[ScoredCandidate]:
    """Cap a ranked list to its first `limit` entries."""
    return list(ranked[:limit])
