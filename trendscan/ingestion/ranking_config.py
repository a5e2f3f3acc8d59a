"""
Ranking & weighting configuration.

All multipliers stack multiplicatively in the final score:

    final = base_engagement * source_tier * author_boost * velocity
            * cross_platform * keyword_boost * topic_boost

Tables are immutable values built once at import and passed explicitly into
the scoring functions. Build a new RankingConfig (e.g. with
dataclasses.replace) to score with different weights; never mutate one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class SourceTier:
    """A source-credibility weight class. Sources match by case-insensitive substring."""
    name: str
    multiplier: float
    sources: tuple[str, ...]


@dataclass(frozen=True)
class VelocityWindow:
    """A time-since-post bracket with a minimum engagement and a multiplier."""
    name: str
    max_age_hours: float
    min_engagement: float
    multiplier: float


@dataclass(frozen=True)
class CrossPlatformRule:
    """Multiplier applied once a topic is seen on at least `min_platforms` sources."""
    min_platforms: int
    multiplier: float


SOURCE_TIERS = (
    # Official sources, highest credibility
    SourceTier(
        name="tier1",
        multiplier=3.0,
        sources=("Anthropic Blog", "OpenAI Blog", "Google AI Blog", "DeepMind Blog", "Meta AI Blog"),
    ),
    # Curated tech communities
    SourceTier(
        name="tier2",
        multiplier=2.0,
        sources=("HackerNews", "r/MachineLearning", "r/LocalLLaMA", "arXiv"),
    ),
    # General tech communities
    SourceTier(
        name="tier3",
        multiplier=1.5,
        sources=("r/artificial", "r/ClaudeAI", "r/ChatGPT", "r/OpenAI", "TechCrunch", "The Verge"),
    ),
    # Social media, baseline
    SourceTier(
        name="tier4",
        multiplier=1.0,
        sources=("Bluesky", "Twitter/X", "YouTube", "Other"),
    ),
)

# handle (lowercase, no @) -> boost
TRUSTED_AUTHORS = MappingProxyType({
    # Researchers & lab leaders
    "karpathy": 2.0,
    "ylecun": 2.0,
    "sama": 2.0,
    "gaborcselle": 2.0,
    "demishassabis": 2.0,
    "ilyasut": 2.0,
    "drjimfan": 2.0,
    "alexandr_wang": 2.0,
    "darioamodei": 2.0,
    "jackclarksf": 2.0,
    # Prominent AI voices
    "emollick": 1.75,
    "svpino": 1.75,
    "minimaxir": 1.75,
    "goodside": 1.75,
    "simonw": 1.75,
    # AI content creators
    "theaievangelist": 1.5,
    "mattshumer_": 1.5,
    "rowancheung": 1.5,
    "ai_for_success": 1.5,
})

VELOCITY_WINDOWS = (
    VelocityWindow(name="hot", max_age_hours=2, min_engagement=50, multiplier=2.0),
    VelocityWindow(name="warm", max_age_hours=6, min_engagement=100, multiplier=1.5),
    VelocityWindow(name="recent", max_age_hours=24, min_engagement=200, multiplier=1.2),
)

# Strongest rule first
CROSS_PLATFORM_RULES = (
    CrossPlatformRule(min_platforms=3, multiplier=2.0),
    CrossPlatformRule(min_platforms=2, multiplier=1.5),
)

KEYWORD_BOOSTS = MappingProxyType({
    # Breaking news indicators
    "breaking": 1.3,
    "just announced": 1.3,
    "released": 1.2,
    "launched": 1.2,
    # Model releases
    "gpt-5": 1.5,
    "gpt-4": 1.2,
    "claude": 1.3,
    "gemini 2": 1.3,
    "llama 4": 1.3,
    # Hot topics
    "agi": 1.3,
    "open source": 1.2,
    "free": 1.1,
    "benchmark": 1.2,
    "beats": 1.2,
    "outperforms": 1.2,
})

# Vendor / model names used for cross-platform confirmation
CROSS_PLATFORM_KEY_TERMS = (
    "gpt-5", "gpt-4", "gpt-4o", "claude", "gemini", "llama", "mistral",
    "openai", "anthropic", "google", "meta", "cursor", "copilot", "chatgpt",
    "deepmind", "hugging face", "stability ai", "midjourney",
)


@dataclass(frozen=True)
class RankingConfig:
    """
    Process-wide, read-only ranking tables.

    Attributes:
        tiers: Ordered tiers; the first matching tier wins
        default_tier_multiplier: Used when no tier matches
        trusted_authors: Global handle -> boost table
        personal_author_boost: Boost for handles in the caller's own list
        velocity_windows: Checked in order; the first satisfied window wins
        cross_platform_rules: Checked in order; the first satisfied rule wins
        keyword_boosts: keyword -> multiplier; the maximum match applies
        topic_boost: Applied when the title mentions a caller topic
        key_terms: Vocabulary scanned for cross-platform mentions
    """

    tiers: tuple[SourceTier, ...] = SOURCE_TIERS
    default_tier_multiplier: float = 1.0
    trusted_authors: Mapping[str, float] = field(default_factory=lambda: TRUSTED_AUTHORS)
    personal_author_boost: float = 2.0
    velocity_windows: tuple[VelocityWindow, ...] = VELOCITY_WINDOWS
    cross_platform_rules: tuple[CrossPlatformRule, ...] = CROSS_PLATFORM_RULES
    keyword_boosts: Mapping[str, float] = field(default_factory=lambda: KEYWORD_BOOSTS)
    topic_boost: float = 1.5
    key_terms: tuple[str, ...] = CROSS_PLATFORM_KEY_TERMS


DEFAULT_RANKING_CONFIG = RankingConfig()
