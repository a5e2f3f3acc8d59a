"""
Digest formatting.

Renders the ranked candidate set as the text block handed to the LLM: a
top-10 ranking summary followed by every candidate grouped by source family,
each with its score breakdown.
"""

from __future__ import annotations

from typing import Sequence

from trendscan.ingestion.jobs.score import ScoredCandidate

SUMMARY_SIZE = 10
SUMMARY_TITLE_CHARS = 80

_NEWS_MARKERS = ("Blog", "TechCrunch", "Verge", "Decoder")


def source_group(source: str) -> str:
    """Reddit and news/blog sources collapse into one group each."""
    if "r/" in source:
        return "Reddit"
    if any(marker in source for marker in _NEWS_MARKERS):
        return "News & Blogs"
    return source


def _multiplier(value: float) -> str:
    return f"{value:g}x"


def format_candidate(scored: ScoredCandidate) -> str:
    b = scored.breakdown
    c = scored.candidate
    text = (
        f"[{c.source}] {c.title}\n"
        f"  Score: {scored.final_score} (base: {b.base_engagement:.0f}, "
        f"tier: {_multiplier(b.source_tier)}, "
        f"author: {_multiplier(b.author_boost)}, "
        f"velocity: {_multiplier(b.velocity)}, "
        f"cross-platform: {_multiplier(b.cross_platform)}, "
        f"keywords: {_multiplier(b.keyword_boost)})"
    )
    if c.author:
        text += f"\n  Author: @{c.author.lstrip('@')}"
    if c.url:
        text += f"\n  URL: {c.url}"
    return text


def format_for_summary(ranked: Sequence[ScoredCandidate]) -> str:
    """
    Format ranked candidates for the summarization prompt.

    Groups keep first-appearance order, and candidates keep ranked order
    inside their group.
    """
    lines = ["=== TOP RANKED TRENDS (weighted scores) ==="]
    for i, scored in enumerate(ranked[:SUMMARY_SIZE], start=1):
        title = scored.title
        if len(title) > SUMMARY_TITLE_CHARS:
            title = title[:SUMMARY_TITLE_CHARS] + "..."
        lines.append(f"{i}. [Score: {scored.final_score}] {title}")
    lines.extend(["", "Full data by source:", ""])

    groups: dict[str, list[ScoredCandidate]] = {}
    for scored in ranked:
        groups.setdefault(source_group(scored.source), []).append(scored)

    for group, members in groups.items():
        lines.append(f"=== {group.upper()} ===")
        lines.extend(format_candidate(scored) for scored in members)
        lines.append("")

    return "\n".join(lines)
