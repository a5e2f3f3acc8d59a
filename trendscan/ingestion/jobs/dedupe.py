"""
Near-duplicate filter.

Similarity is token-set Jaccard over titles: lowercase, strip everything
that is not alphanumeric or whitespace, split, and drop tokens of two
characters or fewer.

Candidates must be filtered in ranked order so that, of two near-duplicates
in the same batch, the higher-scored copy survives.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Sequence

from trendscan.ingestion.jobs.score import ScoredCandidate

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.8
MIN_TOKEN_LENGTH = 3

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def tokenize(text: str) -> frozenset[str]:
    cleaned = _NON_ALNUM.sub("", text.lower())
    return frozenset(token for token in cleaned.split() if len(token) >= MIN_TOKEN_LENGTH)


def similarity(a: str, b: str) -> float:
    """
    Jaccard similarity of the qualifying token sets of two titles.

    Returns 0.0 when either side has no qualifying token.
    """
    tokens_a = tokenize(a)
    tokens_b = tokenize(b)
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / len(tokens_a | tokens_b)


def is_duplicate(
    title: str,
    existing_titles: Iterable[str],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> bool:
    """True iff some existing title is strictly more similar than `threshold`."""
    return any(similarity(title, existing) > threshold for existing in existing_titles)


def dedupe_candidates(
    ranked: Sequence[ScoredCandidate],
    seed_titles: Iterable[str] = (),
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> list[ScoredCandidate]:
    """
    Drop near-duplicates from a ranked batch.

    Each candidate is checked against the seed titles (recent history) and
    every title already accepted from this batch; accepted titles are
    appended as they are accepted.

    Args:
        ranked: Candidates in score-descending order
        seed_titles: Titles persisted within the lookback window
        threshold: Similarity above which a title is a duplicate

    Returns:
        Surviving candidates in their input order
    """
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"Similarity threshold must be in [0, 1], got {threshold}")

    accepted_titles = list(seed_titles)
    survivors: list[ScoredCandidate] = []
    dropped = 0

    for scored in ranked:
        if is_duplicate(scored.title, accepted_titles, threshold):
            dropped += 1
            continue
        survivors.append(scored)
        accepted_titles.append(scored.title)

    if dropped:
        logger.debug(
            "Dropped near-duplicate candidates",
            extra={"dropped": dropped, "kept": len(survivors)},
        )
    return survivors
