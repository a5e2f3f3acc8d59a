"""
Source aggregation job.

Runs every configured adapter concurrently, joins on all of them, merges the
results and tags cross-platform mentions.

An adapter that is still running when `adapter_timeout` elapses is treated as
a failed source: its contribution is empty and the batch proceeds without it.
Its worker thread is abandoned, not killed; every request it makes is itself
bounded by the adapter's request timeout.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Sequence

from trendscan.core.observability import log_pipeline_event
from trendscan.core.run_context import ScanContext
from trendscan.ingestion.capture.base import BaseSourceAdapter, RawCandidate
from trendscan.ingestion.ranking_config import CROSS_PLATFORM_KEY_TERMS

logger = logging.getLogger(__name__)

DEFAULT_ADAPTER_TIMEOUT = 25.0


@dataclass
class AggregateResult:
    """
    Merged output of one fan-out.

    Attributes:
        candidates: All candidates, in adapter registration order
        counts: adapter name -> number of candidates contributed
        errors: adapter name -> short failure description
    """

    candidates: list[RawCandidate] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.candidates)


def aggregate_sources(
    adapters: Sequence[BaseSourceAdapter],
    ctx: ScanContext,
    adapter_timeout: float = DEFAULT_ADAPTER_TIMEOUT,
) -> AggregateResult:
    """
    Fetch from all adapters concurrently and merge.

    Never raises for an adapter failure. The join is bounded by
    `adapter_timeout`, further clipped to the scan deadline.

    Args:
        adapters: Adapters to run
        ctx: Scan context
        adapter_timeout: Seconds to wait for the slowest adapter

    Returns:
        AggregateResult with per-adapter counts and failures
    """
    ctx = ctx.with_step("aggregate")
    log_pipeline_event(ctx, "aggregate", "start", extra={"adapter_count": len(adapters)})
    start_time = time.perf_counter()

    result = AggregateResult()
    if not adapters:
        log_pipeline_event(ctx, "aggregate", "skipped", extra={"reason": "no_adapters"})
        return result

    executor = ThreadPoolExecutor(max_workers=len(adapters), thread_name_prefix="trendscan-source")
    try:
        futures = [executor.submit(adapter.fetch, ctx) for adapter in adapters]
        wait(futures, timeout=ctx.clip_timeout(adapter_timeout))

        # Merge in registration order, not completion order
        for adapter, future in zip(adapters, futures):
            if not future.done():
                future.cancel()
                result.counts[adapter.name] = 0
                result.errors[adapter.name] = "timeout"
                logger.warning(
                    "Source adapter timed out",
                    extra={"run_id": str(ctx.run_id), "source": adapter.name, "timeout": adapter_timeout},
                )
                continue
            try:
                items = future.result()
            except Exception as e:
                result.counts[adapter.name] = 0
                result.errors[adapter.name] = f"{e.__class__.__name__}: {str(e)[:200]}"
                logger.warning(
                    f"Source adapter future failed: {e}",
                    extra={"run_id": str(ctx.run_id), "source": adapter.name},
                )
                continue
            result.counts[adapter.name] = len(items)
            result.candidates.extend(items)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    elapsed_ms = int((time.perf_counter() - start_time) * 1000)
    log_pipeline_event(
        ctx,
        "aggregate",
        "partial" if result.errors else "success",
        extra={
            "total": result.total,
            "counts": dict(result.counts),
            "failed_sources": sorted(result.errors),
            "elapsed_ms": elapsed_ms,
        },
    )
    return result


def tag_cross_platform(
    candidates: Sequence[RawCandidate],
    key_terms: Sequence[str] = CROSS_PLATFORM_KEY_TERMS,
) -> list[RawCandidate]:
    """
    Tag candidates whose key term is mentioned on at least two sources.

    For each key term found in titles from two or more distinct sources,
    every candidate mentioning that term is tagged with the full set of
    sources. When a title matches several such terms, the largest source set
    is kept.

    Returns:
        New list of candidates; the inputs are not modified.
    """
    term_sources: dict[str, list[str]] = {}
    lowered = [c.title.lower() for c in candidates]

    for term in key_terms:
        needle = term.lower()
        sources: list[str] = []
        for candidate, title in zip(candidates, lowered):
            if needle in title and candidate.source not in sources:
                sources.append(candidate.source)
        if len(sources) > 1:
            term_sources[needle] = sources

    tagged = []
    for candidate, title in zip(candidates, lowered):
        platforms = candidate.platforms
        for needle, sources in term_sources.items():
            if needle in title and len(sources) > len(platforms):
                platforms = tuple(sources)
        if platforms != candidate.platforms:
            candidate = dataclasses.replace(candidate, platforms=platforms)
        tagged.append(candidate)
    return tagged
