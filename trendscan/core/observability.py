"""
Observability utilities for trend scans.

Every pipeline stage logs at least a start and an end event carrying the
run_id, trigger_source, stage name and status.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Mapping

from .run_context import ScanContext

logger = logging.getLogger("trendscan.pipeline")

Status = Literal["start", "success", "partial", "skipped", "failure"]


def log_pipeline_event(
    ctx: ScanContext,
    stage: str,
    status: Status,
    extra: Mapping[str, Any] | None = None,
    error_summary: str | None = None,
) -> None:
    """
    Log a structured pipeline event.

    The log payload always includes:
    - run_id, trigger_source (from ScanContext)
    - stage, status (from arguments)
    - error_summary (if provided)
    - Any additional fields from extra

    Args:
        ctx: ScanContext for this scan
        stage: Pipeline stage (e.g., "aggregate", "summarize")
        status: Current status
        extra: Optional additional fields to include in the log
        error_summary: Short error description for failure status
    """
    payload: dict[str, Any] = {
        "run_id": str(ctx.run_id),
        "trigger_source": ctx.trigger_source,
        "stage": stage,
        "status": status,
    }

    if ctx.step:
        payload["step"] = ctx.step

    if error_summary:
        payload["error_summary"] = error_summary

    if extra:
        payload.update(extra)

    if status == "failure":
        logger.warning("pipeline_event", extra=payload)
    else:
        logger.info("pipeline_event", extra=payload)
