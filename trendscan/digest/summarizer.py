"""
Summarization client.

Sends the formatted digest to the LLM exactly once per scan (under the retry
policy) and parses the response into TrendAnalysis objects.

The response is located with three strategies, in order:
1. The whole body is JSON
2. A {... "trends" ...} object embedded in prose
3. JSON inside a fenced code block
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable

from pydantic import ValidationError

from trendscan.core.observability import log_pipeline_event
from trendscan.core.run_context import ScanContext
from trendscan.digest.dto import ScanOptions, TrendAnalysis
from trendscan.digest.llm_client import LLMClient, StructuredOutputError
from trendscan.digest.notifier import Notifier
from trendscan.digest.prompts import build_prompt
from trendscan.digest.retry import DEFAULT_RETRY_POLICY, RetryMachine, RetryPolicy

logger = logging.getLogger(__name__)

OPERATION_NAME = "analyzeTrends"

_EMBEDDED_OBJECT = re.compile(r"\{[\s\S]*\"trends\"[\s\S]*\}")
_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def _load_envelope(text: str) -> dict[str, Any] | None:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    if isinstance(data, dict) and isinstance(data.get("trends"), list):
        return data
    return None


def extract_trends_json(text: str) -> dict[str, Any] | None:
    """
    Locate the {"trends": [...]} envelope in raw model output.

    Returns:
        The decoded envelope, or None if no strategy finds one.
    """
    text = text.strip()

    data = _load_envelope(text)
    if data is not None:
        return data

    match = _EMBEDDED_OBJECT.search(text)
    if match:
        data = _load_envelope(match.group(0))
        if data is not None:
            return data

    match = _FENCED_BLOCK.search(text)
    if match:
        data = _load_envelope(match.group(1).strip())
        if data is not None:
            return data

    return None


def _error_summary(e: ValidationError, prefix: str) -> str:
    return "; ".join(
        f"{'.'.join([prefix, *(str(loc) for loc in err['loc'])])}: {err['msg']}"
        for err in e.errors()
    )


def parse_trends(raw_text: str) -> list[TrendAnalysis]:
    """
    Parse raw LLM output into validated trend analyses.

    Each trend is validated on its own; invalid ones are logged and dropped
    so their valid siblings still reach the store.

    Raises:
        StructuredOutputError: If no JSON envelope is found, or the envelope
            lists trends and none of them validates.
    """
    envelope = extract_trends_json(raw_text)
    if envelope is None:
        raise StructuredOutputError(
            f"Could not parse JSON from LLM response. Raw text: {raw_text[:200]}..."
        )

    trends = []
    errors = []
    for index, item in enumerate(envelope["trends"]):
        try:
            trends.append(TrendAnalysis.model_validate(item))
        except ValidationError as e:
            summary = _error_summary(e, f"trends.{index}")
            errors.append(summary)
            logger.warning("Dropping invalid trend", extra={"index": index, "error_summary": summary})

    if errors and not trends:
        raise StructuredOutputError(f"Schema validation failed: {'; '.join(errors)}")

    return trends


class TrendSummarizer:
    """
    Turns the formatted candidate digest into structured trends.

    Usage:
        summarizer = TrendSummarizer(LLMClient(), notifier=EmailAlertNotifier())
        trends = summarizer.analyze(formatted, ScanOptions(), ctx)
    """

    def __init__(
        self,
        llm_client: LLMClient | None = None,
        notifier: Notifier | None = None,
        retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        waiter: Callable[[float], None] | None = None,
    ):
        self.llm_client = llm_client or LLMClient()
        self.notifier = notifier
        self.retry_policy = retry_policy
        self.waiter = waiter

    def analyze(
        self,
        formatted_data: str,
        options: ScanOptions | None = None,
        ctx: ScanContext | None = None,
    ) -> list[TrendAnalysis]:
        """
        Run the single summarization request for a scan.

        Raises:
            LLMCallError: Terminal provider failure (after retries and alert)
            StructuredOutputError: Response could not be parsed
            ScanDeadlineExceeded: Deadline hit while waiting between attempts
        """
        options = options or ScanOptions()
        ctx = (ctx or ScanContext()).with_step("summarize")
        prompt = build_prompt(formatted_data, options.content_style, options.topics)

        log_pipeline_event(
            ctx, "summarize", "start",
            extra={"content_style": str(options.content_style), "prompt_chars": len(prompt)},
        )

        machine = RetryMachine(
            OPERATION_NAME,
            policy=self.retry_policy,
            notifier=self.notifier,
            ctx=ctx,
            waiter=self.waiter,
        )
        try:
            response = machine.run(
                lambda attempt: self.llm_client.call(operation=OPERATION_NAME, prompt=prompt, ctx=ctx)
            )
            trends = parse_trends(response.raw_text)
        except Exception as e:
            log_pipeline_event(
                ctx, "summarize", "failure",
                extra={"attempts": machine.attempts},
                error_summary=f"{e.__class__.__name__}: {str(e)[:200]}",
            )
            raise

        log_pipeline_event(
            ctx, "summarize", "success",
            extra={"attempts": machine.attempts, "trend_count": len(trends)},
        )
        return trends
