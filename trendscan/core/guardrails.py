"""
Startup guardrails.

Fail fast, before any source is fetched, when the process is missing the
credentials it needs to finish a scan. No retry: a misconfigured process
cannot recover by itself.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from trendscan.digest.llm_client import LLMConfig

logger = logging.getLogger("trendscan.core.guardrails")


class ConfigurationError(Exception):
    """
    Raised at process start when required credentials or endpoints are absent.

    This is an operator error: fix the environment and rerun.
    """

    pass


def require_llm_configured(config: "LLMConfig") -> None:
    """
    Ensure the summarization step can run.

    Args:
        config: LLM configuration to validate

    Raises:
        ConfigurationError: If no API key is set and LLM_DISABLED is off,
            or if no model name is configured.
    """
    if config.llm_disabled:
        logger.info("LLM disabled; scans will return stub summaries")
        return

    if not config.api_key:
        raise ConfigurationError(
            "OPENAI_API_KEY not set. Set the environment variable or use "
            "LLM_DISABLED=true for dry runs."
        )

    if not config.model_name:
        raise ConfigurationError("TRENDSCAN_LLM_MODEL is empty")
