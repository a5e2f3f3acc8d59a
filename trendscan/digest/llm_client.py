"""
LLM Client Module.

Provides the single client used for trend summarization:
- Config-driven model selection (via environment variables)
- Stable call interface with ScanContext observability
- Provider error classification (rate limit / overload / other)
- LLM_DISABLED mode for tests and dry runs

All LLM calls go through this client; no direct provider SDK calls elsewhere.
No provider-specific exception types escape this module.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Literal

import openai

from trendscan.core.run_context import ScanContext

logger = logging.getLogger("trendscan.llm")

Status = Literal["success", "failure", "disabled"]

DISABLED_STUB_TEXT = '{"trends": []}'


# =============================================================================
# EXCEPTIONS
# =============================================================================


class LLMCallError(Exception):
    """
    Exception raised when an LLM call fails.

    Wraps the underlying provider error with additional context.
    """

    retryable = False

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class RateLimitError(LLMCallError):
    """Provider rejected the call with HTTP 429 or an equivalent message."""

    retryable = True


class OverloadedError(LLMCallError):
    """Provider is overloaded (HTTP 529 or an equivalent message)."""

    retryable = True


class StructuredOutputError(Exception):
    """
    Exception raised when the model response cannot be parsed.

    Raised when:
    - No JSON object can be located in the raw text
    - JSON doesn't validate against the trend schema
    """

    pass


def classify_provider_error(exc: Exception) -> type[LLMCallError]:
    """
    Map a provider exception onto the retry taxonomy.

    Uses the HTTP status when the exception carries one, then falls back to
    the message text.
    """
    status = getattr(exc, "status_code", None) or getattr(exc, "status", None)
    if status == 429:
        return RateLimitError
    if status == 529:
        return OverloadedError

    message = str(exc).lower()
    if "429" in message or "rate limit" in message or "rate_limit" in message:
        return RateLimitError
    if "529" in message or "overloaded" in message:
        return OverloadedError
    return LLMCallError


# =============================================================================
# CONFIGURATION
# =============================================================================


@dataclass(frozen=True)
class LLMConfig:
    """
    LLM client configuration.

    Environment Variables:
    - OPENAI_API_KEY: API key (required unless LLM_DISABLED)
    - LLM_DISABLED: Set to "true" or "1" to disable real LLM calls
    - TRENDSCAN_LLM_MODEL: Model name (default: gpt-4.1-mini)
    - TRENDSCAN_LLM_TIMEOUT: Request timeout in seconds (default: 60)
    - TRENDSCAN_LLM_MAX_TOKENS: Max output tokens (default: 4096)
    - TRENDSCAN_LLM_TEMPERATURE: Sampling temperature (default: 0.2)
    """

    model_name: str = "gpt-4.1-mini"
    api_key: str | None = None
    llm_disabled: bool = False
    timeout: float = 60.0
    max_tokens: int = 4096
    temperature: float = 0.2


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def load_config_from_env() -> LLMConfig:
    """
    Load LLM configuration from environment variables.

    Returns sensible defaults if environment variables are not set.
    """
    disabled_str = os.getenv("LLM_DISABLED", "").lower().strip()
    llm_disabled = disabled_str in ("true", "1", "yes", "on")

    return LLMConfig(
        model_name=os.getenv("TRENDSCAN_LLM_MODEL", "gpt-4.1-mini").strip(),
        api_key=os.getenv("OPENAI_API_KEY") or None,
        llm_disabled=llm_disabled,
        timeout=_float_env("TRENDSCAN_LLM_TIMEOUT", 60.0),
        max_tokens=_int_env("TRENDSCAN_LLM_MAX_TOKENS", 4096),
        temperature=_float_env("TRENDSCAN_LLM_TEMPERATURE", 0.2),
    )


# =============================================================================
# RESPONSE MODEL
# =============================================================================


@dataclass
class LLMResponse:
    """Raw text output along with usage and timing metadata."""

    raw_text: str
    model: str
    usage_tokens_in: int
    usage_tokens_out: int
    latency_ms: int
    status: Status = "success"


# =============================================================================
# LLM CLIENT
# =============================================================================


class LLMClient:
    """
    Single LLM client for all trendscan LLM usage.

    Usage:
        client = LLMClient()
        response = client.call(
            operation="analyze_trends",
            prompt="Analyze these trends...",
            ctx=ctx,
        )
    """

    def __init__(self, config: LLMConfig | None = None):
        """
        Initialize the LLM client.

        Args:
            config: Optional LLMConfig. If None, loads from environment.
        """
        self.config = config or load_config_from_env()

    def call(
        self,
        *,
        operation: str,
        prompt: str,
        system_prompt: str | None = None,
        max_output_tokens: int | None = None,
        ctx: ScanContext | None = None,
    ) -> LLMResponse:
        """
        Make one LLM call (a single attempt; retries are the caller's job).

        Args:
            operation: Operation name (for observability)
            prompt: The user prompt
            system_prompt: Optional system prompt
            max_output_tokens: Override max output tokens
            ctx: Scan context; its deadline clips the request timeout

        Returns:
            LLMResponse with raw_text and metadata

        Raises:
            RateLimitError: Provider rate limited the call
            OverloadedError: Provider is overloaded
            LLMCallError: Any other provider failure
        """
        ctx = ctx or ScanContext()
        model = self.config.model_name
        start_time = time.perf_counter()

        if self.config.llm_disabled:
            response = LLMResponse(
                raw_text=DISABLED_STUB_TEXT,
                model=model,
                usage_tokens_in=len(prompt.split()),  # Rough estimate
                usage_tokens_out=0,
                latency_ms=int((time.perf_counter() - start_time) * 1000),
                status="disabled",
            )
            self._log_call(
                ctx=ctx,
                operation=operation,
                model=model,
                latency_ms=response.latency_ms,
                tokens_in=response.usage_tokens_in,
                tokens_out=0,
                status="disabled",
            )
            return response

        try:
            result = self._call_provider(
                model=model,
                prompt=prompt,
                system_prompt=system_prompt,
                max_tokens=max_output_tokens or self.config.max_tokens,
                temperature=self.config.temperature,
                timeout=ctx.clip_timeout(self.config.timeout),
            )
        except Exception as exc:
            latency_ms = int((time.perf_counter() - start_time) * 1000)
            error_cls = classify_provider_error(exc)
            self._log_call(
                ctx=ctx,
                operation=operation,
                model=model,
                latency_ms=latency_ms,
                tokens_in=0,
                tokens_out=0,
                status="failure",
                error_summary=f"{exc.__class__.__name__}: {str(exc)[:100]}",
            )
            raise error_cls(f"LLM call failed: {exc}", original_error=exc) from exc

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        response = LLMResponse(
            raw_text=result["content"],
            model=model,
            usage_tokens_in=result["usage"]["prompt_tokens"],
            usage_tokens_out=result["usage"]["completion_tokens"],
            latency_ms=latency_ms,
        )
        self._log_call(
            ctx=ctx,
            operation=operation,
            model=model,
            latency_ms=latency_ms,
            tokens_in=response.usage_tokens_in,
            tokens_out=response.usage_tokens_out,
            status="success",
        )
        return response

    def _call_provider(
        self,
        *,
        model: str,
        prompt: str,
        system_prompt: str | None,
        max_tokens: int,
        temperature: float,
        timeout: float,
    ) -> dict[str, Any]:
        """
        Internal method to call the LLM provider (OpenAI chat completions).

        Tests should patch this method to avoid real HTTP calls.

        Returns:
            Dict with 'content' and 'usage' keys

        Raises:
            Exception: Any provider error (classified and wrapped by caller)
        """
        if not self.config.api_key:
            raise LLMCallError(
                "OPENAI_API_KEY not set. Set the environment variable or use LLM_DISABLED=true for testing."
            )

        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        # The retry policy lives in RetryMachine; disable the SDK's own retries
        client = openai.OpenAI(api_key=self.config.api_key, timeout=timeout, max_retries=0)
        response = client.chat.completions.create(
            model=model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )

        content = response.choices[0].message.content or ""
        usage = {
            "prompt_tokens": response.usage.prompt_tokens if response.usage else 0,
            "completion_tokens": response.usage.completion_tokens if response.usage else 0,
        }
        return {"content": content, "usage": usage}

    def _log_call(
        self,
        *,
        ctx: ScanContext,
        operation: str,
        model: str,
        latency_ms: int,
        tokens_in: int,
        tokens_out: int,
        status: Status,
        error_summary: str | None = None,
    ) -> None:
        """
        Log an LLM call for observability.

        Fields: run_id, trigger_source, operation, model, latency_ms,
        tokens_in, tokens_out, status, error_summary (on failure).
        """
        log_data = {
            "run_id": str(ctx.run_id),
            "trigger_source": ctx.trigger_source,
            "operation": operation,
            "model": model,
            "latency_ms": latency_ms,
            "tokens_in": tokens_in,
            "tokens_out": tokens_out,
            "status": status,
        }

        if error_summary:
            log_data["error_summary"] = error_summary

        if status == "failure":
            logger.error("LLM call failed", extra=log_data)
        else:
            logger.info("LLM call completed", extra=log_data)
