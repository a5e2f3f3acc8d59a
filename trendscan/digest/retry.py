"""
Retry state machine for LLM calls.

    ATTEMPTING --success--> SUCCEEDED
    ATTEMPTING --retryable error, budget left--> WAITING --> ATTEMPTING
    ATTEMPTING --other error, or budget spent--> FAILED

The machine also starts in WAITING: a fixed pre-request delay precedes the
very first attempt. Every wait goes through the ScanContext, so a scan
deadline or cancellation aborts a pending backoff with ScanDeadlineExceeded.

Only rate-limit and overload errors are retryable. When the final allowed
attempt fails, the notifier is alerted before the error is re-raised.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, TypeVar

from trendscan.core.run_context import ScanContext
from trendscan.digest.llm_client import LLMCallError

if TYPE_CHECKING:
    from trendscan.digest.notifier import Notifier

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryState(str, enum.Enum):
    ATTEMPTING = "attempting"
    WAITING = "waiting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry budget and delays (seconds).

    Attributes:
        max_retries: Retries after the first attempt
        pre_request_delay: Wait before attempt 1
        initial_delay: Wait before retry 1
        multiplier: Backoff growth per retry
        max_delay: Backoff ceiling
    """

    max_retries: int = 3
    pre_request_delay: float = 0.5
    initial_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 30.0

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def backoff(self, retry_number: int) -> float:
        """Delay before retry `retry_number` (1-based)."""
        return min(self.initial_delay * self.multiplier ** (retry_number - 1), self.max_delay)


DEFAULT_RETRY_POLICY = RetryPolicy()


def is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, LLMCallError) and exc.retryable


class RetryMachine:
    """
    Drives one logical operation through its attempts.

    A machine is single-use: create one per operation.

    Usage:
        machine = RetryMachine("analyze_trends", notifier=notifier, ctx=ctx)
        response = machine.run(lambda attempt: client.call(...))
    """

    def __init__(
        self,
        operation: str,
        policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        notifier: "Notifier | None" = None,
        ctx: ScanContext | None = None,
        waiter: Callable[[float], None] | None = None,
    ):
        """
        Args:
            operation: Name used in logs and alerts
            policy: Retry budget and delays
            notifier: Alert sink for terminal failures
            ctx: Scan context (deadline and cancellation)
            waiter: Override for the wait primitive (defaults to ctx.wait)
        """
        self.operation = operation
        self.policy = policy
        self.notifier = notifier
        self.ctx = ctx or ScanContext()
        self._waiter = waiter or self.ctx.wait

        self.state = RetryState.WAITING
        self.attempts = 0
        self.delays: list[float] = []
        self.last_error: Exception | None = None

    def run(self, attempt_fn: Callable[[int], T]) -> T:
        """
        Run `attempt_fn(attempt_number)` until it succeeds or the machine fails.

        Raises:
            The last error from attempt_fn, or ScanDeadlineExceeded if a wait
            is interrupted.
        """
        if self.attempts:
            raise RuntimeError(f"RetryMachine for {self.operation} has already run")

        self._wait(self.policy.pre_request_delay)

        while True:
            self.state = RetryState.ATTEMPTING
            self.attempts += 1
            try:
                result = attempt_fn(self.attempts)
            except Exception as e:
                self.last_error = e
                final = self.attempts >= self.policy.max_attempts
                if is_retryable(e) and not final:
                    delay = self.policy.backoff(self.attempts)
                    logger.warning(
                        f"[{self.operation}] {e.__class__.__name__} on attempt "
                        f"{self.attempts}/{self.policy.max_attempts}; retrying in {delay:.1f}s",
                        extra={"run_id": str(self.ctx.run_id), "operation": self.operation},
                    )
                    self._wait(delay)
                    continue

                self.state = RetryState.FAILED
                logger.error(
                    f"[{self.operation}] Failed after {self.attempts} attempts: {e}",
                    extra={"run_id": str(self.ctx.run_id), "operation": self.operation},
                )
                if final:
                    self._alert(e)
                raise

            self.state = RetryState.SUCCEEDED
            return result

    def _wait(self, seconds: float) -> None:
        self.state = RetryState.WAITING
        if seconds <= 0:
            return
        self.delays.append(seconds)
        try:
            self._waiter(seconds)
        except Exception:
            self.state = RetryState.FAILED
            raise

    def _alert(self, error: Exception) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.alert(
                f"{self.operation} Failed",
                f"The {self.operation} operation failed after {self.attempts} attempts.",
                str(error),
            )
        except Exception as alert_error:
            # Alerting must never mask the failure being reported
            logger.error(
                f"Failed to send error alert: {alert_error}",
                extra={"run_id": str(self.ctx.run_id), "operation": self.operation},
            )
