"""
Run Context for trend scans.

ScanContext is an in-memory context object. It is NOT persisted.

It carries:
- run_id: Unique identifier for a single scan
- trigger_source: What initiated the scan (cron, manual, eval)
- deadline: Optional monotonic-clock instant after which the scan must stop
- cancel_event: Shared event used to interrupt waits early
- step: Optional current pipeline stage

Every adapter request timeout and every retry wait is clipped to the
remaining deadline.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Literal
from uuid import UUID, uuid4

TriggerSource = Literal["cron", "manual", "eval"]


class ScanDeadlineExceeded(Exception):
    """Raised when the caller-supplied scan deadline has passed."""

    def __init__(self, message: str = "Scan deadline exceeded"):
        super().__init__(message)


@dataclass(frozen=True)
class ScanContext:
    """
    In-memory context for one scan.

    Attributes:
        trigger_source: What initiated the scan
        run_id: Unique UUID for this scan (auto-generated if not provided)
        deadline: time.monotonic() value after which the scan is abandoned
        cancel_event: Setting this aborts any pending wait
        step: Optional current pipeline stage
    """

    trigger_source: TriggerSource = "manual"
    run_id: UUID = field(default_factory=uuid4)
    deadline: float | None = None
    cancel_event: threading.Event = field(default_factory=threading.Event, compare=False)
    step: str | None = None

    def with_step(self, step: str) -> "ScanContext":
        """Return a copy of this context with the step set."""
        return ScanContext(
            trigger_source=self.trigger_source,
            run_id=self.run_id,
            deadline=self.deadline,
            cancel_event=self.cancel_event,
            step=step,
        )

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when unbounded."""
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    def expired(self) -> bool:
        """True once the deadline has passed or the scan was cancelled."""
        if self.cancel_event.is_set():
            return True
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def clip_timeout(self, timeout: float) -> float:
        """Clip a per-request timeout to the remaining deadline."""
        remaining = self.remaining()
        if remaining is None:
            return timeout
        # requests rejects a zero timeout
        return max(min(timeout, remaining), 0.001)

    def wait(self, seconds: float) -> None:
        """
        Sleep for `seconds`, waking early on cancellation.

        Raises:
            ScanDeadlineExceeded: If the deadline passes or the scan is
                cancelled before the wait completes.
        """
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            self.cancel_event.wait(remaining)
            raise ScanDeadlineExceeded(
                f"Scan deadline reached while waiting {seconds:.2f}s"
            )
        if self.cancel_event.wait(seconds):
            raise ScanDeadlineExceeded("Scan cancelled while waiting")


def create_scan_context(
    trigger_source: TriggerSource = "manual",
    deadline_seconds: float | None = None,
    run_id: UUID | None = None,
) -> ScanContext:
    """
    Factory function to create a ScanContext.

    Args:
        trigger_source: What initiated the scan
        deadline_seconds: Seconds from now the whole scan may take (None = unbounded)
        run_id: Optional existing run_id (auto-generated if None)

    Returns:
        New ScanContext instance
    """
    deadline = None
    if deadline_seconds is not None:
        deadline = time.monotonic() + deadline_seconds
    return ScanContext(
        trigger_source=trigger_source,
        run_id=run_id or uuid4(),
        deadline=deadline,
    )
