"""
Base adapter interface for source adapters.

Each source adapter fetches raw candidates from one public source and applies
its own relevance pre-filter. Adapters NEVER raise to the aggregator: any
network, parse, validation or timeout error is logged and turned into an
empty result.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime

import requests
from pydantic import ValidationError

from trendscan.core.run_context import ScanContext

logger = logging.getLogger(__name__)

# Public APIs reject anonymous clients without a User-Agent
USER_AGENT = "AI-Trend-Digest/1.0"

DEFAULT_REQUEST_TIMEOUT = 8.0


@dataclass
class RawCandidate:
    """
    Raw item surfaced by a source adapter.

    `platforms` is empty until the aggregator tags cross-platform mentions.
    """

    title: str
    source: str
    engagement: float
    author: str | None = None
    comments: float | None = None
    url: str | None = None
    timestamp: datetime | None = None
    platforms: tuple[str, ...] = field(default_factory=tuple)


class SourceFetchError(Exception):
    """Exception raised inside an adapter when a source cannot be read."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class BaseSourceAdapter(ABC):
    """
    Abstract base class for source adapters.

    Subclasses implement `_fetch()`; callers use `fetch()`, which isolates
    failures.
    """

    name: str = "base"

    def __init__(
        self,
        session: requests.Session | None = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        """
        Initialize adapter.

        Args:
            session: Optional shared HTTP session (one is created if None)
            request_timeout: Per-request timeout in seconds
        """
        self.session = session or requests.Session()
        self.request_timeout = request_timeout

    def fetch(self, ctx: ScanContext | None = None) -> list[RawCandidate]:
        """
        Fetch candidates from this source.

        Returns:
            List of RawCandidate (empty on any failure).
        """
        ctx = ctx or ScanContext()
        try:
            items = self._fetch(ctx)
        except SourceFetchError as e:
            logger.warning(
                "Source fetch failed",
                extra={"source": self.name, "run_id": str(ctx.run_id), "error": str(e)},
            )
            return []
        except (requests.RequestException, ValidationError, ValueError) as e:
            logger.warning(
                "Source fetch failed",
                extra={
                    "source": self.name,
                    "run_id": str(ctx.run_id),
                    "error": f"{e.__class__.__name__}: {str(e)[:200]}",
                },
            )
            return []

        logger.info(
            "Source fetch completed",
            extra={"source": self.name, "run_id": str(ctx.run_id), "item_count": len(items)},
        )
        return items

    @abstractmethod
    def _fetch(self, ctx: ScanContext) -> list[RawCandidate]:
        """
        Fetch and pre-filter candidates.

        Raises:
            SourceFetchError, requests.RequestException, ValidationError:
                Converted to an empty result by `fetch()`.
        """
        pass

    def _get_json(self, url: str, ctx: ScanContext, **params) -> object:
        """GET a JSON document with the adapter's headers and clipped timeout."""
        if ctx.expired():
            raise SourceFetchError("Scan deadline reached before request")
        response = self.session.get(
            url,
            params=params or None,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
            timeout=ctx.clip_timeout(self.request_timeout),
        )
        response.raise_for_status()
        return response.json()
