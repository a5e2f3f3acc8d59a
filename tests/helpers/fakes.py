"""
Test doubles shared across trendscan tests.

No real network calls: adapters receive a FakeSession.
"""

from datetime import datetime, timezone

import requests

from trendscan.core.enums import TrendCategory
from trendscan.digest.dto import TrendAnalysis
from trendscan.ingestion.capture.base import BaseSourceAdapter


FIXED_NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload=None, status_code=200, content=b""):
        self._payload = payload
        self.status_code = status_code
        self.content = content

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """
    Routes GET requests by URL.

    Routes are keyed by URL, or by (URL, q) for search requests. A route value
    may be a FakeResponse, an exception instance (raised), or a plain payload
    (returned as JSON). Unknown URLs answer 404.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        key = url
        if params and (url, params.get("q")) in self.routes:
            key = (url, params["q"])
        route = self.routes.get(key)
        if route is None:
            return FakeResponse(status_code=404)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, FakeResponse):
            return route
        return FakeResponse(payload=route)


class StaticAdapter(BaseSourceAdapter):
    """Adapter returning a fixed candidate list (or raising)."""

    def __init__(self, name, items=(), error=None, **kwargs):
        super().__init__(**kwargs)
        self.name = name
        self.items = list(items)
        self.error = error

    def _fetch(self, ctx):
        if self.error is not None:
            raise self.error
        return list(self.items)


def make_trend(title="Open-weight model tops coding benchmark", engagement_score=87, **overrides):
    """Build a validated TrendAnalysis with realistic defaults."""
    fields = {
        "title": title,
        "category": TrendCategory.MODELS,
        "summary": "A new open-weight model beat closed models on a coding benchmark.",
        "why_it_matters": "Free models are catching up.",
        "content_angle": "The free model that beat the paid ones",
        "script": "Ok so a free model just beat the paid ones...",
        "sources": [{"url": "https://example.com/a", "platform": "HackerNews", "title": "HN thread"}],
        "engagement_score": engagement_score,
    }
    fields.update(overrides)
    return TrendAnalysis.model_validate(fields)
