"""
Pytest configuration for trendscan tests.

Django is configured by pytest-django (DJANGO_SETTINGS_MODULE in
pyproject.toml). HTTP fakes live in tests/helpers/fakes.py.
"""

import logging

import pytest

from trendscan.ingestion.capture.base import RawCandidate
from tests.helpers.fakes import FIXED_NOW


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def make_candidate():
    """Factory for RawCandidate with neutral defaults."""

    def _make(title="Some neutral headline", source="Other", engagement=100, **kwargs):
        return RawCandidate(title=title, source=source, engagement=engagement, **kwargs)

    return _make


@pytest.fixture
def capture_logger():
    """Attach a capturing handler to a named logger."""

    class CaptureHandler(logging.Handler):
        def __init__(self):
            super().__init__()
            self.records: list[logging.LogRecord] = []

        def emit(self, record):
            self.records.append(record)

    attached = []

    def _attach(name):
        handler = CaptureHandler()
        handler.setLevel(logging.DEBUG)
        target = logging.getLogger(name)
        target.addHandler(handler)
        attached.append((target, handler, target.level))
        target.setLevel(logging.DEBUG)
        return handler

    yield _attach

    for target, handler, level in attached:
        target.removeHandler(handler)
        target.setLevel(level)


@pytest.fixture
def valid_trend_payload():
    """One trend in the response contract shape."""
    return {
        "title": "Open-weight model tops coding benchmark",
        "category": "models",
        "summary": "A new open-weight model beat closed models on a coding benchmark.",
        "why_it_matters": "Free models are catching up.",
        "content_angle": "The free model that beat the paid ones",
        "script": "Ok so a free model just beat the paid ones...",
        "sources": [{"url": "https://example.com/a", "platform": "HackerNews", "title": "HN thread"}],
        "engagement_score": 87,
    }
