"""
Trend store collaborators.

The pipeline only needs a read/write contract:
- read titles and records by date range (dedup seed, dashboards)
- replace all records of one calendar date (delete then bulk insert)

DjangoTrendStore wraps the TrendRecord model; InMemoryTrendStore backs dry
runs and tests.

Two concurrent replace_for_date calls for the same date are not safe: both
deletes may run before either insert. Scans are expected to have a single
writer (the scheduled command).
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Protocol, Sequence

from django.db import transaction

from trendscan.core.models import TrendRecord
from trendscan.digest.dto import TrendAnalysis, TrendSourceRef

logger = logging.getLogger(__name__)


class TrendStore(Protocol):
    def recent_titles(self, since: date, before: date | None = None) -> list[str]:
        ...

    def list_by_date_range(self, start: date, end: date) -> list[TrendAnalysis]:
        ...

    def replace_for_date(self, day: date, trends: Sequence[TrendAnalysis]) -> int:
        ...


def _to_record(day: date, trend: TrendAnalysis) -> TrendRecord:
    return TrendRecord(
        title=trend.title,
        category=trend.category,
        summary=trend.summary,
        why_it_matters=trend.why_it_matters,
        content_angle=trend.content_angle,
        script=trend.script,
        sources=[source.model_dump() for source in trend.sources],
        engagement_score=trend.engagement_score,
        date=day,
    )


def _from_record(record: TrendRecord) -> TrendAnalysis:
    return TrendAnalysis(
        title=record.title,
        category=record.category,
        summary=record.summary,
        why_it_matters=record.why_it_matters,
        content_angle=record.content_angle,
        script=record.script,
        sources=[TrendSourceRef.model_validate(s) for s in record.sources or []],
        engagement_score=record.engagement_score,
    )


class DjangoTrendStore:
    """TrendRecord-backed store."""

    def recent_titles(self, since: date, before: date | None = None) -> list[str]:
        """Titles of records dated on or after `since` (and before `before`, if given)."""
        records = TrendRecord.objects.filter(date__gte=since)
        if before is not None:
            records = records.filter(date__lt=before)
        return list(records.values_list("title", flat=True))

    def list_by_date_range(self, start: date, end: date) -> list[TrendAnalysis]:
        """Records with start <= date <= end, newest date first, best score first."""
        records = TrendRecord.objects.filter(date__gte=start, date__lte=end).order_by(
            "-date", "-engagement_score"
        )
        return [_from_record(r) for r in records]

    def replace_for_date(self, day: date, trends: Sequence[TrendAnalysis]) -> int:
        """
        Replace every record of `day` with `trends`.

        Delete and insert share one transaction so readers never observe an
        empty day.

        Returns:
            Number of records inserted
        """
        with transaction.atomic():
            deleted, _ = TrendRecord.objects.filter(date=day).delete()
            created = TrendRecord.objects.bulk_create([_to_record(day, t) for t in trends])

        logger.info(
            "Replaced trends for date",
            extra={"date": day.isoformat(), "deleted": deleted, "inserted": len(created)},
        )
        return len(created)


class InMemoryTrendStore:
    """Dict-backed store with the same contract."""

    def __init__(self):
        self._by_date: dict[date, list[TrendAnalysis]] = defaultdict(list)

    def recent_titles(self, since: date, before: date | None = None) -> list[str]:
        return [
            t.title
            for day, trends in sorted(self._by_date.items())
            if day >= since and (before is None or day < before)
            for t in trends
        ]

    def list_by_date_range(self, start: date, end: date) -> list[TrendAnalysis]:
        result = []
        for day in sorted(self._by_date, reverse=True):
            if start <= day <= end:
                result.extend(sorted(self._by_date[day], key=lambda t: t.engagement_score, reverse=True))
        return result

    def replace_for_date(self, day: date, trends: Sequence[TrendAnalysis]) -> int:
        self._by_date[day] = list(trends)
        return len(trends)
