"""
Trendscan persisted models.

Models:
- TrendRecord: One analysed trend for a calendar date (the `trends` table)
"""

from __future__ import annotations

import uuid

from django.db import models

from trendscan.core.enums import TrendCategory


class TrendRecord(models.Model):
    """
    A trend produced by a scan, bucketed by calendar date.

    Rows for a date are replaced wholesale on each scan of that date.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=500)
    category = models.CharField(max_length=20, choices=TrendCategory.choices)
    summary = models.TextField()
    why_it_matters = models.TextField()
    content_angle = models.TextField()
    script = models.TextField()
    sources = models.JSONField(default=list, blank=True)  # [{url, platform, title}]
    engagement_score = models.IntegerField(default=0)
    date = models.DateField(db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "trends"
        ordering = ["-date", "-engagement_score"]
        indexes = [
            models.Index(fields=["date", "-engagement_score"], name="idx_trend_date_score"),
        ]

    def __str__(self) -> str:
        return f"{self.date.isoformat()} [{self.category}] {self.title}"
