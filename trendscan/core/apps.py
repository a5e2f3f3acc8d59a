"""
Django app configuration for trendscan core.

Holds the persisted TrendRecord model and shared run plumbing.
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "trendscan.core"
    verbose_name = "Trendscan Core"
