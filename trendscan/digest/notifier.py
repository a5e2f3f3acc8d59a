"""
Operator alerting.

The notifier is fire-and-forget: a failure to deliver an alert is logged and
never raised to the caller.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Protocol

from django.conf import settings
from django.core.mail import mail_admins

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def alert(self, subject: str, message: str, details: str | None = None) -> None:
        ...


class EmailAlertNotifier:
    """Sends alerts to Django's ADMINS (configured from ADMIN_EMAIL)."""

    subject_prefix = "[Alert] "

    def alert(self, subject: str, message: str, details: str | None = None) -> None:
        if not settings.ADMINS:
            logger.error("ADMIN_EMAIL not set, cannot send error alert", extra={"subject": subject})
            return

        body = [message]
        if details:
            body.extend(["", details])
        body.extend(["", f"Sent at {datetime.now(timezone.utc).isoformat()}"])

        try:
            mail_admins(f"{self.subject_prefix}{subject}", "\n".join(body), fail_silently=False)
        except Exception as e:
            # Covers backend misconfiguration as well as delivery errors.
            logger.error(
                "Error sending alert email",
                extra={"subject": subject, "error": f"{e.__class__.__name__}: {str(e)[:200]}"},
            )
            return

        logger.info("Alert sent", extra={"subject": subject})


class LoggingNotifier:
    """Records alerts in the log only (dry runs)."""

    def alert(self, subject: str, message: str, details: str | None = None) -> None:
        logger.warning(f"ALERT: {subject}: {message}", extra={"details": details})
