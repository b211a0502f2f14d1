"""
Notification sink - fire-and-forget e-mail via Resend.

notify() never raises. Without RESEND_API_KEY the rendered message is
logged instead of sent (dev mode).
"""

import logging
from typing import Any, Protocol

from django.conf import settings

import resend

from apps.backoffice.notifications.templates import render

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    """Best-effort recipient notifications."""

    def notify(
        self, recipient_address: str, template: str, data: dict[str, Any]
    ) -> None: ...


class EmailNotifier:
    """NotificationSink sending plain-text e-mail through Resend."""

    def notify(
        self, recipient_address: str, template: str, data: dict[str, Any]
    ) -> None:
        if not recipient_address:
            logger.warning("Notification %s skipped: no recipient", template)
            return

        try:
            message = render(template, data)

            api_key = getattr(settings, "RESEND_API_KEY", None)
            if not api_key:
                logger.info(
                    "E-mail not sent (Resend not configured) to=%s subject=%r\n%s",
                    recipient_address,
                    message.subject,
                    message.text,
                )
                return

            resend.api_key = api_key
            params: dict[str, Any] = {
                "from": settings.FROM_EMAIL,
                "to": recipient_address,
                "subject": message.subject,
                "text": message.text,
            }
            response = resend.Emails.send(params)  # type: ignore[arg-type]
            email_id = response.get("id", "") if isinstance(response, dict) else ""

            logger.info(
                "Sent %s e-mail to %s (ID: %s)", template, recipient_address, email_id
            )
        except Exception:
            # Best-effort: never propagate
            logger.exception(
                "Failed to send %s notification to %s", template, recipient_address
            )
