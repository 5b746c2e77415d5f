"""Notification dispatcher — renders templates and sends transactional email.

Sending is fire-and-forget for the caller: ``dispatch`` never raises.
Every attempt is recorded as a ``Notification``; failed ones stay in the
FAILED state with the reason, forming the dead-letter log that
``failed_notifications`` lists and ``retry`` replays.
"""

import json
import os

import structlog
from protean.utils.globals import current_domain

from storefront.notification.channel import get_email_channel
from storefront.notification.channel.email_port import EmailPort
from storefront.notification.notification import (
    Notification,
    NotificationStatus,
    NotificationType,
)
from storefront.notification.templates import get_template
from storefront.notification.templates.base import site_url

logger = structlog.get_logger(__name__)


def admin_emails() -> list[str]:
    """Recipients of internal alerts, from the comma-separated ADMIN_EMAILS."""
    return [address.strip() for address in os.environ.get("ADMIN_EMAILS", "").split(",") if address.strip()]


class NotificationDispatcher:
    def __init__(self, email: EmailPort | None = None):
        self._email = email

    @property
    def email(self) -> EmailPort:
        return self._email or get_email_channel()

    # -------------------------------------------------------------------
    # Core
    # -------------------------------------------------------------------
    def dispatch(
        self,
        notification_type: str,
        recipient: str,
        context: dict,
        source_event_type: str | None = None,
        source_event_id: str | None = None,
    ) -> Notification | None:
        """Render and send one email. Returns the recorded notification, if any."""
        try:
            rendered = get_template(notification_type).render(context)
            notification = Notification.create(
                recipient=recipient,
                notification_type=notification_type,
                subject=rendered["subject"],
                body=rendered["html"],
                context_data=json.dumps(context, default=str),
                source_event_type=source_event_type,
                source_event_id=source_event_id,
            )
        except Exception as exc:
            logger.error(
                "Failed to render notification",
                notification_type=notification_type,
                recipient=recipient,
                error=str(exc),
            )
            return None

        self._deliver(notification)
        self._record(notification)
        return notification

    def retry(self, notification: Notification) -> Notification:
        """Send a FAILED notification again."""
        notification.retry()
        self._deliver(notification)
        self._record(notification)
        return notification

    def _deliver(self, notification: Notification) -> None:
        try:
            result = self.email.send(
                to=notification.recipient,
                subject=notification.subject,
                html=notification.body,
            )
        except Exception as exc:
            result = {"status": "failed", "error": str(exc)}

        if result.get("status") == "sent":
            notification.mark_sent(result.get("message_id"))
            logger.info(
                "Notification sent",
                notification_type=notification.notification_type,
                recipient=notification.recipient,
                message_id=result.get("message_id"),
            )
        else:
            notification.mark_failed(result.get("error", "Unknown delivery error"))
            logger.error(
                "Notification delivery failed",
                notification_type=notification.notification_type,
                recipient=notification.recipient,
                error=notification.failure_reason,
            )

    def _record(self, notification: Notification) -> None:
        try:
            current_domain.repository_for(Notification).add(notification)
        except Exception as exc:
            logger.error(
                "Failed to record notification",
                notification_type=notification.notification_type,
                recipient=notification.recipient,
                status=notification.status,
                error=str(exc),
            )

    # -------------------------------------------------------------------
    # Triggers
    # -------------------------------------------------------------------
    def send_order_confirmation(self, email: str, context: dict, source_event_id=None):
        return self.dispatch(
            NotificationType.ORDER_CONFIRMATION.value,
            email,
            context,
            source_event_type="OrderCreated",
            source_event_id=source_event_id,
        )

    def send_order_status_update(self, email: str, context: dict, source_event_id=None):
        return self.dispatch(
            NotificationType.ORDER_STATUS_UPDATE.value,
            email,
            context,
            source_event_type="OrderStatusChanged",
            source_event_id=source_event_id,
        )

    def send_welcome_email(self, email: str, name: str | None = None):
        return self.dispatch(NotificationType.WELCOME.value, email, {"name": name})

    def send_password_reset_email(self, email: str, reset_token: str, name: str | None = None):
        reset_link = f"{site_url()}/auth/reset-password?token={reset_token}"
        return self.dispatch(NotificationType.PASSWORD_RESET.value, email, {"name": name, "reset_link": reset_link})

    def send_low_stock_alert(self, context: dict, source_event_id=None) -> list[Notification]:
        recipients = admin_emails()
        if not recipients:
            logger.warning("No admin emails configured for low stock alerts", sku=context.get("sku"))
            return []

        sent = []
        for recipient in recipients:
            notification = self.dispatch(
                NotificationType.LOW_STOCK_ALERT.value,
                recipient,
                context,
                source_event_type="LowStockDetected",
                source_event_id=source_event_id,
            )
            if notification is not None:
                sent.append(notification)
        return sent


def failed_notifications(limit: int = 100) -> list[Notification]:
    """The dead-letter log, oldest first."""
    repo = current_domain.repository_for(Notification)
    return (
        repo._dao.query.filter(status=NotificationStatus.FAILED.value)
        .order_by("created_at")
        .limit(limit)
        .all()
        .items
    )
