"""Notification aggregate (CQRS) — one record per transactional email attempt.

Records double as the dead-letter log: anything that could not be sent
stays in FAILED with the reason, and can be listed and retried later.

State Machine:
    PENDING → SENT
    PENDING → FAILED → (retry) → PENDING
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Integer, String, Text

from storefront.domain import storefront
from storefront.notification.events import NotificationFailed, NotificationSent


class NotificationType(Enum):
    ORDER_CONFIRMATION = "order_confirmation"
    ORDER_STATUS_UPDATE = "order_status_update"
    WELCOME = "welcome"
    PASSWORD_RESET = "password_reset"
    LOW_STOCK_ALERT = "low_stock_alert"


class NotificationStatus(Enum):
    PENDING = "Pending"
    SENT = "Sent"
    FAILED = "Failed"


@storefront.aggregate
class Notification:
    recipient: String(required=True, max_length=254)
    notification_type: String(choices=NotificationType, required=True)
    subject: String(required=True, max_length=500)
    body: Text(required=True)  # Rendered HTML
    context_data: Text()  # JSON the template was rendered from

    # Source event correlation
    source_event_type: String(max_length=200)
    source_event_id: String(max_length=200)

    status: String(choices=NotificationStatus, default=NotificationStatus.PENDING.value)
    message_id: String(max_length=255)
    failure_reason: String(max_length=500)
    retry_count: Integer(default=0)

    sent_at: DateTime()
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(
        cls,
        recipient,
        notification_type,
        subject,
        body,
        context_data=None,
        source_event_type=None,
        source_event_id=None,
    ):
        now = datetime.now(UTC)
        return cls(
            recipient=recipient,
            notification_type=notification_type,
            subject=subject,
            body=body,
            context_data=context_data,
            source_event_type=source_event_type,
            source_event_id=source_event_id,
            status=NotificationStatus.PENDING.value,
            retry_count=0,
            created_at=now,
            updated_at=now,
        )

    def mark_sent(self, message_id=None):
        if NotificationStatus(self.status) != NotificationStatus.PENDING:
            raise ValidationError({"status": [f"Cannot mark a {self.status} notification as sent"]})

        now = datetime.now(UTC)
        self.status = NotificationStatus.SENT.value
        self.message_id = message_id
        self.failure_reason = None
        self.sent_at = now
        self.updated_at = now

        self.raise_(
            NotificationSent(
                notification_id=str(self.id),
                notification_type=self.notification_type,
                recipient=self.recipient,
                message_id=message_id,
                sent_at=now,
            )
        )

    def mark_failed(self, reason):
        if NotificationStatus(self.status) != NotificationStatus.PENDING:
            raise ValidationError({"status": [f"Cannot mark a {self.status} notification as failed"]})

        now = datetime.now(UTC)
        self.status = NotificationStatus.FAILED.value
        self.failure_reason = (reason or "Unknown delivery error")[:500]
        self.updated_at = now

        self.raise_(
            NotificationFailed(
                notification_id=str(self.id),
                notification_type=self.notification_type,
                recipient=self.recipient,
                reason=self.failure_reason,
                retry_count=self.retry_count,
                failed_at=now,
            )
        )

    def retry(self):
        if NotificationStatus(self.status) != NotificationStatus.FAILED:
            raise ValidationError({"status": ["Only failed notifications can be retried"]})

        self.status = NotificationStatus.PENDING.value
        self.retry_count += 1
        self.updated_at = datetime.now(UTC)
