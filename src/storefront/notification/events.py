"""Domain events for the Notification aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Notification")
class NotificationSent:
    __version__ = 1

    notification_id: Identifier(required=True)
    notification_type: String(required=True)
    recipient: String(required=True)
    message_id: String()
    sent_at: DateTime(required=True)


@storefront.event(part_of="Notification")
class NotificationFailed:
    """An email could not be delivered; the notification is in the dead-letter log."""

    __version__ = 1

    notification_id: Identifier(required=True)
    notification_type: String(required=True)
    recipient: String(required=True)
    reason: String(required=True)
    retry_count: Integer(default=0)
    failed_at: DateTime(required=True)
