"""Administrative email commands — manual sends and dead-letter retries."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.notification.dispatcher import NotificationDispatcher
from storefront.notification.notification import Notification, NotificationType


@storefront.command(part_of="Notification")
class SendEmail:
    """Send one of the transactional emails by hand."""

    notification_type: String(required=True, choices=NotificationType)
    recipient: String(max_length=254)  # Not used for low stock alerts
    context: Text()  # JSON template data


@storefront.command(part_of="Notification")
class RetryNotification:
    notification_id: Identifier(required=True)


@storefront.command_handler(part_of=Notification)
class NotificationManagementHandler:
    @handle(SendEmail)
    def send_email(self, command):
        context = json.loads(command.context) if command.context else {}
        dispatcher = NotificationDispatcher()

        if command.notification_type == NotificationType.LOW_STOCK_ALERT.value:
            sent = dispatcher.send_low_stock_alert(context)
        else:
            if not command.recipient:
                raise ValidationError({"recipient": ["A recipient is required"]})
            notification = dispatcher.dispatch(command.notification_type, command.recipient, context)
            sent = [notification] if notification is not None else []

        return [{"notification_id": str(n.id), "recipient": n.recipient, "status": n.status} for n in sent]

    @handle(RetryNotification)
    def retry_notification(self, command):
        notification = current_domain.repository_for(Notification).get(command.notification_id)
        NotificationDispatcher().retry(notification)
        return notification.status
