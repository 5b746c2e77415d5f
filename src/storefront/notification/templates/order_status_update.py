"""Order status update — sent whenever an order changes status."""

from storefront.notification.notification import NotificationType
from storefront.notification.templates.base import layout, text

STATUS_MESSAGES = {
    "Confirmed": "Your order has been confirmed and is being prepared.",
    "Processing": "Your order is currently being processed.",
    "Shipped": "Great news! Your order has been shipped.",
    "Delivered": "Your order has been delivered.",
    "Cancelled": "Your order has been cancelled.",
}
DEFAULT_MESSAGE = "Your order status has been updated."


class OrderStatusUpdateTemplate:
    notification_type = NotificationType.ORDER_STATUS_UPDATE.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        status = context.get("status", "")
        tracking_number = context.get("tracking_number")

        content = f"<p>{STATUS_MESSAGES.get(status, DEFAULT_MESSAGE)}</p>"
        if tracking_number:
            content += (
                f"<p><strong>Tracking Number:</strong> {text(tracking_number)}</p>"
                "<p>You can track your package using the tracking number above.</p>"
            )
        header = (
            "<h1>Order Update</h1>"
            f"<p>Hello {text(context.get('customer_name') or 'Customer')},</p>"
            f"<p>Order <strong>{text(order_number)}</strong> is now <strong>{text(status)}</strong>.</p>"
        )
        return {
            "subject": f"Order Update - {order_number}",
            "html": layout("Order Update", header, content),
        }
