"""Order lifecycle notifications — confirmation and status update emails.

Runs after the order change has been committed. Whatever happens while
sending stays here; the order is never affected.
"""

import json

import structlog
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.notification.dispatcher import NotificationDispatcher
from storefront.order.events import OrderCreated, OrderStatusChanged
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.event_handler(part_of=Order)
class OrderNotificationsHandler:
    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        context = {
            "order_number": event.order_number,
            "customer_name": event.customer_name,
            "items": json.loads(event.items) if event.items else [],
            "subtotal": event.subtotal,
            "tax_amount": event.tax_amount,
            "shipping_amount": event.shipping_amount,
            "discount_amount": event.discount_amount,
            "total_amount": event.total_amount,
            "shipping_address": json.loads(event.shipping_address) if event.shipping_address else {},
        }
        NotificationDispatcher().send_order_confirmation(event.email, context, source_event_id=str(event.order_id))

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        context = {
            "order_number": event.order_number,
            "customer_name": event.customer_name,
            "status": event.new_status,
            "previous_status": event.previous_status,
            "tracking_number": event.tracking_number,
        }
        NotificationDispatcher().send_order_status_update(event.email, context, source_event_id=str(event.order_id))
