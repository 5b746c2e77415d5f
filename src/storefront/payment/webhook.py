"""Payment webhooks — apply gateway callbacks to orders.

    payment_intent.succeeded       → payment Paid; a Pending order is Confirmed
    payment_intent.payment_failed  → payment Failed
    payment_intent.canceled        → payment Failed

Any other event type is logged and acknowledged without touching an order.
An event the payment state machine would reject (a failure arriving after
the order was paid, say) is logged and acknowledged as well, so the gateway
stops redelivering it.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus, PaymentStatus
from storefront.payment.gateway.port import WebhookEvent

logger = structlog.get_logger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"
PAYMENT_CANCELED = "payment_intent.canceled"

_HANDLED_EVENTS = {PAYMENT_SUCCEEDED, PAYMENT_FAILED, PAYMENT_CANCELED}


@storefront.command(part_of="Order")
class ProcessPaymentWebhook:
    order_id = Identifier(required=True)
    event_id = String(required=True, max_length=255)
    event_type = String(required=True, max_length=100)
    payment_intent_id = String(max_length=255)


@storefront.command_handler(part_of=Order)
class PaymentWebhookHandler:
    @handle(ProcessPaymentWebhook)
    def process_payment_webhook(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if command.payment_intent_id and not order.payment_intent_id:
            order.payment_intent_id = command.payment_intent_id

        target = PaymentStatus.PAID if command.event_type == PAYMENT_SUCCEEDED else PaymentStatus.FAILED
        if not order.can_update_payment_status(target.value):
            # Late or out-of-order delivery; acknowledge so the gateway stops retrying
            logger.warning(
                "Stale payment webhook ignored",
                order_id=str(order.id),
                event_id=command.event_id,
                event_type=command.event_type,
                payment_status=order.payment_status,
            )
            return order.payment_status

        if target == PaymentStatus.PAID:
            order.update_payment_status(PaymentStatus.PAID.value)
            if OrderStatus(order.status) == OrderStatus.PENDING:
                order.transition_to(OrderStatus.CONFIRMED.value)
        else:
            order.update_payment_status(PaymentStatus.FAILED.value)

        repo.add(order)
        logger.info(
            "Payment webhook applied",
            order_id=str(order.id),
            event_id=command.event_id,
            event_type=command.event_type,
            payment_status=order.payment_status,
        )
        return order.payment_status


def apply_webhook_event(event: WebhookEvent):
    """Route a verified gateway event to the order it belongs to.

    Returns the order's new payment status, or None if the event was only
    acknowledged.
    """
    if event.type not in _HANDLED_EVENTS:
        logger.info("Unhandled payment webhook event", event_id=event.id, event_type=event.type)
        return None

    order_id = (event.data.get("metadata") or {}).get("orderId")
    if not order_id:
        logger.warning("Payment webhook without order reference", event_id=event.id, event_type=event.type)
        return None

    return current_domain.process(
        ProcessPaymentWebhook(
            order_id=order_id,
            event_id=event.id,
            event_type=event.type,
            payment_intent_id=event.data.get("id"),
        ),
        asynchronous=False,
    )
