"""Payment intent service — the storefront's side of the gateway contract.

Amounts are accepted in major units (dollars) and sent to the gateway in
minor units, rounded half-up. Every intent carries the order id in its
metadata so webhook callbacks can be matched back to the order.
"""

from decimal import ROUND_HALF_UP, Decimal

import structlog
from protean.exceptions import ValidationError

from storefront.cart.pricing import summarize
from storefront.exceptions import WebhookSignatureError
from storefront.payment.gateway import get_gateway

logger = structlog.get_logger(__name__)

DEFAULT_CURRENCY = "usd"
REFUND_REASONS = ("duplicate", "fraudulent", "requested_by_customer")


def to_minor_units(amount) -> int:
    """Convert 113.98 into 11398."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int) -> float:
    return float(Decimal(amount) / 100)


def calculate_order_amount(lines, discount=0) -> int:
    """Price ``lines`` server-side and return the total in minor units."""
    return to_minor_units(summarize(lines, discount=discount).total)


def create_payment_intent(amount, order_id, currency=DEFAULT_CURRENCY, payment_method_id=None, metadata=None):
    """Open a payment intent for ``amount``.

    With a payment method the intent is confirmed immediately (server-side
    flow); without one it is left for the client to confirm.
    """
    if amount is None or amount <= 0:
        raise ValidationError({"amount": ["Amount must be positive"]})

    intent = get_gateway().create_payment_intent(
        amount=to_minor_units(amount),
        currency=(currency or DEFAULT_CURRENCY).lower(),
        metadata={**(metadata or {}), "orderId": str(order_id)},
        payment_method_id=payment_method_id,
        confirm=bool(payment_method_id),
    )
    logger.info(
        "Payment intent created",
        payment_intent_id=intent.id,
        order_id=str(order_id),
        amount=intent.amount,
        status=intent.status,
    )
    return intent


def confirm_payment_intent(payment_intent_id, payment_method_id=None):
    return get_gateway().confirm_payment_intent(payment_intent_id, payment_method_id=payment_method_id)


def retrieve_payment_intent(payment_intent_id):
    return get_gateway().retrieve_payment_intent(payment_intent_id)


def refund_payment(payment_intent_id, amount=None, reason=None):
    """Refund a captured intent, fully or partially (``amount`` in major units)."""
    if reason is not None and reason not in REFUND_REASONS:
        raise ValidationError({"reason": [f"Refund reason must be one of {', '.join(REFUND_REASONS)}"]})
    if amount is not None and amount <= 0:
        raise ValidationError({"amount": ["Refund amount must be positive"]})

    refund = get_gateway().create_refund(
        payment_intent_id,
        amount=to_minor_units(amount) if amount is not None else None,
        reason=reason,
    )
    logger.info("Payment refunded", payment_intent_id=payment_intent_id, refund_id=refund.id, amount=refund.amount)
    return refund


def handle_webhook(raw_body, signature, secret):
    """Authenticate a gateway callback and return the parsed event."""
    if not signature:
        raise WebhookSignatureError("Missing webhook signature")
    return get_gateway().construct_webhook_event(raw_body, signature, secret)


def create_customer(email, name=None, metadata=None):
    return get_gateway().create_customer(email, name=name, metadata=metadata)


def attach_payment_method_to_customer(payment_method_id, customer_id):
    return get_gateway().attach_payment_method(payment_method_id, customer_id)


def list_customer_payment_methods(customer_id, type="card"):
    return get_gateway().list_payment_methods(customer_id, type=type)
