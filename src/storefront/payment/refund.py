"""Order refunds — command and handler.

The gateway refund happens first. If it fails, ExternalServiceError
propagates and the order is left as it was.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import IllegalStateError
from storefront.order.order import Order, OrderStatus, PaymentStatus
from storefront.payment.intents import REFUND_REASONS, refund_payment


@storefront.command(part_of="Order")
class RefundOrderPayment:
    order_id = Identifier(required=True)
    amount = Float(min_value=0.01)  # Omit for a full refund
    reason = String(max_length=50)


@storefront.command_handler(part_of=Order)
class RefundHandler:
    @handle(RefundOrderPayment)
    def refund_order_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if PaymentStatus(order.payment_status) != PaymentStatus.PAID:
            raise IllegalStateError("Only paid orders can be refunded", field="payment_status")
        if not order.payment_intent_id:
            raise ValidationError({"order_id": ["Order has no payment intent to refund"]})
        if command.reason and command.reason not in REFUND_REASONS:
            raise ValidationError({"reason": [f"Refund reason must be one of {', '.join(REFUND_REASONS)}"]})

        refund = refund_payment(order.payment_intent_id, amount=command.amount, reason=command.reason)

        order.update_payment_status(PaymentStatus.REFUNDED.value)
        if command.amount is None or command.amount >= order.pricing.total_amount:
            order.transition_to(OrderStatus.REFUNDED.value)

        repo.add(order)
        return refund.id
