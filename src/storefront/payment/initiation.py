"""Payment initiation — open and confirm gateway payment intents for an order.

Payment status on the order is only moved by gateway webhooks; these
commands just talk to the gateway and remember the intent id.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.payment.intents import confirm_payment_intent, create_payment_intent


@storefront.command(part_of="Order")
class CreatePaymentIntent:
    order_id = Identifier(required=True)
    payment_method_id = String(max_length=255)  # Confirms immediately when given


@storefront.command(part_of="Order")
class ConfirmPayment:
    order_id = Identifier(required=True)
    payment_method_id = String(max_length=255)


def _intent_response(order, intent) -> dict:
    return {
        "order_id": str(order.id),
        "payment_intent_id": intent.id,
        "client_secret": intent.client_secret,
        "status": intent.status,
        "amount": intent.amount,
        "currency": intent.currency,
    }


@storefront.command_handler(part_of=Order)
class PaymentInitiationHandler:
    @handle(CreatePaymentIntent)
    def create_payment_intent(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        order.assert_payable()

        intent = create_payment_intent(
            amount=order.pricing.total_amount,
            order_id=str(order.id),
            currency=order.pricing.currency,
            payment_method_id=command.payment_method_id,
            metadata={"orderNumber": order.order_number},
        )
        order.attach_payment_intent(intent.id)
        repo.add(order)
        return _intent_response(order, intent)

    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        order = current_domain.repository_for(Order).get(command.order_id)
        if not order.payment_intent_id:
            raise ValidationError({"order_id": ["Order has no payment intent to confirm"]})

        intent = confirm_payment_intent(order.payment_intent_id, payment_method_id=command.payment_method_id)
        return _intent_response(order, intent)
