"""Order and payment status updates — commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.cancellation import cancel_and_restock
from storefront.order.order import Order, OrderStatus, PaymentStatus


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    tracking_number = String(max_length=100)
    reason = String(max_length=500)  # Used when the new status is Cancelled


@storefront.command(part_of="Order")
class UpdatePaymentStatus:
    order_id = Identifier(required=True)
    payment_status = String(required=True, choices=PaymentStatus)


@storefront.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        target = OrderStatus(command.status)
        if target == OrderStatus.CANCELLED and OrderStatus(order.status) != OrderStatus.CANCELLED:
            cancel_and_restock(order, command.reason)
        else:
            order.transition_to(target, tracking_number=command.tracking_number)

        repo.add(order)
        return order.status

    @handle(UpdatePaymentStatus)
    def update_payment_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.update_payment_status(command.payment_status)
        repo.add(order)
        return order.payment_status
