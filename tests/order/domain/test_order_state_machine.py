"""Tests for the Order status and payment status state machines."""

import pytest

from storefront.exceptions import IllegalStateError, InvalidTransitionError
from storefront.order.events import OrderCancelled, OrderCreated, OrderStatusChanged, PaymentStatusChanged
from storefront.order.order import Order, OrderStatus, PaymentStatus

ADDRESS = {
    "first_name": "Jane",
    "last_name": "Doe",
    "address_line1": "123 Main St",
    "city": "Springfield",
    "state": "IL",
    "postal_code": "62701",
    "country": "US",
}

PRICING = {
    "subtotal": 20.0,
    "tax_amount": 1.6,
    "shipping_amount": 5.99,
    "discount_amount": 0.0,
    "total_amount": 27.59,
}


def _order(status=None):
    order = Order.create(
        order_number="ORD2601010001",
        email="jane@example.com",
        items_data=[
            {
                "product_id": "prod-001",
                "product_name": "Mug",
                "quantity": 2,
                "unit_price": 10.0,
            }
        ],
        shipping_address=ADDRESS,
        pricing=PRICING,
        payment_method="card",
    )
    if status:
        order.status = status.value
    order._events.clear()
    return order


class TestOrderCreation:
    def test_starts_pending(self):
        order = Order.create(
            order_number="ORD2601010001",
            email="jane@example.com",
            items_data=[{"product_id": "prod-001", "product_name": "Mug", "quantity": 2, "unit_price": 10.0}],
            shipping_address=ADDRESS,
            pricing=PRICING,
        )
        assert order.status == OrderStatus.PENDING.value
        assert order.payment_status == PaymentStatus.PENDING.value
        assert order.items[0].line_total == 20.0
        assert isinstance(order._events[0], OrderCreated)

    def test_billing_defaults_to_shipping(self):
        order = _order()
        assert order.billing_address.city == "Springfield"

    def test_customer_name(self):
        assert _order().customer_name == "Jane Doe"


class TestStatusTransitions:
    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED),
            (OrderStatus.CONFIRMED, OrderStatus.PROCESSING),
            (OrderStatus.PROCESSING, OrderStatus.SHIPPED),
            (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
            (OrderStatus.DELIVERED, OrderStatus.REFUNDED),
        ],
    )
    def test_forward_transitions(self, current, target):
        order = _order(current)
        assert order.transition_to(target.value) is True
        assert order.status == target.value

    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.PENDING, OrderStatus.SHIPPED),
            (OrderStatus.PENDING, OrderStatus.DELIVERED),
            (OrderStatus.SHIPPED, OrderStatus.PROCESSING),
            (OrderStatus.CANCELLED, OrderStatus.CONFIRMED),
            (OrderStatus.REFUNDED, OrderStatus.PENDING),
        ],
    )
    def test_illegal_transitions_rejected(self, current, target):
        order = _order(current)
        with pytest.raises(InvalidTransitionError) as exc:
            order.transition_to(target.value)
        assert f"Cannot transition from {current.value} to {target.value}" in str(exc.value)
        assert order.status == current.value

    def test_same_status_is_noop(self):
        order = _order(OrderStatus.CONFIRMED)
        assert order.transition_to(OrderStatus.CONFIRMED.value) is False
        assert order._events == []

    def test_tracking_number_recorded_on_ship(self):
        order = _order(OrderStatus.PROCESSING)
        order.transition_to(OrderStatus.SHIPPED.value, tracking_number="1Z999")
        assert order.tracking_number == "1Z999"
        event = next(e for e in order._events if isinstance(e, OrderStatusChanged))
        assert event.tracking_number == "1Z999"
        assert event.previous_status == "Processing"
        assert event.new_status == "Shipped"

    def test_can_transition_to(self):
        order = _order()
        assert order.can_transition_to(OrderStatus.CONFIRMED.value)
        assert not order.can_transition_to(OrderStatus.DELIVERED.value)


class TestCancellation:
    @pytest.mark.parametrize("status", [OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING])
    def test_cancellable_states(self, status):
        order = _order(status)
        order.cancel("Changed my mind")
        assert order.status == OrderStatus.CANCELLED.value
        assert order.cancellation_reason == "Changed my mind"
        assert any(isinstance(e, OrderCancelled) for e in order._events)

    @pytest.mark.parametrize("status", [OrderStatus.SHIPPED, OrderStatus.DELIVERED])
    def test_shipped_orders_cannot_be_cancelled(self, status):
        order = _order(status)
        with pytest.raises(IllegalStateError) as exc:
            order.cancel()
        assert "Cannot cancel shipped or delivered orders" in str(exc.value)
        assert order.status == status.value

    def test_transition_to_cancelled_uses_guard(self):
        order = _order(OrderStatus.SHIPPED)
        with pytest.raises(IllegalStateError):
            order.transition_to(OrderStatus.CANCELLED.value)


class TestPaymentStatus:
    def test_pending_to_paid(self):
        order = _order()
        assert order.update_payment_status(PaymentStatus.PAID.value) is True
        assert order.payment_status == PaymentStatus.PAID.value
        assert any(isinstance(e, PaymentStatusChanged) for e in order._events)

    def test_failed_can_be_retried(self):
        order = _order()
        order.update_payment_status(PaymentStatus.FAILED.value)
        order.update_payment_status(PaymentStatus.PAID.value)
        assert order.payment_status == PaymentStatus.PAID.value

    def test_pending_cannot_be_refunded(self):
        order = _order()
        with pytest.raises(InvalidTransitionError) as exc:
            order.update_payment_status(PaymentStatus.REFUNDED.value)
        assert "payment_status" in exc.value.messages

    def test_same_payment_status_is_noop(self):
        assert _order().update_payment_status(PaymentStatus.PENDING.value) is False

    def test_can_update_payment_status(self):
        order = _order()
        order.update_payment_status(PaymentStatus.PAID.value)
        assert order.can_update_payment_status(PaymentStatus.PAID.value) is True
        assert order.can_update_payment_status(PaymentStatus.REFUNDED.value) is True
        assert order.can_update_payment_status(PaymentStatus.FAILED.value) is False

    def test_attach_payment_intent(self):
        order = _order()
        order.attach_payment_intent("pi_123")
        assert order.payment_intent_id == "pi_123"

    def test_paid_order_is_not_payable(self):
        order = _order()
        order.update_payment_status(PaymentStatus.PAID.value)
        with pytest.raises(IllegalStateError):
            order.attach_payment_intent("pi_456")

    def test_cancelled_order_is_not_payable(self):
        order = _order()
        order.cancel()
        with pytest.raises(IllegalStateError):
            order.assert_payable()
