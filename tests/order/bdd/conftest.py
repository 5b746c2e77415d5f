"""Shared BDD fixtures and step definitions for orders."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

from storefront.order.events import OrderCancelled, OrderCreated, OrderStatusChanged, PaymentStatusChanged
from storefront.order.order import Order, OrderStatus

_ORDER_EVENT_CLASSES = {
    "OrderCreated": OrderCreated,
    "OrderStatusChanged": OrderStatusChanged,
    "OrderCancelled": OrderCancelled,
    "PaymentStatusChanged": PaymentStatusChanged,
}


@pytest.fixture()
def error():
    """Container for the validation error a When step captured."""
    return {"exc": None}


def _new_order():
    return Order.create(
        order_number="ORD2601010001",
        email="jane@example.com",
        items_data=[
            {
                "product_id": "prod-001",
                "product_name": "Test Product",
                "quantity": 2,
                "unit_price": 25.0,
            }
        ],
        shipping_address={
            "first_name": "Jane",
            "last_name": "Doe",
            "address_line1": "123 Main St",
            "city": "Springfield",
            "state": "IL",
            "postal_code": "62701",
            "country": "US",
        },
        pricing={
            "subtotal": 50.0,
            "tax_amount": 4.0,
            "shipping_amount": 0.0,
            "discount_amount": 0.0,
            "total_amount": 54.0,
        },
        payment_method="card",
    )


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a pending order", target_fixture="order")
def pending_order():
    order = _new_order()
    order._events.clear()
    return order


@given(parsers.cfparse('an order in "{status}"'), target_fixture="order")
def order_in_status(status):
    order = _new_order()
    order.status = OrderStatus(status).value
    order._events.clear()
    return order


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then(parsers.cfparse('the payment status is "{status}"'))
def payment_status_is(order, status):
    assert order.payment_status == status


@then(parsers.cfparse('the order action fails with "{message}"'))
def order_action_fails_with(error, message):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)
    assert error["exc"].message == message


@then(parsers.cfparse("an {event_type} order event is raised"))
def an_order_event_raised(order, event_type):
    assert any(isinstance(e, _ORDER_EVENT_CLASSES[event_type]) for e in order._events)


@then(parsers.cfparse("a {event_type} order event is raised"))
def a_order_event_raised(order, event_type):
    assert any(isinstance(e, _ORDER_EVENT_CLASSES[event_type]) for e in order._events)
