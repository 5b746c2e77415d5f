"""Shared BDD fixtures and step definitions for the shopping cart."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

from storefront.cart.cart import ShoppingCart
from storefront.cart.events import (
    CartAbandoned,
    CartCleared,
    CartConverted,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CartsMerged,
)

_CART_EVENT_CLASSES = {
    "CartItemAdded": CartItemAdded,
    "CartQuantityUpdated": CartQuantityUpdated,
    "CartItemRemoved": CartItemRemoved,
    "CartCleared": CartCleared,
    "CartsMerged": CartsMerged,
    "CartConverted": CartConverted,
    "CartAbandoned": CartAbandoned,
}


@pytest.fixture()
def error():
    """Container for the validation error a When step captured."""
    return {"exc": None}


def add_line(cart, product_id, quantity, stock):
    cart.add_item(
        product_id=product_id,
        quantity=quantity,
        unit_price=25.0,
        stock=stock,
        product_name="Test Product",
    )


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an active cart", target_fixture="cart")
def active_cart():
    cart = ShoppingCart.create(user_id="user-001")
    cart._events.clear()
    return cart


@given("a guest cart", target_fixture="cart")
def guest_cart():
    cart = ShoppingCart.create(session_id="sess-001")
    cart._events.clear()
    return cart


@given(
    parsers.cfparse('the cart holds {quantity:d} of product "{product_id}" with {stock:d} in stock'),
    target_fixture="cart",
)
def cart_with_line(cart, quantity, product_id, stock):
    add_line(cart, product_id, quantity, stock)
    cart._events.clear()
    return cart


@given(
    parsers.cfparse('a guest cart holding {quantity:d} of product "{product_id}" with {stock:d} in stock'),
    target_fixture="guest",
)
def guest_cart_with_line(quantity, product_id, stock):
    guest = ShoppingCart.create(session_id="sess-002")
    add_line(guest, product_id, quantity, stock)
    guest._events.clear()
    return guest


@given("the cart is converted", target_fixture="cart")
def converted_cart(cart):
    cart.convert_to_order()
    cart._events.clear()
    return cart


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the cart status is "{status}"'))
def cart_status_is(cart, status):
    assert cart.status == status


@then(parsers.cfparse("the cart has {count:d} line"))
def cart_has_n_line(cart, count):
    assert len(cart.items) == count


@then(parsers.cfparse("the cart has {count:d} lines"))
def cart_has_n_lines(cart, count):
    assert len(cart.items) == count


@then(parsers.cfparse("the cart holds {units:d} units"))
def cart_holds_units(cart, units):
    assert cart.item_count == units


@then("the cart action fails with a validation error")
def cart_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse('the cart action fails with "{message}"'))
def cart_action_fails_with(error, message):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert error["exc"].message == message


@then(parsers.cfparse("a {event_type} cart event is raised"))
def cart_event_raised(cart, event_type):
    event_cls = _CART_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in cart._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in cart._events]}"
