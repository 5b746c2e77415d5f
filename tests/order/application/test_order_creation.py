"""Application tests for order creation, numbering and checkout."""

import json
from datetime import UTC, datetime

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from storefront.cart.cart import CartStatus, ShoppingCart
from storefront.cart.items import AddToCart
from storefront.cart.management import CreateCart
from storefront.catalogue.product import Product
from storefront.exceptions import StockExceededError
from storefront.order.checkout import Checkout
from storefront.order.creation import CreateOrder
from storefront.order.numbering import next_order_number
from storefront.order.order import Order, OrderStatus, PaymentStatus


def _create_order(product, shipping_address, quantity=2, **overrides):
    defaults = {
        "user_id": "user-001",
        "email": "jane@example.com",
        "items": json.dumps([{"product_id": str(product.id), "quantity": quantity}]),
        "shipping_address": json.dumps(shipping_address),
        "payment_method": "card",
    }
    defaults.update(overrides)
    return current_domain.process(CreateOrder(**defaults), asynchronous=False)


class TestCreateOrder:
    def test_returns_persisted_order_id(self, make_product, shipping_address):
        product = make_product(price=20.0, stock=10)
        order_id = _create_order(product, shipping_address)
        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == OrderStatus.PENDING.value
        assert order.payment_status == PaymentStatus.PENDING.value
        assert order.email == "jane@example.com"

    def test_snapshots_catalogue_name_and_price(self, make_product, shipping_address):
        product = make_product(name="Ceramic Mug", price=12.5)
        order_id = _create_order(product, shipping_address, quantity=2)
        item = current_domain.repository_for(Order).get(order_id).items[0]
        assert item.product_name == "Ceramic Mug"
        assert item.unit_price == 12.5
        assert item.line_total == 25.0

    def test_prices_server_side_when_no_amounts_given(self, make_product, shipping_address):
        product = make_product(price=20.0)
        order_id = _create_order(product, shipping_address, quantity=2)
        pricing = current_domain.repository_for(Order).get(order_id).pricing
        assert pricing.subtotal == 40.0
        assert pricing.tax_amount == 3.2
        assert pricing.shipping_amount == 5.99
        assert pricing.total_amount == 49.19

    def test_uses_submitted_amounts(self, make_product, shipping_address):
        product = make_product(price=20.0)
        order_id = _create_order(
            product,
            shipping_address,
            subtotal=40.0,
            tax_amount=3.2,
            shipping_amount=0.0,
            discount_amount=5.0,
            total_amount=38.2,
        )
        pricing = current_domain.repository_for(Order).get(order_id).pricing
        assert pricing.total_amount == 38.2
        assert pricing.discount_amount == 5.0

    def test_decrements_stock(self, make_product, shipping_address):
        product = make_product(stock=10)
        _create_order(product, shipping_address, quantity=3)
        assert current_domain.repository_for(Product).get(product.id).stock == 7

    def test_overselling_aborts_the_order(self, make_product, shipping_address):
        product = make_product(stock=2)
        with pytest.raises(StockExceededError):
            _create_order(product, shipping_address, quantity=3)

        assert current_domain.repository_for(Product).get(product.id).stock == 2
        assert current_domain.repository_for(Order).count() == 0

    def test_order_number_format(self, make_product, shipping_address):
        product = make_product()
        order = current_domain.repository_for(Order).get(_create_order(product, shipping_address))
        today = datetime.now(UTC).strftime("%y%m%d")
        assert order.order_number == f"ORD{today}0001"

    def test_order_numbers_increment(self, make_product, shipping_address):
        product = make_product(stock=50)
        repo = current_domain.repository_for(Order)
        first = repo.get(_create_order(product, shipping_address, quantity=1)).order_number
        second = repo.get(_create_order(product, shipping_address, quantity=1)).order_number
        assert first != second
        assert int(second[-4:]) == int(first[-4:]) + 1


class TestOrderNumbering:
    def test_first_number_of_the_day(self):
        now = datetime(2026, 3, 14, 9, 30, tzinfo=UTC)
        assert next_order_number(now) == "ORD2603140001"

    def test_sequence_advances(self):
        now = datetime(2026, 3, 14, 9, 30, tzinfo=UTC)
        next_order_number(now)
        assert next_order_number(now) == "ORD2603140002"

    def test_each_day_has_its_own_sequence(self):
        next_order_number(datetime(2026, 3, 14, tzinfo=UTC))
        assert next_order_number(datetime(2026, 3, 15, tzinfo=UTC)) == "ORD2603150001"


class TestCheckout:
    def _cart_with(self, product, quantity):
        cart_id = current_domain.process(CreateCart(user_id="user-001"), asynchronous=False)
        current_domain.process(
            AddToCart(cart_id=cart_id, product_id=str(product.id), quantity=quantity),
            asynchronous=False,
        )
        return cart_id

    def test_checkout_creates_order_and_converts_cart(self, make_product, shipping_address):
        product = make_product(price=30.0, stock=10)
        cart_id = self._cart_with(product, 2)

        order_id = current_domain.process(
            Checkout(
                cart_id=cart_id,
                email="jane@example.com",
                shipping_address=json.dumps(shipping_address),
                payment_method="card",
            ),
            asynchronous=False,
        )

        order = current_domain.repository_for(Order).get(order_id)
        assert order.items[0].quantity == 2
        assert order.pricing.subtotal == 60.0
        assert str(order.user_id) == "user-001"

        cart = current_domain.repository_for(ShoppingCart).get(cart_id)
        assert cart.status == CartStatus.CONVERTED.value
        assert current_domain.repository_for(Product).get(product.id).stock == 8

    def test_empty_cart_cannot_check_out(self, shipping_address):
        cart_id = current_domain.process(CreateCart(user_id="user-001"), asynchronous=False)
        with pytest.raises(ValidationError) as exc:
            current_domain.process(
                Checkout(
                    cart_id=cart_id,
                    email="jane@example.com",
                    shipping_address=json.dumps(shipping_address),
                    payment_method="card",
                ),
                asynchronous=False,
            )
        assert "empty cart" in str(exc.value)
