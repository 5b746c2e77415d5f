"""Application tests for status updates, cancellation and the order read side."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError

from storefront.catalogue.product import Product
from storefront.exceptions import IllegalStateError, InvalidTransitionError
from storefront.order.cancellation import CancelOrder
from storefront.order.creation import CreateOrder
from storefront.order.order import Order, OrderStatus, PaymentStatus
from storefront.order.queries import (
    OrderQuery,
    get_order_by_id,
    get_order_by_number,
    get_order_summary,
    get_orders,
)
from storefront.order.status import UpdateOrderStatus, UpdatePaymentStatus


def _place(product, shipping_address, quantity=2, email="jane@example.com", user_id="user-001"):
    return current_domain.process(
        CreateOrder(
            user_id=user_id,
            email=email,
            items=json.dumps([{"product_id": str(product.id), "quantity": quantity}]),
            shipping_address=json.dumps(shipping_address),
            payment_method="card",
        ),
        asynchronous=False,
    )


def _advance(order_id, *statuses):
    for status in statuses:
        current_domain.process(UpdateOrderStatus(order_id=order_id, status=status.value), asynchronous=False)


def _stock(product):
    return current_domain.repository_for(Product).get(product.id).stock


class TestCancellation:
    def test_cancel_pending_restores_inventory(self, make_product, shipping_address):
        product = make_product(stock=10)
        order_id = _place(product, shipping_address, quantity=2)
        assert _stock(product) == 8

        status = current_domain.process(CancelOrder(order_id=order_id, reason="Changed mind"), asynchronous=False)

        assert status == OrderStatus.CANCELLED.value
        assert _stock(product) == 10
        order = current_domain.repository_for(Order).get(order_id)
        assert order.cancellation_reason == "Changed mind"

    def test_cancel_restores_variant_stock(self, make_product, shipping_address):
        product = make_product(stock=10)
        product.add_variant(name="Large", sku="SKU-L", stock=5)
        current_domain.repository_for(Product).add(product)
        product = current_domain.repository_for(Product).get(product.id)
        variant_id = str(product.variants[0].id)

        order_id = current_domain.process(
            CreateOrder(
                email="jane@example.com",
                items=json.dumps([{"product_id": str(product.id), "variant_id": variant_id, "quantity": 3}]),
                shipping_address=json.dumps(shipping_address),
                payment_method="card",
            ),
            asynchronous=False,
        )
        assert current_domain.repository_for(Product).get(product.id).variant(variant_id).stock == 2

        current_domain.process(CancelOrder(order_id=order_id), asynchronous=False)

        refreshed = current_domain.repository_for(Product).get(product.id)
        assert refreshed.variant(variant_id).stock == 5
        assert refreshed.stock == 10

    def test_cancel_shipped_order_fails(self, make_product, shipping_address):
        product = make_product(stock=10)
        order_id = _place(product, shipping_address)
        _advance(order_id, OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.SHIPPED)

        with pytest.raises(IllegalStateError) as exc:
            current_domain.process(CancelOrder(order_id=order_id), asynchronous=False)

        assert "Cannot cancel shipped or delivered orders" in str(exc.value)
        assert current_domain.repository_for(Order).get(order_id).status == OrderStatus.SHIPPED.value
        assert _stock(product) == 8

    def test_status_update_to_cancelled_also_restocks(self, make_product, shipping_address):
        product = make_product(stock=10)
        order_id = _place(product, shipping_address, quantity=4)
        _advance(order_id, OrderStatus.CANCELLED)
        assert _stock(product) == 10


class TestStatusUpdates:
    def test_walks_the_happy_path(self, make_product, shipping_address):
        product = make_product()
        order_id = _place(product, shipping_address)
        _advance(order_id, OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED)
        assert current_domain.repository_for(Order).get(order_id).status == OrderStatus.DELIVERED.value

    def test_skipping_states_is_rejected(self, make_product, shipping_address):
        product = make_product()
        order_id = _place(product, shipping_address)
        with pytest.raises(InvalidTransitionError):
            _advance(order_id, OrderStatus.DELIVERED)

    def test_tracking_number_persisted(self, make_product, shipping_address):
        product = make_product()
        order_id = _place(product, shipping_address)
        _advance(order_id, OrderStatus.CONFIRMED, OrderStatus.PROCESSING)
        current_domain.process(
            UpdateOrderStatus(order_id=order_id, status=OrderStatus.SHIPPED.value, tracking_number="1Z999"),
            asynchronous=False,
        )
        assert current_domain.repository_for(Order).get(order_id).tracking_number == "1Z999"

    def test_payment_status_update(self, make_product, shipping_address):
        product = make_product()
        order_id = _place(product, shipping_address)
        result = current_domain.process(
            UpdatePaymentStatus(order_id=order_id, payment_status=PaymentStatus.PAID.value),
            asynchronous=False,
        )
        assert result == PaymentStatus.PAID.value


class TestQueries:
    def test_get_by_id_and_number(self, make_product, shipping_address):
        product = make_product()
        order_id = _place(product, shipping_address)
        order = get_order_by_id(order_id)
        assert str(get_order_by_number(order.order_number).id) == order_id

    def test_unknown_number(self):
        with pytest.raises(ObjectNotFoundError):
            get_order_by_number("ORD0000000000")

    def test_filter_by_status(self, make_product, shipping_address):
        product = make_product(stock=50)
        first = _place(product, shipping_address, quantity=1)
        _place(product, shipping_address, quantity=1)
        _advance(first, OrderStatus.CONFIRMED)

        page = get_orders(OrderQuery(status=OrderStatus.CONFIRMED.value))
        assert page.total == 1
        assert str(page.orders[0].id) == first

    def test_filter_by_email_is_case_insensitive(self, make_product, shipping_address):
        product = make_product(stock=50)
        _place(product, shipping_address, quantity=1, email="Alice@Example.com")
        _place(product, shipping_address, quantity=1, email="bob@example.com")

        page = get_orders(OrderQuery(email="alice"))
        assert page.total == 1
        assert page.orders[0].email == "Alice@Example.com"

    def test_pagination(self, make_product, shipping_address):
        product = make_product(stock=50)
        for _ in range(3):
            _place(product, shipping_address, quantity=1)

        page = get_orders(OrderQuery(page=2, limit=2))
        assert page.total == 3
        assert len(page.orders) == 1
        assert page.has_prev is True
        assert page.has_next is False


class TestOrderSummary:
    def test_summary_counts_and_paid_revenue(self, make_product, shipping_address):
        product = make_product(price=100.0, stock=50)
        paid = _place(product, shipping_address, quantity=1)
        delivered = _place(product, shipping_address, quantity=1)
        _place(product, shipping_address, quantity=1)

        current_domain.process(
            UpdatePaymentStatus(order_id=paid, payment_status=PaymentStatus.PAID.value),
            asynchronous=False,
        )
        _advance(delivered, OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED)

        summary = get_order_summary()
        paid_total = get_order_by_id(paid).pricing.total_amount

        assert summary.total_orders == 3
        assert summary.pending_orders == 2
        assert summary.completed_orders == 1
        assert summary.total_revenue == paid_total
        assert summary.average_order_value == round(paid_total / 3, 2)

    def test_summary_for_one_user(self, make_product, shipping_address):
        product = make_product(stock=50)
        _place(product, shipping_address, quantity=1, user_id="user-001")
        _place(product, shipping_address, quantity=1, user_id="user-002")

        assert get_order_summary(user_id="user-002").total_orders == 1

    def test_empty_summary(self):
        summary = get_order_summary()
        assert summary.total_orders == 0
        assert summary.average_order_value == 0.0
