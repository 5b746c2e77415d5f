"""Order aggregate (CQRS) — the system of record for a placed order.

The header (number, email, addresses, amounts) and the item snapshots are
fixed at creation. Two independent state machines run on top of it:

Order status:
    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED
    PENDING | CONFIRMED | PROCESSING → CANCELLED
    any state except REFUNDED → REFUNDED (administrative marker)

Payment status:
    PENDING → PAID | FAILED
    FAILED → PAID | PENDING (retry)
    PAID → REFUNDED

Illegal moves raise ``InvalidTransitionError``. Requesting the status an
order already has is a no-op.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.exceptions import IllegalStateError, InvalidTransitionError
from storefront.order.events import (
    OrderCancelled,
    OrderCreated,
    OrderStatusChanged,
    PaymentIntentAttached,
    PaymentStatusChanged,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    REFUNDED = "Refunded"


class PaymentStatus(Enum):
    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"
    REFUNDED = "Refunded"


# State machine transition maps
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED, OrderStatus.REFUNDED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED, OrderStatus.REFUNDED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED, OrderStatus.REFUNDED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.REFUNDED},
    OrderStatus.DELIVERED: {OrderStatus.REFUNDED},
    OrderStatus.CANCELLED: {OrderStatus.REFUNDED},
    OrderStatus.REFUNDED: set(),  # Terminal
}

_VALID_PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.FAILED: {PaymentStatus.PAID, PaymentStatus.PENDING},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),  # Terminal
}

# Once goods have left the warehouse the order can no longer be cancelled
_SHIPPED_STATES = {OrderStatus.SHIPPED, OrderStatus.DELIVERED}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class Address:
    """A shipping or billing address as captured at checkout.

    The snapshot stays on the order even if the customer later edits their
    address book.
    """

    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    company = String(max_length=200)
    address_line1 = String(required=True, max_length=255)
    address_line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone = String(max_length=30)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@storefront.value_object(part_of="Order")
class OrderPricing:
    """Amounts locked in at checkout."""

    subtotal = Float(default=0.0, min_value=0.0)
    tax_amount = Float(default=0.0, min_value=0.0)
    shipping_amount = Float(default=0.0, min_value=0.0)
    discount_amount = Float(default=0.0, min_value=0.0)
    total_amount = Float(default=0.0, min_value=0.0)
    currency = String(max_length=3, default="USD")


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A line of the order with the catalogue names frozen at order time."""

    product_id = Identifier(required=True)
    variant_id = Identifier()
    product_name = String(required=True, max_length=255)
    variant_name = String(max_length=200)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    line_total = Float(required=True, min_value=0.0)

    def snapshot(self) -> dict:
        return {
            "item_id": str(self.id),
            "product_id": str(self.product_id),
            "variant_id": str(self.variant_id) if self.variant_id else None,
            "product_name": self.product_name,
            "variant_name": self.variant_name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "line_total": self.line_total,
        }


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    user_id = Identifier()  # Null for guest checkouts
    email = String(required=True, max_length=254)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(max_length=50)
    payment_intent_id = String(max_length=255)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(Address)
    billing_address = ValueObject(Address)
    pricing = ValueObject(OrderPricing)
    notes = Text()
    tracking_number = String(max_length=100)
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_number,
        email,
        items_data,
        shipping_address,
        pricing,
        billing_address=None,
        payment_method=None,
        user_id=None,
        notes=None,
    ):
        """Create a new order from checkout data.

        Args:
            order_number: The pre-allocated human-readable number.
            items_data: List of dicts with product_id, variant_id, product_name,
                        variant_name, quantity, unit_price.
            shipping_address: Address dict; also used for billing if
                              ``billing_address`` is omitted.
            pricing: Dict with subtotal, tax_amount, shipping_amount,
                     discount_amount, total_amount and optionally currency.
        """
        now = datetime.now(UTC)
        shipping = Address(**shipping_address)
        billing = Address(**billing_address) if billing_address else shipping

        items = [
            OrderItem(
                product_id=item["product_id"],
                variant_id=item.get("variant_id"),
                product_name=item["product_name"],
                variant_name=item.get("variant_name"),
                quantity=item["quantity"],
                unit_price=item["unit_price"],
                line_total=round(item["unit_price"] * item["quantity"], 2),
            )
            for item in items_data
        ]

        order = cls(
            order_number=order_number,
            user_id=user_id,
            email=email,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            payment_method=payment_method,
            items=items,
            shipping_address=shipping,
            billing_address=billing,
            pricing=OrderPricing(**pricing),
            notes=notes,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                order_number=order_number,
                user_id=str(user_id) if user_id else None,
                email=email,
                customer_name=shipping.full_name,
                items=json.dumps([item.snapshot() for item in order.items]),
                shipping_address=json.dumps(shipping.to_dict()),
                payment_method=payment_method,
                subtotal=order.pricing.subtotal,
                tax_amount=order.pricing.tax_amount,
                shipping_amount=order.pricing.shipping_amount,
                discount_amount=order.pricing.discount_amount,
                total_amount=order.pricing.total_amount,
                currency=order.pricing.currency,
                created_at=now,
            )
        )
        return order

    @property
    def customer_name(self) -> str:
        return self.shipping_address.full_name if self.shipping_address else "Customer"

    # -------------------------------------------------------------------
    # Order status
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS[current]:
            raise InvalidTransitionError(current.value, target_status.value)

    def can_transition_to(self, target_status) -> bool:
        target = OrderStatus(target_status)
        return target == OrderStatus(self.status) or target in _VALID_TRANSITIONS[OrderStatus(self.status)]

    def transition_to(self, target_status, tracking_number=None, reason=None):
        """Move the order to ``target_status``.

        Returns False when the order is already in that status. Cancellation
        goes through ``cancel`` so the shipped-order guard always applies.
        """
        target = OrderStatus(target_status)
        if target == OrderStatus(self.status):
            return False
        if target == OrderStatus.CANCELLED:
            self.cancel(reason)
            return True

        self._assert_can_transition(target)
        if tracking_number:
            self.tracking_number = tracking_number
        self._change_status(target)
        return True

    def cancel(self, reason=None):
        """Cancel the order. Restoring the stock is the caller's job."""
        current = OrderStatus(self.status)
        if current in _SHIPPED_STATES:
            raise IllegalStateError("Cannot cancel shipped or delivered orders")
        self._assert_can_transition(OrderStatus.CANCELLED)

        self.cancellation_reason = reason
        self._change_status(OrderStatus.CANCELLED)

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=current.value,
                reason=reason,
                items=json.dumps([item.snapshot() for item in self.items]),
                cancelled_at=self.updated_at,
            )
        )

    def _change_status(self, target):
        previous = self.status
        self.status = target.value
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                email=self.email,
                customer_name=self.customer_name,
                previous_status=previous,
                new_status=target.value,
                tracking_number=self.tracking_number,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Payment status
    # -------------------------------------------------------------------
    def can_update_payment_status(self, target_status) -> bool:
        current = PaymentStatus(self.payment_status)
        target = PaymentStatus(target_status)
        return target == current or target in _VALID_PAYMENT_TRANSITIONS[current]

    def update_payment_status(self, target_status):
        """Move the payment to ``target_status``. Returns False if unchanged."""
        current = PaymentStatus(self.payment_status)
        target = PaymentStatus(target_status)
        if target == current:
            return False
        if target not in _VALID_PAYMENT_TRANSITIONS[current]:
            raise InvalidTransitionError(current.value, target.value, field="payment_status")

        self.payment_status = target.value
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            PaymentStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=current.value,
                new_status=target.value,
                payment_intent_id=self.payment_intent_id,
                changed_at=now,
            )
        )
        return True

    def assert_payable(self):
        if PaymentStatus(self.payment_status) in (PaymentStatus.PAID, PaymentStatus.REFUNDED):
            raise IllegalStateError(
                f"Cannot open a payment for an order whose payment is {self.payment_status}",
                field="payment_status",
            )
        if OrderStatus(self.status) in (OrderStatus.CANCELLED, OrderStatus.REFUNDED):
            raise IllegalStateError(f"Cannot take payment for an order that is {self.status}")

    def attach_payment_intent(self, payment_intent_id):
        self.assert_payable()
        self.payment_intent_id = payment_intent_id
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            PaymentIntentAttached(
                order_id=str(self.id),
                payment_intent_id=payment_intent_id,
                attached_at=now,
            )
        )

    def as_dict(self) -> dict:
        return {
            "order_id": str(self.id),
            "order_number": self.order_number,
            "user_id": str(self.user_id) if self.user_id else None,
            "email": self.email,
            "status": self.status,
            "payment_status": self.payment_status,
            "payment_method": self.payment_method,
            "payment_intent_id": self.payment_intent_id,
            "items": [item.snapshot() for item in self.items],
            "shipping_address": self.shipping_address.to_dict() if self.shipping_address else None,
            "billing_address": self.billing_address.to_dict() if self.billing_address else None,
            "pricing": self.pricing.to_dict() if self.pricing else None,
            "notes": self.notes,
            "tracking_number": self.tracking_number,
            "cancellation_reason": self.cancellation_reason,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
