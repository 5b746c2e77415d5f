"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderCreated:
    """A new order was placed from a checkout submission."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier()
    email = String(required=True)
    customer_name = String()
    items = Text(required=True)  # JSON: list of item snapshots
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String()
    subtotal = Float(required=True)
    tax_amount = Float(required=True)
    shipping_amount = Float(required=True)
    discount_amount = Float(required=True)
    total_amount = Float(required=True)
    currency = String(required=True)
    created_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """The order moved to a new lifecycle status."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    email = String(required=True)
    customer_name = String()
    previous_status = String(required=True)
    new_status = String(required=True)
    tracking_number = String()
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled before shipping; its stock goes back on the shelf."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    reason = String()
    items = Text(required=True)  # JSON: lines whose stock was restored
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentStatusChanged:
    """The payment status of the order changed, usually from a gateway webhook."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    payment_intent_id = String()
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentIntentAttached:
    """A gateway payment intent was opened for the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_intent_id = String(required=True)
    attached_at = DateTime(required=True)
