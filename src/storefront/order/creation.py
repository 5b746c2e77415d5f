"""Order creation — command and handler.

Placing an order allocates the order number, freezes the catalogue names
and prices of each line, and takes the ordered quantities out of stock.
Stock is re-checked here, inside the same unit of work as the decrement,
so an overdrawn line aborts the whole checkout and nothing is written.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.pricing import summarize
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.order.numbering import next_order_number
from storefront.order.order import Order

logger = structlog.get_logger(__name__)

_AMOUNT_FIELDS = ("subtotal", "tax_amount", "shipping_amount", "discount_amount", "total_amount")


@storefront.command(part_of="Order")
class CreateOrder:
    user_id = Identifier()  # Null for guest checkout
    email = String(required=True, max_length=254)
    items = Text(required=True)  # JSON: list of {product_id, variant_id, quantity, unit_price}
    shipping_address = Text(required=True)  # JSON: address dict
    billing_address = Text()  # JSON: address dict, defaults to shipping
    payment_method = String(required=True, max_length=50)
    subtotal = Float(min_value=0.0)
    tax_amount = Float(min_value=0.0)
    shipping_amount = Float(min_value=0.0)
    discount_amount = Float(min_value=0.0)
    total_amount = Float(min_value=0.0)
    currency = String(max_length=3, default="USD")
    notes = Text()


def load_json(value):
    return json.loads(value) if isinstance(value, str) else value


def _pricing(lines, amounts: dict, currency: str) -> dict:
    """Use the submitted amounts when complete, otherwise price the lines."""
    if amounts.get("total_amount") is not None:
        if amounts["total_amount"] <= 0:
            raise ValidationError({"total_amount": ["Total amount must be positive"]})
        pricing = {name: amounts.get(name) or 0.0 for name in _AMOUNT_FIELDS}
    else:
        summary = summarize(lines, discount=amounts.get("discount_amount") or 0)
        pricing = {
            "subtotal": summary.subtotal,
            "tax_amount": summary.tax,
            "shipping_amount": summary.shipping,
            "discount_amount": summary.discount,
            "total_amount": summary.total,
        }
    pricing["currency"] = currency or "USD"
    return pricing


def place_order(
    email,
    items_data,
    shipping_address,
    payment_method,
    billing_address=None,
    user_id=None,
    notes=None,
    amounts=None,
    currency="USD",
) -> Order:
    """Create and persist an order, decrementing inventory for every line."""
    if not items_data:
        raise ValidationError({"items": ["An order needs at least one item"]})

    product_repo = current_domain.repository_for(Product)
    products = {}  # Each product is loaded and saved once, however many lines reference it
    lines = []

    for raw in items_data:
        quantity = int(raw.get("quantity") or 0)
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        product_id = str(raw["product_id"])
        variant_id = str(raw["variant_id"]) if raw.get("variant_id") else None
        if product_id not in products:
            products[product_id] = product_repo.get(product_id)
        product = products[product_id]

        unit_price = raw.get("unit_price")
        if unit_price is None:
            unit_price = product.price_for(variant_id)
        elif unit_price <= 0:
            raise ValidationError({"unit_price": ["Unit price must be positive"]})

        product.decrement_stock(quantity, variant_id=variant_id)
        lines.append(
            {
                "product_id": product_id,
                "variant_id": variant_id,
                "product_name": product.name,
                "variant_name": product.variant_name(variant_id),
                "quantity": quantity,
                "unit_price": unit_price,
            }
        )

    order = Order.create(
        order_number=next_order_number(),
        email=email,
        items_data=lines,
        shipping_address=shipping_address,
        billing_address=billing_address,
        pricing=_pricing(lines, amounts or {}, currency),
        payment_method=payment_method,
        user_id=user_id,
        notes=notes,
    )

    current_domain.repository_for(Order).add(order)
    for product in products.values():
        product_repo.add(product)

    logger.info(
        "Order placed",
        order_id=str(order.id),
        order_number=order.order_number,
        total_amount=order.pricing.total_amount,
        item_count=len(lines),
    )
    return order


@storefront.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        order = place_order(
            email=command.email,
            items_data=load_json(command.items),
            shipping_address=load_json(command.shipping_address),
            billing_address=load_json(command.billing_address) if command.billing_address else None,
            payment_method=command.payment_method,
            user_id=command.user_id,
            notes=command.notes,
            amounts={name: getattr(command, name) for name in _AMOUNT_FIELDS},
            currency=command.currency,
        )
        return str(order.id)
