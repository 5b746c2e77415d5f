"""Checkout — turns an active cart into an order.

Lines are priced from the cart's snapshots; the amounts come from the same
calculator the cart summary uses, so the customer pays what they saw.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import CartStatus, ShoppingCart
from storefront.domain import storefront
from storefront.order.creation import load_json, place_order
from storefront.order.order import Order


@storefront.command(part_of="Order")
class Checkout:
    cart_id = Identifier(required=True)
    email = String(required=True, max_length=254)
    shipping_address = Text(required=True)  # JSON: address dict
    billing_address = Text()  # JSON: address dict
    payment_method = String(required=True, max_length=50)
    notes = Text()


@storefront.command_handler(part_of=Order)
class CheckoutHandler:
    @handle(Checkout)
    def checkout(self, command):
        cart_repo = current_domain.repository_for(ShoppingCart)
        cart = cart_repo.get(command.cart_id)
        if CartStatus(cart.status) != CartStatus.ACTIVE:
            raise ValidationError({"cart_id": [f"Cart is {cart.status.lower()}"]})
        if not cart.items:
            raise ValidationError({"cart": ["Cannot check out an empty cart"]})

        items_data = [
            {
                "product_id": str(item.product_id),
                "variant_id": str(item.variant_id) if item.variant_id else None,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
            }
            for item in cart.items
        ]

        order = place_order(
            email=command.email,
            items_data=items_data,
            shipping_address=load_json(command.shipping_address),
            billing_address=load_json(command.billing_address) if command.billing_address else None,
            payment_method=command.payment_method,
            user_id=str(cart.user_id) if cart.user_id else None,
            notes=command.notes,
        )

        cart.convert_to_order(order_id=str(order.id))
        cart_repo.add(cart)
        return str(order.id)
