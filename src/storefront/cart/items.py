"""Cart item management — commands and handler.

Handlers return the store state, so a rejected quantity comes back as the
``error`` field rather than as an exception.
"""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.store import CartStore
from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(default=1, min_value=1)


@storefront.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)  # zero or less removes the line


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    cart_id = Identifier(required=True)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        store = CartStore.load(command.cart_id)
        product = current_domain.repository_for(Product).get(command.product_id)
        variant = product.variant(command.variant_id) if command.variant_id else None

        store.add_item(product, variant, command.quantity)
        store.save()
        return store.state()

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        store = CartStore.load(command.cart_id)
        store.update_quantity(command.item_id, command.quantity)
        store.save()
        return store.state()

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        store = CartStore.load(command.cart_id)
        store.remove_item(command.item_id)
        store.save()
        return store.state()

    @handle(ClearCart)
    def clear_cart(self, command):
        store = CartStore.load(command.cart_id)
        store.clear_cart()
        store.save()
        return store.state()
