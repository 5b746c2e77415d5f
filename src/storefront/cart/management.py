"""Cart management — commands and handler.

Handles cart creation, guest cart merging on sign-in, catalogue sync and
abandonment.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.store import CartStore
from storefront.domain import storefront


@storefront.command(part_of="ShoppingCart")
class CreateCart:
    """Create a new shopping cart for a signed-in user or a guest session."""

    user_id = Identifier()  # Optional for guest carts
    session_id = String(max_length=255)


@storefront.command(part_of="ShoppingCart")
class MergeGuestCart:
    """Fold a guest session cart into a signed-in user's cart."""

    cart_id = Identifier(required=True)
    guest_cart_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class SyncCart:
    """Refresh prices and stock ceilings of every line from the catalogue."""

    cart_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class AbandonCart:
    cart_id = Identifier(required=True)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        store = CartStore(ShoppingCart.create(user_id=command.user_id, session_id=command.session_id))
        return store.save()

    @handle(MergeGuestCart)
    def merge_guest_cart(self, command):
        store = CartStore.load(command.cart_id)
        guest = CartStore.load(command.guest_cart_id)

        store.merge_guest_cart(guest)
        store.save()
        guest.save()
        return store.state()

    @handle(SyncCart)
    def sync_cart(self, command):
        store = CartStore.load(command.cart_id)
        store.sync_with_catalogue()
        store.save()
        return store.state()

    @handle(AbandonCart)
    def abandon_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.abandon()
        repo.add(cart)
