"""Cart state container.

``CartStore`` is the contract the storefront UI talks to: it wraps one
``ShoppingCart`` together with the transient ``error`` and ``is_loading``
flags. Only the line items are persisted (``save``/``load``); the flags
start fresh every time a store is built.

Stock ceiling violations never escape the store. The rejected operation
leaves the lines untouched and the message lands in ``error``.
"""

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue.product import Product
from storefront.exceptions import StockExceededError

logger = structlog.get_logger(__name__)


class CartStore:
    def __init__(self, cart: ShoppingCart | None = None):
        self.cart = cart if cart is not None else ShoppingCart.create()
        self.error: str | None = None
        self.is_loading: bool = False

    # -------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------
    @classmethod
    def load(cls, cart_id) -> "CartStore":
        cart = current_domain.repository_for(ShoppingCart).get(cart_id)
        return cls(cart)

    def save(self) -> str:
        current_domain.repository_for(ShoppingCart).add(self.cart)
        return str(self.cart.id)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    @property
    def items(self):
        return list(self.cart.items)

    def add_item(self, product, variant=None, quantity=1) -> bool:
        """Add a catalogue product (optionally a specific variant) to the cart."""
        variant_id = str(variant.id) if variant is not None else None
        return self._attempt(
            self.cart.add_item,
            product_id=str(product.id),
            variant_id=variant_id,
            quantity=quantity,
            unit_price=product.price_for(variant_id),
            stock=variant.stock if variant is not None else product.stock,
            product_name=product.name,
            variant_name=variant.name if variant is not None else None,
        )

    def remove_item(self, item_id) -> bool:
        self.cart.remove_item(item_id)
        self.error = None
        return True

    def update_quantity(self, item_id, quantity) -> bool:
        if quantity <= 0:
            return self.remove_item(item_id)
        return self._attempt(self.cart.update_item_quantity, item_id, quantity)

    def clear_cart(self) -> None:
        self.cart.clear()
        self.error = None

    def merge_guest_cart(self, guest: "CartStore") -> list[str]:
        rejected = self.cart.merge(guest.cart)
        self.error = "; ".join(rejected) if rejected else None
        return rejected

    def _attempt(self, operation, *args, **kwargs) -> bool:
        try:
            operation(*args, **kwargs)
        except StockExceededError as exc:
            self.error = exc.message
            logger.info("Cart change rejected", cart_id=str(self.cart.id), reason=exc.message)
            return False
        self.error = None
        return True

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    def item_count(self) -> int:
        return self.cart.item_count

    def subtotal(self) -> float:
        return self.cart.subtotal

    def summary(self):
        return self.cart.summary()

    def state(self) -> dict:
        return {
            "cart_id": str(self.cart.id),
            "status": self.cart.status,
            "items": [item.snapshot() for item in self.cart.items],
            "summary": self.summary().as_dict(),
            "error": self.error,
            "is_loading": self.is_loading,
        }

    # -------------------------------------------------------------------
    # Catalogue sync
    # -------------------------------------------------------------------
    def sync_with_catalogue(self) -> None:
        """Refresh every line's price snapshot and stock ceiling."""
        self.is_loading = True
        try:
            repo = current_domain.repository_for(Product)
            for item in self.items:
                try:
                    product = repo.get(item.product_id)
                    variant_id = str(item.variant_id) if item.variant_id else None
                    self.cart.refresh_item(
                        item.id,
                        unit_price=product.price_for(variant_id),
                        stock=product.available_stock(variant_id),
                    )
                except (ObjectNotFoundError, ValidationError):
                    logger.warning(
                        "Cart line no longer in catalogue",
                        cart_id=str(self.cart.id),
                        product_id=str(item.product_id),
                    )
        finally:
            self.is_loading = False
