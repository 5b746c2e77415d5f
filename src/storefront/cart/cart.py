"""Shopping Cart aggregate (CQRS).

A cart is a list of line items keyed by (product, variant). Each line keeps
a unit price snapshot and the stock ceiling that applied when it was last
mutated. Every quantity change is checked against that ceiling *before*
anything is touched: an overflowing request is rejected as a whole, never
clamped.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.cart.events import (
    CartAbandoned,
    CartCleared,
    CartConverted,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CartsMerged,
)
from storefront.cart.pricing import summarize
from storefront.domain import storefront
from storefront.exceptions import StockExceededError


class CartStatus(Enum):
    ACTIVE = "Active"
    CONVERTED = "Converted"
    MERGED = "Merged"
    ABANDONED = "Abandoned"


def _ref(value):
    """Normalise an optional identifier for comparison."""
    return str(value) if value else None


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    product_name = String(max_length=255)
    variant_name = String(max_length=200)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    stock_ceiling = Integer(required=True, min_value=0)
    added_at = DateTime()

    @property
    def line_total(self) -> float:
        return round(self.unit_price * self.quantity, 2)

    def snapshot(self) -> dict:
        return {
            "item_id": str(self.id),
            "product_id": str(self.product_id),
            "variant_id": _ref(self.variant_id),
            "product_name": self.product_name,
            "variant_name": self.variant_name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "line_total": self.line_total,
            "stock_ceiling": self.stock_ceiling,
        }


@storefront.aggregate
class ShoppingCart:
    user_id = Identifier()  # Nullable for guest carts
    session_id = String(max_length=255)  # For guest cart identification
    items = HasMany(CartItem)
    status = String(choices=CartStatus, default=CartStatus.ACTIVE.value)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def cart_must_have_items_to_convert(self):
        if self.status == CartStatus.CONVERTED.value and not self.items:
            raise ValidationError({"cart": ["Cannot convert an empty cart to an order"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id=None, session_id=None):
        now = datetime.now(UTC)
        return cls(
            user_id=user_id,
            session_id=session_id,
            status=CartStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def subtotal(self) -> float:
        return self.summary().subtotal

    def summary(self, discount=0):
        return summarize(self.items, discount=discount)

    def find_item(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def find_line(self, product_id, variant_id=None):
        return next(
            (
                i
                for i in self.items
                if str(i.product_id) == str(product_id) and _ref(i.variant_id) == _ref(variant_id)
            ),
            None,
        )

    def _assert_active(self, action):
        if CartStatus(self.status) != CartStatus.ACTIVE:
            raise ValidationError({"status": [f"Cannot {action} a cart that is {self.status.lower()}"]})

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(
        self,
        product_id,
        quantity,
        unit_price,
        stock,
        variant_id=None,
        product_name=None,
        variant_name=None,
    ):
        """Add ``quantity`` of a product/variant, merging with an existing line.

        ``stock`` is the quantity currently available for the product (or the
        variant, when one is given).
        """
        self._assert_active("add items to")
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.find_line(product_id, variant_id)
        if existing:
            if existing.quantity + quantity > stock:
                raise StockExceededError(
                    f"Cannot add more items. Only {stock} available in stock.",
                    available=stock,
                )
        elif quantity > stock:
            raise StockExceededError(
                f"Cannot add {quantity} items. Only {stock} available in stock.",
                available=stock,
            )

        now = datetime.now(UTC)

        if existing:
            existing.quantity += quantity
            existing.unit_price = unit_price
            existing.stock_ceiling = stock
            item_id = str(existing.id)
        else:
            item = CartItem(
                product_id=product_id,
                variant_id=variant_id,
                product_name=product_name,
                variant_name=variant_name,
                quantity=quantity,
                unit_price=unit_price,
                stock_ceiling=stock,
                added_at=now,
            )
            self.add_items(item)
            item_id = str(item.id)

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=item_id,
                product_id=str(product_id),
                variant_id=_ref(variant_id),
                quantity=quantity,
            )
        )
        return item_id

    def update_item_quantity(self, item_id, new_quantity):
        """Set a line's quantity. Zero or less removes the line."""
        if new_quantity <= 0:
            return self.remove_item(item_id)

        self._assert_active("update items in")

        item = self.find_item(item_id)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})

        if new_quantity > item.stock_ceiling:
            raise StockExceededError(
                f"Cannot update quantity. Only {item.stock_ceiling} available in stock.",
                available=item.stock_ceiling,
            )

        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )
        return True

    def refresh_item(self, item_id, unit_price, stock):
        """Bring a line's price snapshot and stock ceiling up to date."""
        item = self.find_item(item_id)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})

        item.unit_price = unit_price
        item.stock_ceiling = stock
        self.updated_at = datetime.now(UTC)

    def remove_item(self, item_id):
        """Remove a line. Removing a line that is not there is a no-op."""
        self._assert_active("remove items from")

        item = self.find_item(item_id)
        if item is None:
            return False

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item_id),
            )
        )
        return True

    def clear(self):
        self._assert_active("clear")

        removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        if removed:
            self.raise_(CartCleared(cart_id=str(self.id), items_removed=removed))

    # -------------------------------------------------------------------
    # Cart merging (guest → signed-in user)
    # -------------------------------------------------------------------
    def merge(self, guest_cart):
        """Fold the lines of ``guest_cart`` into this cart.

        Each guest line goes through ``add_item`` so the stock ceiling still
        holds. Lines that would overflow are skipped; their messages are
        returned.
        """
        self._assert_active("merge into")
        if str(guest_cart.id) == str(self.id):
            raise ValidationError({"cart_id": ["Cannot merge a cart into itself"]})

        rejected = []
        merged = 0
        for line in guest_cart.items:
            try:
                self.add_item(
                    product_id=line.product_id,
                    variant_id=line.variant_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    stock=line.stock_ceiling,
                    product_name=line.product_name,
                    variant_name=line.variant_name,
                )
                merged += 1
            except StockExceededError as exc:
                rejected.append(exc.message)

        guest_cart.status = CartStatus.MERGED.value
        guest_cart.updated_at = datetime.now(UTC)

        self.raise_(
            CartsMerged(
                cart_id=str(self.id),
                source_cart_id=str(guest_cart.id),
                items_merged_count=merged,
                items_rejected_count=len(rejected),
            )
        )
        return rejected

    # -------------------------------------------------------------------
    # Cart lifecycle
    # -------------------------------------------------------------------
    def convert_to_order(self, order_id=None):
        """Mark the cart as checked out."""
        self._assert_active("check out")
        if not self.items:
            raise ValidationError({"cart": ["Cannot convert an empty cart"]})

        items_snapshot = [item.snapshot() for item in self.items]

        self.status = CartStatus.CONVERTED.value
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartConverted(
                cart_id=str(self.id),
                order_id=order_id,
                user_id=_ref(self.user_id),
                items=json.dumps(items_snapshot),
            )
        )

    def abandon(self):
        self._assert_active("abandon")

        self.status = CartStatus.ABANDONED.value
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            CartAbandoned(
                cart_id=str(self.id),
                abandoned_at=now,
            )
        )
