"""Product aggregate with ProductVariant entity.

Owns the inventory counters that checkout decrements and cancellation
restores. A line that references a variant draws on the variant's stock;
otherwise the product's own stock is used.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Integer, String

from storefront.catalogue.events import LowStockDetected, ProductAdded, StockLevelChanged, VariantAdded
from storefront.domain import storefront
from storefront.exceptions import StockExceededError

DEFAULT_LOW_STOCK_THRESHOLD = 5


@storefront.entity(part_of="Product")
class ProductVariant:
    name: String(required=True, max_length=200)
    sku: String(required=True, max_length=100)
    price: Float(min_value=0.0)  # None means "same as product"
    stock: Integer(default=0, min_value=0)


@storefront.aggregate
class Product:
    name: String(required=True, max_length=255)
    sku: String(required=True, max_length=100, unique=True)
    description: String(max_length=2000)
    price: Float(required=True, min_value=0.0)
    stock: Integer(default=0, min_value=0)
    low_stock_threshold: Integer(default=DEFAULT_LOW_STOCK_THRESHOLD, min_value=0)
    is_active: Boolean(default=True)
    variants: HasMany(ProductVariant)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, name, sku, price, stock=0, description=None, low_stock_threshold=DEFAULT_LOW_STOCK_THRESHOLD):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            sku=sku,
            description=description,
            price=price,
            stock=stock,
            low_stock_threshold=low_stock_threshold,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                sku=sku,
                name=name,
                price=price,
                stock=stock,
                created_at=now,
            )
        )
        return product

    def add_variant(self, name, sku, stock=0, price=None):
        variant = ProductVariant(name=name, sku=sku, price=price, stock=stock)
        self.add_variants(variant)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            VariantAdded(
                product_id=str(self.id),
                variant_id=str(variant.id),
                sku=sku,
                name=name,
                price=price,
                stock=stock,
            )
        )
        return variant

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    def variant(self, variant_id):
        """Return the variant with ``variant_id`` or raise ValidationError."""
        variant = next((v for v in self.variants if str(v.id) == str(variant_id)), None)
        if variant is None:
            raise ValidationError({"variant_id": [f"Variant {variant_id} not found"]})
        return variant

    def available_stock(self, variant_id=None) -> int:
        if variant_id:
            return self.variant(variant_id).stock
        return self.stock

    def price_for(self, variant_id=None) -> float:
        if variant_id:
            variant_price = self.variant(variant_id).price
            if variant_price is not None:
                return variant_price
        return self.price

    def variant_name(self, variant_id=None):
        return self.variant(variant_id).name if variant_id else None

    # -------------------------------------------------------------------
    # Inventory
    # -------------------------------------------------------------------
    def decrement_stock(self, quantity, variant_id=None):
        """Take ``quantity`` units out of stock. Overdrawing is rejected."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        available = self.available_stock(variant_id)
        if quantity > available:
            raise StockExceededError(
                f"Cannot fulfil {quantity} of {self.name}. Only {available} available in stock.",
                available=available,
            )
        self._set_stock(available - quantity, variant_id, reason="Sale")

    def restore_stock(self, quantity, variant_id=None):
        """Put ``quantity`` units back, the inverse of ``decrement_stock``."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        self._set_stock(self.available_stock(variant_id) + quantity, variant_id, reason="Restock")

    def set_stock(self, quantity, variant_id=None):
        """Administrative stock count."""
        if quantity < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

        self._set_stock(quantity, variant_id, reason="Adjustment")

    def _set_stock(self, new_stock, variant_id, reason):
        previous = self.available_stock(variant_id)
        if variant_id:
            self.variant(variant_id).stock = new_stock
        else:
            self.stock = new_stock

        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            StockLevelChanged(
                product_id=str(self.id),
                variant_id=str(variant_id) if variant_id else None,
                previous_stock=previous,
                new_stock=new_stock,
                reason=reason,
            )
        )

        # Only alert on the way down, and only once per crossing
        if new_stock < previous and new_stock <= self.low_stock_threshold < previous:
            variant = self.variant(variant_id) if variant_id else None
            self.raise_(
                LowStockDetected(
                    product_id=str(self.id),
                    variant_id=str(variant_id) if variant_id else None,
                    product_name=self.name,
                    variant_name=variant.name if variant else None,
                    sku=variant.sku if variant else self.sku,
                    current_stock=new_stock,
                    threshold=self.low_stock_threshold,
                    detected_at=now,
                )
            )
