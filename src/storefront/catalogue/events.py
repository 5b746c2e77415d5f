"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """A product was added to the catalogue."""

    __version__ = 1

    product_id: Identifier(required=True)
    sku: String(required=True)
    name: String(required=True)
    price: Float(required=True)
    stock: Integer(required=True)
    created_at: DateTime(required=True)


@storefront.event(part_of="Product")
class VariantAdded:
    """A purchasable variant was added to a product."""

    __version__ = 1

    product_id: Identifier(required=True)
    variant_id: Identifier(required=True)
    sku: String(required=True)
    name: String(required=True)
    price: Float()
    stock: Integer(required=True)


@storefront.event(part_of="Product")
class StockLevelChanged:
    """Tracked inventory for a product or one of its variants moved."""

    __version__ = 1

    product_id: Identifier(required=True)
    variant_id: Identifier()
    previous_stock: Integer(required=True)
    new_stock: Integer(required=True)
    reason: String(max_length=50)


@storefront.event(part_of="Product")
class LowStockDetected:
    """Stock fell to or below the product's low-stock threshold."""

    __version__ = 1

    product_id: Identifier(required=True)
    variant_id: Identifier()
    product_name: String(required=True)
    variant_name: String()
    sku: String(required=True)
    current_stock: Integer(required=True)
    threshold: Integer(required=True)
    detected_at: DateTime(required=True)
