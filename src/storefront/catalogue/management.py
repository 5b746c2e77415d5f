"""Catalogue management — product, variant and stock commands with their handler."""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import DEFAULT_LOW_STOCK_THRESHOLD, Product
from storefront.domain import storefront


@storefront.command(part_of="Product")
class AddProduct:
    name: String(required=True, max_length=255)
    sku: String(required=True, max_length=100)
    description: String(max_length=2000)
    price: Float(required=True, min_value=0.0)
    stock: Integer(default=0, min_value=0)
    low_stock_threshold: Integer(default=DEFAULT_LOW_STOCK_THRESHOLD, min_value=0)


@storefront.command(part_of="Product")
class AddVariant:
    product_id: Identifier(required=True)
    name: String(required=True, max_length=200)
    sku: String(required=True, max_length=100)
    price: Float(min_value=0.0)
    stock: Integer(default=0, min_value=0)


@storefront.command(part_of="Product")
class UpdateStock:
    """Set the counted stock of a product, or of one of its variants."""

    product_id: Identifier(required=True)
    variant_id: Identifier()
    stock: Integer(required=True, min_value=0)


@storefront.command_handler(part_of=Product)
class CatalogueHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.create(
            name=command.name,
            sku=command.sku,
            description=command.description,
            price=command.price,
            stock=command.stock,
            low_stock_threshold=command.low_stock_threshold,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(AddVariant)
    def add_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        variant = product.add_variant(
            name=command.name,
            sku=command.sku,
            price=command.price,
            stock=command.stock,
        )
        repo.add(product)
        return str(variant.id)

    @handle(UpdateStock)
    def update_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.set_stock(command.stock, variant_id=command.variant_id)
        repo.add(product)
