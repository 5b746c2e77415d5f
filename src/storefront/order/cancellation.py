"""Order cancellation — command and handler.

Cancelling puts every line's quantity back into the stock it was taken
from: the variant's when the line names one, otherwise the product's.
"""

from collections import defaultdict

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)


def restore_inventory(order: Order) -> None:
    lines_by_product = defaultdict(list)
    for item in order.items:
        lines_by_product[str(item.product_id)].append(item)

    repo = current_domain.repository_for(Product)
    for product_id, items in lines_by_product.items():
        product = repo.get(product_id)
        for item in items:
            product.restore_stock(item.quantity, variant_id=str(item.variant_id) if item.variant_id else None)
        repo.add(product)


def cancel_and_restock(order: Order, reason=None) -> Order:
    """Cancel ``order`` and restock its lines. The caller persists the order."""
    order.cancel(reason)
    restore_inventory(order)
    logger.info("Order cancelled", order_id=str(order.id), order_number=order.order_number, reason=reason)
    return order


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        cancel_and_restock(order, command.reason)
        repo.add(order)
        return order.status
