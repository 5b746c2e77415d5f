"""Low stock alerts for the store admins."""

from protean.utils.mixins import handle

from storefront.catalogue.events import LowStockDetected
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.notification.dispatcher import NotificationDispatcher


@storefront.event_handler(part_of=Product)
class LowStockAlertHandler:
    @handle(LowStockDetected)
    def on_low_stock_detected(self, event: LowStockDetected) -> None:
        NotificationDispatcher().send_low_stock_alert(
            {
                "product_name": event.product_name,
                "variant_name": event.variant_name,
                "sku": event.sku,
                "current_stock": event.current_stock,
                "threshold": event.threshold,
            },
            source_event_id=str(event.product_id),
        )
