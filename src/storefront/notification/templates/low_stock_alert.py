"""Low stock alert — internal notification to the store admins."""

from storefront.notification.notification import NotificationType
from storefront.notification.templates.base import company_name, layout, text


class LowStockAlertTemplate:
    notification_type = NotificationType.LOW_STOCK_ALERT.value

    @staticmethod
    def render(context: dict) -> dict:
        product_name = context.get("product_name", "Unknown product")
        if context.get("variant_name"):
            product_name = f"{product_name} ({context['variant_name']})"

        content = (
            "<h2>Product Running Low on Stock</h2>"
            f"<p><strong>Product:</strong> {text(product_name)}</p>"
            f"<p><strong>SKU:</strong> {text(context.get('sku'))}</p>"
            f"<p><strong>Current Stock:</strong> {text(context.get('current_stock'))} units</p>"
            "<p>This product is running low on stock. Consider restocking soon to avoid stockouts.</p>"
        )
        return {
            "subject": f"Low Stock Alert - {product_name}",
            "html": layout(
                "Low Stock Alert",
                "<h1>Low Stock Alert</h1>",
                content,
                footer=f"<p>{text(company_name())} Admin System</p>",
                alert=True,
            ),
        }
