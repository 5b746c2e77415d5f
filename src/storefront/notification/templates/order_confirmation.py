"""Order confirmation — sent when an order is placed."""

from storefront.notification.notification import NotificationType
from storefront.notification.templates.base import layout, money, text


def _address_lines(address: dict) -> str:
    if not address:
        return ""
    lines = [
        f"{address.get('first_name', '')} {address.get('last_name', '')}".strip(),
        address.get("company"),
        address.get("address_line1"),
        address.get("address_line2"),
        f"{address.get('city', '')}, {address.get('state', '')} {address.get('postal_code', '')}",
        address.get("country"),
    ]
    return "<br>".join(text(line) for line in lines if line)


class OrderConfirmationTemplate:
    notification_type = NotificationType.ORDER_CONFIRMATION.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        rows = "".join(
            "<tr>"
            f"<td>{text(item.get('product_name'))}"
            f"{' - ' + text(item['variant_name']) if item.get('variant_name') else ''}</td>"
            f"<td>{text(item.get('quantity'))}</td>"
            f"<td>{money(item.get('unit_price'))}</td>"
            f"<td>{money(item.get('line_total'))}</td>"
            "</tr>"
            for item in context.get("items", [])
        )
        shipping = context.get("shipping_amount", 0)

        content = (
            "<h2>Order Details</h2>"
            "<table><tr><th>Item</th><th>Qty</th><th>Price</th><th>Total</th></tr>"
            f"{rows}</table>"
            f"<p>Subtotal: {money(context.get('subtotal'))}</p>"
            f"<p>Tax: {money(context.get('tax_amount'))}</p>"
            f"<p>Shipping: {'Free' if not shipping else money(shipping)}</p>"
            f"<p><strong>Total: {money(context.get('total_amount'))}</strong></p>"
            "<h3>Shipping Address</h3>"
            f"<p>{_address_lines(context.get('shipping_address') or {})}</p>"
        )
        header = (
            "<h1>Thank you for your order!</h1>"
            f"<p>Hello {text(context.get('customer_name') or 'Customer')},</p>"
            f"<p>Your order <strong>{text(order_number)}</strong> has been received.</p>"
        )
        return {
            "subject": f"Order Confirmation - {order_number}",
            "html": layout("Order Confirmation", header, content),
        }
