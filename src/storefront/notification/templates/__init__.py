"""Template registry — maps NotificationType values to template classes.

Each template renders ``{"subject": ..., "html": ...}`` from a context dict.
"""

from storefront.notification.notification import NotificationType
from storefront.notification.templates.low_stock_alert import LowStockAlertTemplate
from storefront.notification.templates.order_confirmation import OrderConfirmationTemplate
from storefront.notification.templates.order_status_update import OrderStatusUpdateTemplate
from storefront.notification.templates.password_reset import PasswordResetTemplate
from storefront.notification.templates.welcome import WelcomeTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.ORDER_CONFIRMATION.value: OrderConfirmationTemplate,
    NotificationType.ORDER_STATUS_UPDATE.value: OrderStatusUpdateTemplate,
    NotificationType.WELCOME.value: WelcomeTemplate,
    NotificationType.PASSWORD_RESET.value: PasswordResetTemplate,
    NotificationType.LOW_STOCK_ALERT.value: LowStockAlertTemplate,
}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
