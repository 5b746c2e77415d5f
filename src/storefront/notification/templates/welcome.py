"""Welcome — sent when a customer registers."""

from storefront.notification.notification import NotificationType
from storefront.notification.templates.base import company_name, layout, site_url, text


class WelcomeTemplate:
    notification_type = NotificationType.WELCOME.value

    @staticmethod
    def render(context: dict) -> dict:
        company = company_name()
        header = f"<h1>Welcome to {text(company)}!</h1><p>Hello {text(context.get('name') or 'there')},</p>"
        content = (
            "<p>Thank you for joining our community! We're excited to have you on board.</p>"
            "<p>Here's what you can do with your new account:</p>"
            "<ul>"
            "<li>Browse our extensive product catalog</li>"
            "<li>Track your orders and view order history</li>"
            "<li>Manage your addresses and payment methods</li>"
            "</ul>"
            f'<p style="text-align: center;"><a href="{text(site_url())}/products" class="btn">Start Shopping</a></p>'
        )
        return {
            "subject": f"Welcome to {company}!",
            "html": layout(f"Welcome to {company}", header, content),
        }
