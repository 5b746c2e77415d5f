"""Shared HTML layout for transactional emails."""

import os
from datetime import UTC, datetime
from html import escape

DEFAULT_COMPANY_NAME = "E-Commerce Platform"
SUPPORT_EMAIL = "support@ecommerce.com"

_STYLE = """
    body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
    .container { max-width: 600px; margin: 0 auto; padding: 20px; }
    .header { background: #f8f9fa; padding: 20px; text-align: center; border-radius: 8px; margin-bottom: 20px; }
    .header.alert { background: #fff3cd; }
    .content { background: #fff; border: 1px solid #e9ecef; border-radius: 8px; padding: 20px; margin-bottom: 20px; }
    .footer { text-align: center; color: #6c757d; font-size: 14px; margin-top: 30px; }
    .btn { display: inline-block; padding: 12px 24px; background: #007bff; color: white; text-decoration: none; border-radius: 4px; }
    table { width: 100%; border-collapse: collapse; }
    td, th { padding: 8px; border-bottom: 1px solid #e9ecef; text-align: left; }
"""


def company_name() -> str:
    return os.environ.get("COMPANY_NAME", DEFAULT_COMPANY_NAME)


def site_url() -> str:
    return os.environ.get("SITE_URL", "http://localhost:3000").rstrip("/")


def money(amount) -> str:
    return f"${float(amount or 0):,.2f}"


def text(value) -> str:
    return escape(str(value)) if value is not None else ""


def layout(title: str, header: str, content: str, footer: str | None = None, alert: bool = False) -> str:
    """Wrap already-escaped ``header`` and ``content`` fragments in the page shell."""
    if footer is None:
        footer = (
            f"<p>Questions? Contact us at {SUPPORT_EMAIL}</p>"
            f"<p>&copy; {datetime.now(UTC).year} {text(company_name())}. All rights reserved.</p>"
        )
    header_class = "header alert" if alert else "header"
    return (
        "<!DOCTYPE html>\n"
        '<html>\n<head>\n<meta charset="utf-8">\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"<title>{text(title)}</title>\n<style>{_STYLE}</style>\n</head>\n"
        '<body>\n<div class="container">\n'
        f'<div class="{header_class}">{header}</div>\n'
        f'<div class="content">{content}</div>\n'
        f'<div class="footer">{footer}</div>\n'
        "</div>\n</body>\n</html>\n"
    )
