"""Email channel registry.

``EMAIL_ADAPTER`` selects the adapter: ``fake`` (default) records messages
in memory, ``smtp`` delivers through ``SMTP_HOST``/``SMTP_PORT`` with
optional ``SMTP_USERNAME``/``SMTP_PASSWORD``. The sender address comes from
``FROM_EMAIL``.
"""

import os

from storefront.notification.channel.email_port import EmailPort

DEFAULT_FROM_EMAIL = "noreply@ecommerce.com"

_email_channel: EmailPort | None = None


def from_email() -> str:
    return os.environ.get("FROM_EMAIL", DEFAULT_FROM_EMAIL)


def _build_channel() -> EmailPort:
    adapter = os.environ.get("EMAIL_ADAPTER", "fake").lower()
    if adapter == "smtp":
        from storefront.notification.channel.smtp_email import SMTPEmailAdapter

        return SMTPEmailAdapter(
            host=os.environ.get("SMTP_HOST", "localhost"),
            port=int(os.environ.get("SMTP_PORT", "587")),
            username=os.environ.get("SMTP_USERNAME"),
            password=os.environ.get("SMTP_PASSWORD"),
            from_email=from_email(),
            use_tls=os.environ.get("SMTP_USE_TLS", "true").lower() != "false",
        )
    if adapter == "fake":
        from storefront.notification.channel.fake_email import FakeEmailAdapter

        return FakeEmailAdapter()
    raise ValueError(f"Unknown email adapter: {adapter}")


def get_email_channel() -> EmailPort:
    """Return the configured email adapter (singleton)."""
    global _email_channel
    if _email_channel is None:
        _email_channel = _build_channel()
    return _email_channel


def set_email_channel(channel: EmailPort) -> None:
    global _email_channel
    _email_channel = channel


def reset_channels() -> None:
    """Drop the adapter singleton (useful for testing)."""
    global _email_channel
    _email_channel = None
