"""Payment gateway factory.

``PAYMENT_GATEWAY`` picks the adapter: ``fake`` (default) for development
and tests, ``stripe`` for production (needs ``STRIPE_SECRET_KEY``).
Tests swap implementations with set_gateway() / reset_gateway().
"""

import os

from storefront.payment.gateway.fake_adapter import FakeGateway
from storefront.payment.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def _build_gateway() -> PaymentGateway:
    adapter = os.environ.get("PAYMENT_GATEWAY", "fake").lower()
    if adapter == "stripe":
        from storefront.payment.gateway.stripe_adapter import StripeGateway

        return StripeGateway(api_key=os.environ.get("STRIPE_SECRET_KEY", ""))
    if adapter == "fake":
        return FakeGateway()
    raise ValueError(f"Unknown payment gateway: {adapter}")


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, building it on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None
