"""Storefront error taxonomy, layered on Protean's exceptions.

``ValidationError`` subclasses carry the usual ``{field: [messages]}``
payload, so the FastAPI integration maps them to 400 responses without
extra wiring. Missing orders and products surface as Protean's
``ObjectNotFoundError``.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError

__all__ = [
    "ExternalServiceError",
    "IllegalStateError",
    "InvalidTransitionError",
    "ObjectNotFoundError",
    "StockExceededError",
    "ValidationError",
    "WebhookSignatureError",
]


class StockExceededError(ValidationError):
    """Requested quantity is above the stock available for a product or variant."""

    def __init__(self, message: str, available: int):
        super().__init__({"quantity": [message]})
        self.message = message
        self.available = available


class IllegalStateError(ValidationError):
    """Operation is not allowed in the aggregate's current state."""

    def __init__(self, message: str, field: str = "status"):
        super().__init__({field: [message]})
        self.message = message


class InvalidTransitionError(IllegalStateError):
    """A status change that the lifecycle state machine does not permit."""

    def __init__(self, current: str, target: str, field: str = "status"):
        super().__init__(f"Cannot transition from {current} to {target}", field=field)
        self.current = current
        self.target = target


class ExternalServiceError(Exception):
    """A call to the payment gateway or email provider failed."""

    def __init__(self, service: str, message: str):
        super().__init__(f"{service}: {message}")
        self.service = service
        self.message = message


class WebhookSignatureError(ExternalServiceError):
    """The webhook payload could not be authenticated."""

    def __init__(self, message: str = "Invalid webhook signature"):
        super().__init__("payment_gateway", message)
