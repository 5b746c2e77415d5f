"""Payment gateway port (abstract interface).

Amounts cross this boundary in minor currency units (cents). Adapters
translate the gateway's own objects into the frozen result types below, so
nothing outside an adapter depends on a gateway SDK.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class PaymentIntentResult:
    id: str
    amount: int
    currency: str
    status: str
    client_secret: str | None = None
    metadata: dict = field(default_factory=dict)


@dataclass(frozen=True)
class RefundResult:
    id: str
    payment_intent_id: str
    amount: int
    status: str
    reason: str | None = None


@dataclass(frozen=True)
class CustomerResult:
    id: str
    email: str
    name: str | None = None


@dataclass(frozen=True)
class PaymentMethodResult:
    id: str
    type: str
    customer_id: str | None = None
    brand: str | None = None
    last4: str | None = None


@dataclass(frozen=True)
class WebhookEvent:
    """A verified gateway callback. ``data`` is the event's payload object."""

    id: str
    type: str
    data: dict = field(default_factory=dict)


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: dict,
        payment_method_id: str | None = None,
        confirm: bool = False,
    ) -> PaymentIntentResult: ...

    @abstractmethod
    def confirm_payment_intent(self, payment_intent_id: str, payment_method_id: str | None = None) -> PaymentIntentResult: ...

    @abstractmethod
    def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntentResult: ...

    @abstractmethod
    def create_refund(self, payment_intent_id: str, amount: int | None = None, reason: str | None = None) -> RefundResult:
        """Refund all of a captured intent, or ``amount`` cents of it."""
        ...

    @abstractmethod
    def construct_webhook_event(self, payload: str | bytes, signature: str, secret: str) -> WebhookEvent:
        """Verify the signature and parse the payload.

        Raises WebhookSignatureError when the payload is not authentic.
        """
        ...

    @abstractmethod
    def create_customer(self, email: str, name: str | None = None, metadata: dict | None = None) -> CustomerResult: ...

    @abstractmethod
    def attach_payment_method(self, payment_method_id: str, customer_id: str) -> PaymentMethodResult: ...

    @abstractmethod
    def list_payment_methods(self, customer_id: str, type: str = "card") -> list[PaymentMethodResult]: ...
