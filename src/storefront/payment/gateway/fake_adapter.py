"""Configurable fake payment gateway for development and testing.

Simulates the gateway without any external calls. It can be told to fail
at runtime, records every call for assertions, and accepts webhooks signed
with the literal signature ``test-signature``.
"""

import json
from uuid import uuid4

from storefront.exceptions import ExternalServiceError, WebhookSignatureError
from storefront.payment.gateway.port import (
    CustomerResult,
    PaymentGateway,
    PaymentIntentResult,
    PaymentMethodResult,
    RefundResult,
    WebhookEvent,
)

TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.calls: list[dict] = []
        self.intents: dict[str, PaymentIntentResult] = {}
        self.customers: dict[str, CustomerResult] = {}
        self.payment_methods: dict[str, PaymentMethodResult] = {}

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def _record(self, method: str, **kwargs) -> None:
        self.calls.append({"method": method, **kwargs})
        if not self.should_succeed:
            raise ExternalServiceError("payment_gateway", self.failure_reason)

    def _intent(self, payment_intent_id: str) -> PaymentIntentResult:
        intent = self.intents.get(payment_intent_id)
        if intent is None:
            raise ExternalServiceError("payment_gateway", f"No such payment_intent: {payment_intent_id}")
        return intent

    def create_payment_intent(self, amount, currency, metadata, payment_method_id=None, confirm=False):
        self._record(
            "create_payment_intent",
            amount=amount,
            currency=currency,
            metadata=metadata,
            payment_method_id=payment_method_id,
            confirm=confirm,
        )
        intent_id = f"pi_fake_{uuid4().hex[:12]}"
        intent = PaymentIntentResult(
            id=intent_id,
            amount=amount,
            currency=currency,
            status="succeeded" if confirm else "requires_confirmation",
            client_secret=f"{intent_id}_secret_{uuid4().hex[:8]}",
            metadata=dict(metadata),
        )
        self.intents[intent_id] = intent
        return intent

    def confirm_payment_intent(self, payment_intent_id, payment_method_id=None):
        self._record("confirm_payment_intent", payment_intent_id=payment_intent_id, payment_method_id=payment_method_id)
        intent = self._intent(payment_intent_id)
        confirmed = PaymentIntentResult(
            id=intent.id,
            amount=intent.amount,
            currency=intent.currency,
            status="succeeded",
            client_secret=intent.client_secret,
            metadata=intent.metadata,
        )
        self.intents[intent.id] = confirmed
        return confirmed

    def retrieve_payment_intent(self, payment_intent_id):
        self._record("retrieve_payment_intent", payment_intent_id=payment_intent_id)
        return self._intent(payment_intent_id)

    def create_refund(self, payment_intent_id, amount=None, reason=None):
        self._record("create_refund", payment_intent_id=payment_intent_id, amount=amount, reason=reason)
        intent = self.intents.get(payment_intent_id)
        return RefundResult(
            id=f"re_fake_{uuid4().hex[:12]}",
            payment_intent_id=payment_intent_id,
            amount=amount if amount is not None else (intent.amount if intent else 0),
            status="succeeded",
            reason=reason,
        )

    def construct_webhook_event(self, payload, signature, secret):  # noqa: ARG002
        self.calls.append({"method": "construct_webhook_event", "signature": signature})
        if signature != TEST_SIGNATURE:
            raise WebhookSignatureError()
        try:
            body = json.loads(payload)
        except (TypeError, ValueError) as exc:
            raise WebhookSignatureError(f"Invalid payload: {exc}") from exc

        return WebhookEvent(
            id=body.get("id") or f"evt_fake_{uuid4().hex[:12]}",
            type=body["type"],
            data=body.get("data", {}).get("object", {}),
        )

    def create_customer(self, email, name=None, metadata=None):
        self._record("create_customer", email=email, name=name, metadata=metadata)
        customer = CustomerResult(id=f"cus_fake_{uuid4().hex[:12]}", email=email, name=name)
        self.customers[customer.id] = customer
        return customer

    def attach_payment_method(self, payment_method_id, customer_id):
        self._record("attach_payment_method", payment_method_id=payment_method_id, customer_id=customer_id)
        method = PaymentMethodResult(id=payment_method_id, type="card", customer_id=customer_id, brand="visa", last4="4242")
        self.payment_methods[payment_method_id] = method
        return method

    def list_payment_methods(self, customer_id, type="card"):
        self._record("list_payment_methods", customer_id=customer_id, type=type)
        return [m for m in self.payment_methods.values() if m.customer_id == customer_id and m.type == type]
