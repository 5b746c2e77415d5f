"""Stripe payment gateway adapter.

Thin translation layer over the ``stripe`` SDK. SDK resources are plain
``StripeObject`` instances, not dicts, so each one is converted with
``to_dict()`` before it is read. Every SDK failure is re-raised as
``ExternalServiceError`` so callers never see Stripe types.
"""

import stripe
import structlog

from storefront.exceptions import ExternalServiceError, WebhookSignatureError
from storefront.payment.gateway.port import (
    CustomerResult,
    PaymentGateway,
    PaymentIntentResult,
    PaymentMethodResult,
    RefundResult,
    WebhookEvent,
)

logger = structlog.get_logger(__name__)


def _intent_result(intent: dict) -> PaymentIntentResult:
    return PaymentIntentResult(
        id=intent["id"],
        amount=intent["amount"],
        currency=intent["currency"],
        status=intent["status"],
        client_secret=intent.get("client_secret"),
        metadata=intent.get("metadata") or {},
    )


def _method_result(method: dict) -> PaymentMethodResult:
    card = method.get("card") or {}
    return PaymentMethodResult(
        id=method["id"],
        type=method["type"],
        customer_id=method.get("customer"),
        brand=card.get("brand"),
        last4=card.get("last4"),
    )


class StripeGateway(PaymentGateway):
    def __init__(self, api_key: str) -> None:
        if not api_key:
            raise ValueError("A Stripe secret key is required")
        self.api_key = api_key

    def _call(self, operation: str, fn, **params):
        try:
            return fn(api_key=self.api_key, **params)
        except stripe.StripeError as exc:
            logger.error("Stripe call failed", operation=operation, error=str(exc))
            raise ExternalServiceError("stripe", exc.user_message or str(exc)) from exc

    def _fetch(self, operation: str, fn, **params) -> dict:
        return self._call(operation, fn, **params).to_dict()

    def create_payment_intent(self, amount, currency, metadata, payment_method_id=None, confirm=False):
        params = {
            "amount": amount,
            "currency": currency,
            "metadata": metadata,
            "confirmation_method": "manual",
            "confirm": confirm,
        }
        if payment_method_id:
            params["payment_method"] = payment_method_id
        return _intent_result(self._fetch("create_payment_intent", stripe.PaymentIntent.create, **params))

    def confirm_payment_intent(self, payment_intent_id, payment_method_id=None):
        params = {"payment_method": payment_method_id} if payment_method_id else {}
        intent = self._fetch("confirm_payment_intent", stripe.PaymentIntent.confirm, intent=payment_intent_id, **params)
        return _intent_result(intent)

    def retrieve_payment_intent(self, payment_intent_id):
        intent = self._fetch("retrieve_payment_intent", stripe.PaymentIntent.retrieve, id=payment_intent_id)
        return _intent_result(intent)

    def create_refund(self, payment_intent_id, amount=None, reason=None):
        params = {"payment_intent": payment_intent_id}
        if amount is not None:
            params["amount"] = amount
        if reason:
            params["reason"] = reason
        refund = self._fetch("create_refund", stripe.Refund.create, **params)
        return RefundResult(
            id=refund["id"],
            payment_intent_id=payment_intent_id,
            amount=refund["amount"],
            status=refund["status"],
            reason=refund.get("reason"),
        )

    def construct_webhook_event(self, payload, signature, secret):
        try:
            event = stripe.Webhook.construct_event(payload, signature, secret).to_dict()
        except stripe.SignatureVerificationError as exc:
            logger.warning("Stripe webhook signature rejected", error=str(exc))
            raise WebhookSignatureError() from exc
        except ValueError as exc:
            raise WebhookSignatureError(f"Invalid payload: {exc}") from exc

        return WebhookEvent(
            id=event["id"],
            type=event["type"],
            data=(event.get("data") or {}).get("object") or {},
        )

    def create_customer(self, email, name=None, metadata=None):
        customer = self._fetch("create_customer", stripe.Customer.create, email=email, name=name, metadata=metadata or {})
        return CustomerResult(id=customer["id"], email=customer["email"], name=customer.get("name"))

    def attach_payment_method(self, payment_method_id, customer_id):
        method = self._fetch(
            "attach_payment_method",
            stripe.PaymentMethod.attach,
            payment_method=payment_method_id,
            customer=customer_id,
        )
        return _method_result(method)

    def list_payment_methods(self, customer_id, type="card"):
        methods = self._call("list_payment_methods", stripe.PaymentMethod.list, customer=customer_id, type=type)
        return [_method_result(method.to_dict()) for method in methods.auto_paging_iter()]
