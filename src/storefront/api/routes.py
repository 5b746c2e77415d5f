"""FastAPI routes for the storefront: catalogue, carts, orders, payments and emails."""

import json
import os
from datetime import datetime

from fastapi import APIRouter, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddProductRequest,
    AddToCartRequest,
    AddVariantRequest,
    CancelOrderRequest,
    CartIdResponse,
    CartStateResponse,
    CheckoutRequest,
    ConfirmPaymentRequest,
    CreateCartRequest,
    CreateOrderRequest,
    CreatePaymentIntentRequest,
    MergeGuestCartRequest,
    NotificationResponse,
    OrderIdResponse,
    OrderListResponse,
    OrderSummaryResponse,
    PaymentIntentResponse,
    ProductIdResponse,
    RefundOrderRequest,
    RefundResponse,
    SendEmailRequest,
    SendEmailResponse,
    StatusResponse,
    UpdateCartQuantityRequest,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
    UpdateStockRequest,
    VariantIdResponse,
    WebhookResponse,
)
from storefront.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from storefront.cart.management import CreateCart, MergeGuestCart, SyncCart
from storefront.cart.store import CartStore
from storefront.catalogue.management import AddProduct, AddVariant, UpdateStock
from storefront.catalogue.product import Product
from storefront.exceptions import ExternalServiceError, WebhookSignatureError
from storefront.notification.dispatcher import failed_notifications
from storefront.notification.management import RetryNotification, SendEmail
from storefront.order.cancellation import CancelOrder
from storefront.order.checkout import Checkout
from storefront.order.creation import CreateOrder
from storefront.order.queries import (
    OrderQuery,
    get_order_by_id,
    get_order_by_number,
    get_orders,
    get_order_summary,
)
from storefront.order.status import UpdateOrderStatus, UpdatePaymentStatus
from storefront.payment.initiation import ConfirmPayment, CreatePaymentIntent
from storefront.payment.intents import handle_webhook
from storefront.payment.refund import RefundOrderPayment
from storefront.payment.webhook import apply_webhook_event


def _product_view(product: Product) -> dict:
    return {
        "product_id": str(product.id),
        "name": product.name,
        "sku": product.sku,
        "description": product.description,
        "price": product.price,
        "stock": product.stock,
        "low_stock_threshold": product.low_stock_threshold,
        "is_active": product.is_active,
        "variants": [
            {
                "variant_id": str(variant.id),
                "name": variant.name,
                "sku": variant.sku,
                "price": variant.price,
                "stock": variant.stock,
            }
            for variant in product.variants
        ],
    }


# ---------------------------------------------------------------------------
# Catalogue Router
# ---------------------------------------------------------------------------
catalogue_router = APIRouter(prefix="/products", tags=["catalogue"])


@catalogue_router.post("", status_code=201, response_model=ProductIdResponse)
async def add_product(body: AddProductRequest) -> ProductIdResponse:
    command = AddProduct(**body.model_dump())
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@catalogue_router.post("/{product_id}/variants", status_code=201, response_model=VariantIdResponse)
async def add_variant(product_id: str, body: AddVariantRequest) -> VariantIdResponse:
    command = AddVariant(product_id=product_id, **body.model_dump())
    result = current_domain.process(command, asynchronous=False)
    return VariantIdResponse(variant_id=result)


@catalogue_router.put("/{product_id}/stock", response_model=StatusResponse)
async def update_stock(product_id: str, body: UpdateStockRequest) -> StatusResponse:
    command = UpdateStock(product_id=product_id, variant_id=body.variant_id, stock=body.stock)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@catalogue_router.get("/{product_id}")
async def get_product(product_id: str) -> dict:
    product = current_domain.repository_for(Product).get(product_id)
    return _product_view(product)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.post("", status_code=201, response_model=CartIdResponse)
async def create_cart(body: CreateCartRequest) -> CartIdResponse:
    command = CreateCart(user_id=body.user_id, session_id=body.session_id)
    result = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=result)


@cart_router.get("/{cart_id}", response_model=CartStateResponse)
async def get_cart(cart_id: str) -> dict:
    return CartStore.load(cart_id).state()


@cart_router.post("/{cart_id}/items", response_model=CartStateResponse)
async def add_cart_item(cart_id: str, body: AddToCartRequest) -> dict:
    command = AddToCart(
        cart_id=cart_id,
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
    )
    return current_domain.process(command, asynchronous=False)


@cart_router.put("/{cart_id}/items/{item_id}", response_model=CartStateResponse)
async def update_cart_item(cart_id: str, item_id: str, body: UpdateCartQuantityRequest) -> dict:
    command = UpdateCartQuantity(cart_id=cart_id, item_id=item_id, quantity=body.quantity)
    return current_domain.process(command, asynchronous=False)


@cart_router.delete("/{cart_id}/items/{item_id}", response_model=CartStateResponse)
async def remove_cart_item(cart_id: str, item_id: str) -> dict:
    command = RemoveFromCart(cart_id=cart_id, item_id=item_id)
    return current_domain.process(command, asynchronous=False)


@cart_router.delete("/{cart_id}/items", response_model=CartStateResponse)
async def clear_cart(cart_id: str) -> dict:
    return current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)


@cart_router.post("/{cart_id}/merge", response_model=CartStateResponse)
async def merge_guest_cart(cart_id: str, body: MergeGuestCartRequest) -> dict:
    command = MergeGuestCart(cart_id=cart_id, guest_cart_id=body.guest_cart_id)
    return current_domain.process(command, asynchronous=False)


@cart_router.post("/{cart_id}/sync", response_model=CartStateResponse)
async def sync_cart(cart_id: str) -> dict:
    return current_domain.process(SyncCart(cart_id=cart_id), asynchronous=False)


@cart_router.post("/{cart_id}/checkout", status_code=201, response_model=OrderIdResponse)
async def checkout(cart_id: str, body: CheckoutRequest) -> OrderIdResponse:
    command = Checkout(
        cart_id=cart_id,
        email=body.email,
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        billing_address=json.dumps(body.billing_address.model_dump()) if body.billing_address else None,
        payment_method=body.payment_method,
        notes=body.notes,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def create_order(body: CreateOrderRequest) -> OrderIdResponse:
    command = CreateOrder(
        user_id=body.user_id,
        email=body.email,
        items=json.dumps([line.model_dump() for line in body.items]),
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        billing_address=json.dumps(body.billing_address.model_dump()) if body.billing_address else None,
        payment_method=body.payment_method,
        subtotal=body.subtotal,
        tax_amount=body.tax_amount,
        shipping_amount=body.shipping_amount,
        discount_amount=body.discount_amount,
        total_amount=body.total_amount,
        currency=body.currency,
        notes=body.notes,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    status: str | None = None,
    payment_status: str | None = None,
    user_id: str | None = None,
    email: str | None = None,
    order_number: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> OrderListResponse:
    result = get_orders(
        OrderQuery(
            status=status,
            payment_status=payment_status,
            user_id=user_id,
            email=email,
            order_number=order_number,
            start_date=start_date,
            end_date=end_date,
            page=page,
            limit=limit,
        )
    )
    return OrderListResponse(
        orders=[order.as_dict() for order in result.orders],
        pagination=result.pagination(),
    )


@order_router.get("/summary", response_model=OrderSummaryResponse)
async def order_summary(user_id: str | None = None) -> OrderSummaryResponse:
    summary = get_order_summary(user_id=user_id)
    return OrderSummaryResponse(**summary.__dict__)


@order_router.get("/number/{order_number}")
async def get_order_by_order_number(order_number: str) -> dict:
    return get_order_by_number(order_number).as_dict()


@order_router.get("/{order_id}")
async def get_order(order_id: str) -> dict:
    return get_order_by_id(order_id).as_dict()


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> StatusResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        tracking_number=body.tracking_number,
        reason=body.reason,
    )
    result = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=result)


@order_router.put("/{order_id}/payment-status", response_model=StatusResponse)
async def update_payment_status(order_id: str, body: UpdatePaymentStatusRequest) -> StatusResponse:
    command = UpdatePaymentStatus(order_id=order_id, payment_status=body.payment_status)
    result = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=result)


@order_router.post("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest) -> StatusResponse:
    command = CancelOrder(order_id=order_id, reason=body.reason)
    result = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=result)


@order_router.post("/{order_id}/refund", response_model=RefundResponse)
async def refund_order(order_id: str, body: RefundOrderRequest) -> RefundResponse:
    command = RefundOrderPayment(order_id=order_id, amount=body.amount, reason=body.reason)
    result = current_domain.process(command, asynchronous=False)
    return RefundResponse(refund_id=result)


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/intents", status_code=201, response_model=PaymentIntentResponse)
async def create_payment_intent(body: CreatePaymentIntentRequest) -> dict:
    command = CreatePaymentIntent(order_id=body.order_id, payment_method_id=body.payment_method_id)
    return current_domain.process(command, asynchronous=False)


@payment_router.post("/intents/{order_id}/confirm", response_model=PaymentIntentResponse)
async def confirm_payment(order_id: str, body: ConfirmPaymentRequest) -> dict:
    command = ConfirmPayment(order_id=order_id, payment_method_id=body.payment_method_id)
    return current_domain.process(command, asynchronous=False)


@payment_router.post("/webhook", response_model=WebhookResponse)
async def payment_webhook(
    request: Request,
    stripe_signature: str = Header(default=""),
) -> WebhookResponse:
    """Receive a signed payment gateway callback.

    The raw body is verified before anything is parsed. An unsigned request
    is a 400, a bad signature a 401.
    """
    if not stripe_signature:
        raise HTTPException(status_code=400, detail="Missing webhook signature")

    payload = await request.body()
    try:
        event = handle_webhook(payload, stripe_signature, os.environ.get("STRIPE_WEBHOOK_SECRET", ""))
    except WebhookSignatureError as exc:
        raise HTTPException(status_code=401, detail=exc.message)

    return WebhookResponse(payment_status=apply_webhook_event(event))


# ---------------------------------------------------------------------------
# Notification Router
# ---------------------------------------------------------------------------
notification_router = APIRouter(tags=["notifications"])


@notification_router.post("/emails/send", response_model=SendEmailResponse)
async def send_email(body: SendEmailRequest) -> SendEmailResponse:
    command = SendEmail(
        notification_type=body.notification_type,
        recipient=body.recipient,
        context=json.dumps(body.context),
    )
    result = current_domain.process(command, asynchronous=False)
    return SendEmailResponse(notifications=[NotificationResponse(**entry) for entry in result])


@notification_router.get("/notifications/failed")
async def list_failed_notifications(limit: int = Query(default=100, ge=1, le=1000)) -> list[dict]:
    return [
        {
            "notification_id": str(notification.id),
            "recipient": notification.recipient,
            "notification_type": notification.notification_type,
            "subject": notification.subject,
            "failure_reason": notification.failure_reason,
            "retry_count": notification.retry_count,
        }
        for notification in failed_notifications(limit=limit)
    ]


@notification_router.post("/notifications/{notification_id}/retry", response_model=StatusResponse)
async def retry_notification(notification_id: str) -> StatusResponse:
    command = RetryNotification(notification_id=notification_id)
    result = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=result)


ROUTERS = (catalogue_router, cart_router, order_router, payment_router, notification_router)


def register_error_handlers(app: FastAPI) -> None:
    """Map domain and gateway errors to HTTP responses."""
    register_exception_handlers(app)

    @app.exception_handler(ExternalServiceError)
    async def external_service_error(request: Request, exc: ExternalServiceError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"error": exc.message, "service": exc.service})
