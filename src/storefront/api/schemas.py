"""Pydantic request/response schemas for the storefront API.

These are the external contracts. Protean commands stay internal and
the routes translate between the two.
"""

from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    first_name: str
    last_name: str
    company: str | None = None
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    postal_code: str
    country: str
    phone: str | None = None


class OrderLineSchema(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(ge=1)
    unit_price: float | None = Field(default=None, gt=0)


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class AddProductRequest(BaseModel):
    name: str
    sku: str
    description: str | None = None
    price: float = Field(ge=0)
    stock: int = Field(ge=0, default=0)
    low_stock_threshold: int = Field(ge=0, default=5)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Wireless Headphones",
                    "sku": "WH-1000",
                    "price": 99.99,
                    "stock": 10,
                }
            ]
        }
    }


class AddVariantRequest(BaseModel):
    name: str
    sku: str
    price: float | None = Field(default=None, ge=0)
    stock: int = Field(ge=0, default=0)


class UpdateStockRequest(BaseModel):
    stock: int = Field(ge=0)
    variant_id: str | None = None


class ProductIdResponse(BaseModel):
    product_id: str


class VariantIdResponse(BaseModel):
    variant_id: str


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class CreateCartRequest(BaseModel):
    user_id: str | None = None
    session_id: str | None = None


class AddToCartRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    quantity: int  # Zero or less removes the line


class MergeGuestCartRequest(BaseModel):
    guest_cart_id: str


class CheckoutRequest(BaseModel):
    email: str
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    payment_method: str
    notes: str | None = None


class CartIdResponse(BaseModel):
    cart_id: str


class CartSummarySchema(BaseModel):
    subtotal: float
    tax: float
    shipping: float
    discount: float
    total: float
    item_count: int


class CartStateResponse(BaseModel):
    cart_id: str
    status: str
    items: list[dict]
    summary: CartSummarySchema
    error: str | None = None
    is_loading: bool = False


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    user_id: str | None = None
    email: str
    items: list[OrderLineSchema] = Field(min_length=1)
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    payment_method: str
    subtotal: float | None = Field(default=None, ge=0)
    tax_amount: float | None = Field(default=None, ge=0)
    shipping_amount: float | None = Field(default=None, ge=0)
    discount_amount: float | None = Field(default=None, ge=0)
    total_amount: float | None = Field(default=None, ge=0)
    currency: str = "USD"
    notes: str | None = None


class UpdateOrderStatusRequest(BaseModel):
    status: Literal["Pending", "Confirmed", "Processing", "Shipped", "Delivered", "Cancelled", "Refunded"]
    tracking_number: str | None = None
    reason: str | None = None


class UpdatePaymentStatusRequest(BaseModel):
    payment_status: Literal["Pending", "Paid", "Failed", "Refunded"]


class CancelOrderRequest(BaseModel):
    reason: str | None = None


class RefundOrderRequest(BaseModel):
    amount: float | None = Field(default=None, gt=0)
    reason: Literal["duplicate", "fraudulent", "requested_by_customer"] | None = None


class OrderIdResponse(BaseModel):
    order_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class OrderListResponse(BaseModel):
    orders: list[dict]
    pagination: dict


class OrderSummaryResponse(BaseModel):
    total_orders: int
    total_revenue: float
    pending_orders: int
    completed_orders: int
    average_order_value: float


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
class CreatePaymentIntentRequest(BaseModel):
    order_id: str
    payment_method_id: str | None = None


class ConfirmPaymentRequest(BaseModel):
    payment_method_id: str | None = None


class PaymentIntentResponse(BaseModel):
    order_id: str
    payment_intent_id: str
    client_secret: str | None = None
    status: str
    amount: int
    currency: str


class RefundResponse(BaseModel):
    refund_id: str


class WebhookResponse(BaseModel):
    received: bool = True
    payment_status: str | None = None


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
class SendEmailRequest(BaseModel):
    notification_type: Literal[
        "order_confirmation",
        "order_status_update",
        "welcome",
        "password_reset",
        "low_stock_alert",
    ]
    recipient: str | None = None
    context: dict = Field(default_factory=dict)


class NotificationResponse(BaseModel):
    notification_id: str
    recipient: str
    status: str


class SendEmailResponse(BaseModel):
    notifications: list[NotificationResponse]
