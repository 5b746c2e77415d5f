"""Order read side — filtered listing, lookups and the summary aggregate."""

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.cart.pricing import quantize
from storefront.order.order import Order, OrderStatus, PaymentStatus

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@dataclass
class OrderQuery:
    """Optional filters for listing orders.

    Every field left as ``None`` is simply not applied.
    """

    status: str | None = None
    payment_status: str | None = None
    user_id: str | None = None
    email: str | None = None  # case-insensitive substring
    order_number: str | None = None  # substring
    start_date: datetime | None = None  # inclusive
    end_date: datetime | None = None  # inclusive
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    def __post_init__(self):
        errors = {}
        if self.status is not None and self.status not in {s.value for s in OrderStatus}:
            errors["status"] = [f"Unknown order status: {self.status}"]
        if self.payment_status is not None and self.payment_status not in {s.value for s in PaymentStatus}:
            errors["payment_status"] = [f"Unknown payment status: {self.payment_status}"]
        if self.page < 1:
            errors["page"] = ["Page must be at least 1"]
        if not 1 <= self.limit <= MAX_PAGE_SIZE:
            errors["limit"] = [f"Limit must be between 1 and {MAX_PAGE_SIZE}"]
        if errors:
            raise ValidationError(errors)

        self.start_date = _aware(self.start_date)
        self.end_date = _aware(self.end_date)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def criteria(self) -> dict:
        """Translate the filters into repository lookups."""
        lookups = {}
        if self.status:
            lookups["status"] = self.status
        if self.payment_status:
            lookups["payment_status"] = self.payment_status
        if self.user_id:
            lookups["user_id"] = self.user_id
        if self.email:
            lookups["email__icontains"] = self.email
        if self.order_number:
            lookups["order_number__contains"] = self.order_number
        if self.start_date:
            lookups["created_at__gte"] = self.start_date
        if self.end_date:
            lookups["created_at__lte"] = self.end_date
        return lookups


@dataclass
class OrderPage:
    orders: list = field(default_factory=list)
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    total: int = 0

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def pagination(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
        }


@dataclass(frozen=True)
class OrderSummary:
    total_orders: int
    total_revenue: float
    pending_orders: int
    completed_orders: int
    average_order_value: float

    @classmethod
    def from_counts(cls, total_orders, total_revenue, pending_orders, completed_orders):
        average = quantize(total_revenue / total_orders) if total_orders else 0.0
        return cls(
            total_orders=total_orders,
            total_revenue=float(quantize(total_revenue)),
            pending_orders=pending_orders,
            completed_orders=completed_orders,
            average_order_value=float(average),
        )


def get_orders(query: OrderQuery | None = None) -> OrderPage:
    """List orders newest first, one page at a time."""
    query = query or OrderQuery()
    orders, total = current_domain.repository_for(Order).search(
        query.criteria(), offset=query.offset, limit=query.limit
    )
    return OrderPage(orders=list(orders), page=query.page, limit=query.limit, total=total)


def get_order_by_id(order_id) -> Order:
    return current_domain.repository_for(Order).get(order_id)


def get_order_by_number(order_number: str) -> Order:
    return current_domain.repository_for(Order).find_by_number(order_number)


def get_order_summary(user_id=None) -> OrderSummary:
    """Order counts and revenue, optionally for a single user.

    Revenue only counts orders whose payment went through.
    """
    repo = current_domain.repository_for(Order)
    scope = {"user_id": user_id} if user_id else {}

    paid_orders = repo.find_all(payment_status=PaymentStatus.PAID.value, **scope)
    total_revenue = sum(order.pricing.total_amount for order in paid_orders if order.pricing)

    return OrderSummary.from_counts(
        total_orders=repo.count(**scope),
        total_revenue=total_revenue,
        pending_orders=repo.count(status=OrderStatus.PENDING.value, **scope),
        completed_orders=repo.count(status=OrderStatus.DELIVERED.value, **scope),
    )
