"""Cart pricing — subtotal, tax, shipping, discount and total.

Fixed business rules:
    tax      = 8% of subtotal
    shipping = free at or above 50.00, otherwise a flat 5.99
    total    = subtotal + tax + shipping - discount

All money values are computed with ``Decimal`` and rounded half-up to
cents. The total is the sum of the rounded components, so the summary
always adds up exactly as displayed.
"""

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from protean.exceptions import ValidationError

TAX_RATE = Decimal("0.08")
FREE_SHIPPING_THRESHOLD = Decimal("50.00")
SHIPPING_COST = Decimal("5.99")

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class CartSummary:
    subtotal: float
    tax: float
    shipping: float
    discount: float
    total: float
    item_count: int

    def as_dict(self) -> dict:
        return asdict(self)


def _decimal(value: Any) -> Decimal:
    # str() avoids binary float artefacts (0.1 -> 0.1000000000000000055...)
    return value if isinstance(value, Decimal) else Decimal(str(value or 0))


def quantize(value: Any) -> Decimal:
    return _decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP)


def _line_values(line: Any) -> tuple[Decimal, int]:
    if isinstance(line, Mapping):
        return _decimal(line.get("unit_price")), int(line.get("quantity") or 0)
    return _decimal(line.unit_price), int(line.quantity or 0)


def tax_for(subtotal: Any) -> Decimal:
    return _decimal(subtotal) * TAX_RATE


def shipping_for(subtotal: Any) -> Decimal:
    return Decimal("0") if _decimal(subtotal) >= FREE_SHIPPING_THRESHOLD else SHIPPING_COST


def summarize(lines: Iterable[Any], discount: Any = 0) -> CartSummary:
    """Compute the summary of a sequence of priced lines.

    A line is anything exposing ``unit_price`` and ``quantity``, either as
    attributes (cart and order items) or as mapping keys.
    """
    discount = _decimal(discount)
    if discount < 0:
        raise ValidationError({"discount": ["Discount cannot be negative"]})

    subtotal = Decimal("0")
    item_count = 0
    for line in lines:
        unit_price, quantity = _line_values(line)
        subtotal += unit_price * quantity
        item_count += quantity

    subtotal = quantize(subtotal)
    tax = quantize(tax_for(subtotal))
    shipping = quantize(shipping_for(subtotal))
    discount = quantize(discount)
    total = subtotal + tax + shipping - discount

    return CartSummary(
        subtotal=float(subtotal),
        tax=float(tax),
        shipping=float(shipping),
        discount=float(discount),
        total=float(total),
        item_count=item_count,
    )
