"""Order numbers: ``ORD`` + YYMMDD + a 4-digit per-day sequence.

Each day has its own ``OrderNumberSequence`` counter. The counter is seeded
from the number of orders already created that day (so numbering carries on
seamlessly from data written before the counter existed) and then advanced
one step per order. Candidates that already exist are skipped, and the
unique constraint on ``Order.order_number`` rejects anything that still
slips through.
"""

from datetime import UTC, datetime, time, timedelta

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order

logger = structlog.get_logger(__name__)

ORDER_NUMBER_PREFIX = "ORD"


@storefront.aggregate
class OrderNumberSequence:
    day = String(identifier=True, max_length=6)  # YYMMDD
    last_value = Integer(default=0, min_value=0)

    def advance(self) -> int:
        self.last_value += 1
        return self.last_value


def format_order_number(day: str, sequence: int) -> str:
    return f"{ORDER_NUMBER_PREFIX}{day}{sequence:04d}"


def next_order_number(now: datetime | None = None) -> str:
    """Allocate the next order number for the day of ``now`` (UTC)."""
    now = now or datetime.now(UTC)
    day = now.strftime("%y%m%d")

    sequences = current_domain.repository_for(OrderNumberSequence)
    orders = current_domain.repository_for(Order)

    try:
        sequence = sequences.get(day)
    except ObjectNotFoundError:
        start = datetime.combine(now.date(), time.min, tzinfo=UTC)
        already_created = orders.count_created_between(start, start + timedelta(days=1))
        sequence = OrderNumberSequence(day=day, last_value=already_created)

    candidate = format_order_number(day, sequence.advance())
    while orders.number_exists(candidate):
        logger.warning("Order number already taken, skipping", order_number=candidate)
        candidate = format_order_number(day, sequence.advance())

    sequences.add(sequence)
    return candidate
