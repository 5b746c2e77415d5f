"""Storefront domain — catalogue inventory, carts, orders, payments and
transactional notifications.

All elements register against a single Protean domain. Configuration is
read from the ``domain.toml`` next to this module; ``PROTEAN_ENV`` selects
an overlay (``production`` switches the database to PostgreSQL).
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
