"""Repository for the Order aggregate — lookups, counts and filtered pages."""

from datetime import datetime

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_number(self, order_number: str) -> Order:
        results = self._dao.query.filter(order_number=order_number).all()
        if not results.items:
            raise ObjectNotFoundError(f"Order with number `{order_number}` does not exist")
        return results.first

    def number_exists(self, order_number: str) -> bool:
        return self.count(order_number=order_number) > 0

    def count(self, **criteria) -> int:
        query = self._dao.query.filter(**criteria) if criteria else self._dao.query
        return query.limit(1).all().total

    def count_created_between(self, start: datetime, end: datetime) -> int:
        return self.count(created_at__gte=start, created_at__lt=end)

    def search(self, criteria: dict, offset: int = 0, limit: int = 10, order_by: str = "-created_at"):
        """Return one page of orders matching ``criteria`` plus the total match count."""
        query = self._dao.query.filter(**criteria) if criteria else self._dao.query
        results = query.order_by(order_by).offset(offset).limit(limit).all()
        return results.items, results.total

    def find_all(self, **criteria) -> list[Order]:
        total = self.count(**criteria)
        if total == 0:
            return []
        query = self._dao.query.filter(**criteria) if criteria else self._dao.query
        return query.limit(total).all().items
