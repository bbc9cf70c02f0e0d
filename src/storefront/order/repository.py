"""Repository for the Order aggregate."""

from storefront.domain import storefront
from storefront.order.order import Order

QUERY_LIMIT = 10_000


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_for_customer(self, customer_id, statuses=None) -> list[Order]:
        query = self._dao.query.filter(customer_id=str(customer_id))
        if statuses:
            query = query.filter(status__in=list(statuses))
        return query.order_by("-placed_at").limit(QUERY_LIMIT).all().items
