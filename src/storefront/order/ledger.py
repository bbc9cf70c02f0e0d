"""Purchase ledger: has this customer received this product?

The review gate asks one question of the ordering side: is there an order,
owned by the customer, that contains the product and has reached a
delivered or completed status. The answer is the order itself so reviews can
link to it.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.order.order import Order, OrderStatus

QUALIFYING_STATUSES = frozenset({OrderStatus.DELIVERED.value, OrderStatus.COMPLETED.value})


def qualifies(order: Order, customer_id, product_id) -> bool:
    return (
        str(order.customer_id) == str(customer_id)
        and order.status in QUALIFYING_STATUSES
        and order.contains_product(product_id)
    )


def find_qualifying_order(customer_id, product_id, order_id=None) -> Order | None:
    """Return the order proving a received purchase, or None.

    A supplied ``order_id`` is checked on its own; without one, the
    customer's most recent qualifying order wins.
    """
    repo = current_domain.repository_for(Order)

    if order_id:
        try:
            order = repo.get(order_id)
        except ObjectNotFoundError:
            return None
        return order if qualifies(order, customer_id, product_id) else None

    for order in repo.find_for_customer(customer_id, statuses=QUALIFYING_STATUSES):
        if order.contains_product(product_id):
            return order
    return None
