"""Tests for the purchase ledger lookups the review gate relies on."""

import pytest
from protean.utils.globals import current_domain

from storefront.order.ledger import find_qualifying_order, qualifies
from storefront.order.order import Order


def _stored_order(customer_id="cust-001", product_ids=("prod-001",), status="delivered"):
    order = Order.place(
        customer_id=customer_id,
        items=[
            {"product_id": pid, "title": "Polo", "unit_price": 899.0, "quantity": 1}
            for pid in product_ids
        ],
    )
    order.update_status(status)
    current_domain.repository_for(Order).add(order)
    return order


class TestQualifies:
    @pytest.mark.parametrize("status", ["delivered", "completed"])
    def test_received_orders_qualify(self, status):
        order = _stored_order(status=status)
        assert qualifies(order, "cust-001", "prod-001")

    @pytest.mark.parametrize("status", ["pending", "confirmed", "shipped", "out-for-delivery", "cancelled", "refunded"])
    def test_other_statuses_do_not(self, status):
        order = _stored_order(status=status)
        assert not qualifies(order, "cust-001", "prod-001")

    def test_other_customer_does_not(self):
        order = _stored_order()
        assert not qualifies(order, "cust-002", "prod-001")

    def test_other_product_does_not(self):
        order = _stored_order()
        assert not qualifies(order, "cust-001", "prod-002")


class TestFindQualifyingOrder:
    def test_finds_delivered_order(self):
        order = _stored_order(product_ids=("prod-001", "prod-002"))

        found = find_qualifying_order("cust-001", "prod-002")

        assert found is not None
        assert found.id == order.id

    def test_ignores_undelivered_orders(self):
        _stored_order(status="shipped")
        assert find_qualifying_order("cust-001", "prod-001") is None

    def test_ignores_other_products(self):
        _stored_order(product_ids=("prod-009",))
        assert find_qualifying_order("cust-001", "prod-001") is None

    def test_explicit_order_must_qualify(self):
        shipped = _stored_order(status="shipped")
        delivered = _stored_order()

        assert find_qualifying_order("cust-001", "prod-001", order_id=shipped.id) is None
        assert find_qualifying_order("cust-001", "prod-001", order_id=delivered.id).id == delivered.id

    def test_explicit_order_of_another_customer(self):
        order = _stored_order(customer_id="cust-002")
        assert find_qualifying_order("cust-001", "prod-001", order_id=order.id) is None

    def test_unknown_order_id(self):
        assert find_qualifying_order("cust-001", "prod-001", order_id="missing-order") is None
