"""Seed data shared by the review tests: a catalogue product and delivered orders."""

import pytest
from protean.utils.globals import current_domain

from storefront.product.product import Product
from storefront.order.order import Order


@pytest.fixture()
def product():
    product = Product.create(slug="navy-polo", title="Navy Polo", category="polos", base_price=899.0)
    product.add_variant(sku="NAVY-POLO-M", size="M", color="navy", stock_level=10)
    current_domain.repository_for(Product).add(product)
    return product


@pytest.fixture()
def place_order():
    """Factory storing an order for a customer and product in the given status."""

    def _place(customer_id, product_id, status="delivered"):
        order = Order.place(
            customer_id=customer_id,
            items=[
                {
                    "product_id": str(product_id),
                    "variant_sku": "NAVY-POLO-M",
                    "title": "Navy Polo",
                    "size": "M",
                    "color": "navy",
                    "unit_price": 899.0,
                    "quantity": 1,
                }
            ],
        )
        order.update_status(status)
        current_domain.repository_for(Order).add(order)
        return order

    return _place
