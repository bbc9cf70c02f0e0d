"""Seed the storefront with the fixture set the load tests expect.

Creates ``--products`` catalogue products (``lt-product-0000`` onwards, each
with S/M/L/XL variants in two colours) and gives ``--customers`` customers
(``lt-cust-0000`` onwards) one delivered order covering every seeded product,
so each of them passes the verified-purchase gate for any seeded product.

Re-running is safe: existing products are reused and customers who already
have an order are skipped.

Prerequisites:
    PROTEAN_ENV=production python src/manage.py setup-db   # PostgreSQL only

Usage:
    PROTEAN_ENV=production python scripts/seed_catalogue.py
    python scripts/seed_catalogue.py --products 10 --customers 20
"""

import argparse
import json
import sys
import time

# Add src/ and the repo root to path so we can import the domain and generators
sys.path.insert(0, "src")
sys.path.insert(0, ".")

_JSON_FIELDS = ("tags", "variants")


def _seed_products(storefront, count):
    from protean.utils.globals import current_domain

    from loadtests.data_generators import product_seed
    from storefront.product.creation import CreateProduct
    from storefront.product.product import Product

    repo = current_domain.repository_for(Product)
    products = []
    created = 0
    for i in range(count):
        seed = product_seed(i)
        existing = repo.get_by_slug(seed["slug"])
        if existing is not None:
            products.append(existing)
            continue

        for name in _JSON_FIELDS:
            seed[name] = json.dumps(seed[name])
        product_id = storefront.process(CreateProduct(**seed), asynchronous=False)
        products.append(repo.get(product_id))
        created += 1
    return products, created


def _seed_orders(products, count):
    from protean.utils.globals import current_domain

    from loadtests.data_generators import customer_id
    from storefront.order.order import Order

    repo = current_domain.repository_for(Order)
    items = [
        {"product_id": str(p.id), "title": p.title, "unit_price": p.base_price, "quantity": 1}
        for p in products
    ]
    placed = 0
    for i in range(count):
        customer = customer_id(i)
        if repo.find_for_customer(customer):
            continue
        order = Order.place(customer_id=customer, items=items)
        order.update_status("delivered")
        repo.add(order)
        placed += 1
    return placed


def main():
    parser = argparse.ArgumentParser(
        description="Seed products and delivered orders for load testing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                  # Defaults used by loadtests/
  %(prog)s --products 10 --customers 20     # Small local fixture set
        """,
    )
    from loadtests.data_generators import SEEDED_CUSTOMERS, SEEDED_PRODUCTS

    parser.add_argument(
        "--products", type=int, default=SEEDED_PRODUCTS, help=f"Products to seed (default: {SEEDED_PRODUCTS})"
    )
    parser.add_argument(
        "--customers", type=int, default=SEEDED_CUSTOMERS, help=f"Customers to seed (default: {SEEDED_CUSTOMERS})"
    )
    args = parser.parse_args()

    from storefront.domain import storefront
    from storefront.utils.logging import configure_logging

    configure_logging(log_dir=None)
    storefront.init()

    print(f"\n{'='*60}")
    print("  Storefront Seed")
    print(f"{'='*60}")
    print(f"  Products:   {args.products:,}")
    print(f"  Customers:  {args.customers:,}")
    print(f"{'='*60}\n")

    start = time.monotonic()
    with storefront.domain_context():
        products, created = _seed_products(storefront, args.products)
        print(f"  [{time.strftime('%H:%M:%S')}] Products ready ({created:,} created, {len(products) - created:,} reused)")
        placed = _seed_orders(products, args.customers)
        print(f"  [{time.strftime('%H:%M:%S')}] Delivered orders placed: {placed:,}")

    elapsed = time.monotonic() - start
    print(f"\n{'='*60}")
    print(f"  Seed complete in {elapsed:.1f}s")
    print(f"{'='*60}\n")


if __name__ == "__main__":
    main()
