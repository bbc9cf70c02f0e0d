"""Faker-based data generators for Locust load test scenarios.

Write traffic targets the fixture set created by ``scripts/seed_catalogue.py``:
products ``lt-product-0000`` onwards, and customers ``lt-cust-0000`` onwards,
each of whom has a delivered order covering every seeded product. Keep the
counts here in step with the seed script's defaults.
"""

import random
import uuid

from faker import Faker

fake = Faker()

SEEDED_PRODUCTS = 50
SEEDED_CUSTOMERS = 200

SIZES = ["XS", "S", "M", "L", "XL", "XXL"]
COLORS = ["navy", "black", "white", "grey", "olive", "maroon"]
CATEGORIES = ["polos", "tees", "shirts", "hoodies"]
SEARCH_TERMS = ["polo", "cotton", "slim", "classic", "oversized", "navy", "tee"]
LIST_SORTS = ["relevance", "price-asc", "price-desc", "rating-desc", "newest"]
REVIEW_SORTS = ["createdAt", "rating", "helpfulVotes"]


# ---------- Seeded identifiers ----------


def product_slug(index: int) -> str:
    return f"lt-product-{index:04d}"


def customer_id(index: int) -> str:
    return f"lt-cust-{index:04d}"


def variant_sku(index: int, size: str, color: str) -> str:
    return f"LT-{index:04d}-{size}-{color.upper()}"


def random_product_slug() -> str:
    return product_slug(random.randrange(SEEDED_PRODUCTS))


def random_customer_id() -> str:
    return customer_id(random.randrange(SEEDED_CUSTOMERS))


def stranger_id() -> str:
    """A customer with no orders, for exercising the purchase gate."""
    return f"lt-guest-{uuid.uuid4().hex[:8]}"


def moderator_id() -> str:
    return f"lt-admin-{random.randint(1, 5)}"


# ---------- Catalogue ----------


def listing_query() -> dict:
    """Query parameters for ``GET /api/products`` with a random filter mix."""
    params: dict = {"page": random.randint(1, 3), "limit": random.choice([12, 24]), "sort": random.choice(LIST_SORTS)}
    if random.random() < 0.5:
        params["category"] = random.choice(CATEGORIES)
    if random.random() < 0.3:
        params["sizes"] = ",".join(random.sample(SIZES, k=2))
    if random.random() < 0.3:
        params["colors"] = random.choice(COLORS)
    if random.random() < 0.2:
        low = random.choice([0, 299, 499])
        params["minPrice"] = low
        params["maxPrice"] = low + random.choice([500, 1000])
    if random.random() < 0.2:
        params["search"] = random.choice(SEARCH_TERMS)
    if random.random() < 0.1:
        params["inStock"] = "true"
    return params


def stock_level() -> int:
    # Skew towards low values so the low-stock flag gets exercised
    return random.choice([0, 1, 3, 5, 8, 12, 25, 40, 100])


def product_seed(index: int) -> dict:
    """Keyword arguments for a ``CreateProduct`` command."""
    category = CATEGORIES[index % len(CATEGORIES)]
    base_price = float(random.choice([399, 499, 599, 799, 899, 1199]))
    colors = random.sample(COLORS, k=2)
    variants = [
        {
            "sku": variant_sku(index, size, color),
            "size": size,
            "color": color,
            "stock_level": stock_level(),
        }
        for color in colors
        for size in ("S", "M", "L", "XL")
    ]
    return {
        "slug": product_slug(index),
        "title": f"{fake.color_name()} {category[:-1].title()} {index}"[:255],
        "description": fake.paragraph(nb_sentences=3),
        "brand": "Polohigh",
        "category": category,
        "target_gender": random.choice(["Men", "Women", "Unisex"]),
        "base_price": base_price,
        "mrp": base_price + random.choice([0, 200, 400]),
        "tags": [random.choice(SEARCH_TERMS), category],
        "variants": variants,
        "is_featured": random.random() < 0.1,
    }


# ---------- Reviews ----------


def review_data(product: str, customer: str) -> dict:
    """``SubmitReviewRequest`` payload in the API's camelCase."""
    payload = {
        "productId": product,
        "customerId": customer,
        "rating": random.choices([1, 2, 3, 4, 5], weights=[1, 1, 2, 4, 5])[0],
        "title": fake.sentence(nb_words=5)[:100],
        "comment": fake.paragraph(nb_sentences=4)[:2000],
    }
    if random.random() < 0.3:
        payload["images"] = [
            {"url": fake.image_url(), "altText": fake.word()} for _ in range(random.randint(1, 3))
        ]
    if random.random() < 0.5:
        payload["variant"] = {"size": random.choice(SIZES), "color": random.choice(COLORS)}
    return payload


def review_edit() -> dict:
    return {"rating": random.randint(1, 5), "comment": fake.paragraph(nb_sentences=2)[:2000]}


def rejection_reason() -> str:
    return random.choice(
        [
            "Review does not describe the product",
            "Contains promotional content",
            "Contains personal contact details",
            "Language violates community guidelines",
        ]
    )


def admin_reply() -> str:
    return f"Thanks {fake.first_name()}, we appreciate the feedback!"
