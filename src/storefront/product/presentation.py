"""Variant selection and pricing as the product page presents them.

These are pure functions over a product and its variants. The product page
calls them with whatever size/colour the shopper has picked so far; the
catalogue does not guarantee that every size x colour combination exists, so
resolution is lenient and never comes back empty while variants exist.
"""

import math
from dataclasses import dataclass

# Hard upper bound on the quantity selector.
QUANTITY_CEILING = 6


@dataclass(frozen=True)
class Pricing:
    price: float
    mrp: float
    discount_percentage: float


def available_sizes(variants) -> list[str]:
    """Distinct sizes of active variants, in variant order."""
    sizes = []
    for variant in variants:
        if variant.is_active and variant.size not in sizes:
            sizes.append(variant.size)
    return sizes


def available_colors(variants) -> list[dict]:
    colors = {}
    for variant in variants:
        if not variant.is_active or variant.color is None:
            continue
        name = variant.color.name
        if name not in colors:
            colors[name] = {"value": name, "label": variant.color.label, "hex": variant.color.swatch}
    return list(colors.values())


def resolve_variant(variants, size=None, color=None):
    """Pick the variant that governs price, stock and add-to-cart.

    Exact match first (an unset size or colour matches anything), then the
    first variant with the requested size, then the first variant.
    """
    variants = list(variants or [])
    if not variants:
        return None

    exact = next((v for v in variants if v.matches(size=size, color=color)), None)
    if exact is not None:
        return exact

    if size:
        by_size = next((v for v in variants if v.matches(size=size)), None)
        if by_size is not None:
            return by_size

    return variants[0]


def is_purchasable(variant) -> bool:
    return variant is not None and variant.in_stock


def max_purchasable_quantity(variant, product_max_quantity=None, ceiling=QUANTITY_CEILING) -> int:
    """Smallest positive limit among stock, product cap and ceiling; never below 1."""
    stock = variant.stock_level if variant is not None else None
    limits = [limit for limit in (stock, product_max_quantity, ceiling) if limit is not None and limit > 0]
    return max(1, min(limits)) if limits else QUANTITY_CEILING


def clamp_quantity(requested, maximum) -> int:
    return max(1, min(requested or 1, maximum))


def display_price(product, variant=None) -> float:
    if variant is not None and variant.price_override is not None:
        return variant.price_override
    return product.base_price


def pricing(product) -> Pricing:
    """Effective MRP and discount.

    An explicit discount percentage wins; otherwise it is derived from MRP.
    """
    price = product.base_price
    mrp = product.mrp if product.mrp and product.mrp > 0 else price

    if product.discount_percentage is not None:
        discount = product.discount_percentage
    elif mrp > price:
        discount = float(math.floor((mrp - price) / mrp * 100 + 0.5))
    else:
        discount = 0.0

    return Pricing(price=price, mrp=mrp, discount_percentage=discount)
