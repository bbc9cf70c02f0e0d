"""Storefront product listing: filter, sort and paginate the catalogue.

Every supplied criterion narrows the result (they are ANDed). Free-text
search is a case-insensitive substring match over title, description and
tags; it is not ranked. ``relevance`` is a fixed tiebreak (featured, then
rating, then newest), not a scoring model.
"""

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from protean.utils.globals import current_domain

from storefront.product.product import Product

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 100
IGNORED_SUBCATEGORY = "all"

_EPOCH = datetime.min.replace(tzinfo=UTC)


class SortKey(Enum):
    RELEVANCE = "relevance"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    RATING_DESC = "rating-desc"
    NEWEST = "newest"


@dataclass(frozen=True)
class ProductCriteria:
    category: str | None = None
    subcategory: str | None = None
    target_gender: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    sizes: tuple[str, ...] = ()
    colors: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    search: str | None = None
    min_rating: float | None = None
    in_stock: bool = False
    include_inactive: bool = False
    sort: SortKey = SortKey.RELEVANCE
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class ProductPage:
    items: list = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    total_pages: int = 0

    @property
    def count(self) -> int:
        return len(self.items)


def _lowered(values) -> set[str]:
    return {v.strip().lower() for v in values if v and v.strip()}


def _created(product) -> datetime:
    created = product.created_at
    if created is None:
        return _EPOCH
    return created if created.tzinfo else created.replace(tzinfo=UTC)


def build_filters(criteria: ProductCriteria) -> list:
    """Translate criteria into a list of predicates over ``Product``."""
    filters = []

    if not criteria.include_inactive:
        filters.append(lambda p: bool(p.is_active))

    if criteria.category:
        category = criteria.category.lower()
        filters.append(lambda p: (p.category or "").lower() == category)

    if criteria.subcategory and criteria.subcategory.lower() != IGNORED_SUBCATEGORY:
        subcategory = criteria.subcategory.lower()
        filters.append(lambda p: (p.subcategory or "").lower() == subcategory)

    if criteria.target_gender:
        gender = criteria.target_gender.lower()
        filters.append(lambda p: (p.target_gender or "").lower() == gender)

    if criteria.min_price is not None:
        filters.append(lambda p: p.base_price >= criteria.min_price)

    if criteria.max_price is not None:
        filters.append(lambda p: p.base_price <= criteria.max_price)

    if criteria.min_rating is not None:
        filters.append(lambda p: (p.average_rating or 0.0) >= criteria.min_rating)

    sizes = _lowered(criteria.sizes)
    if sizes:
        filters.append(lambda p: any((v.size or "").lower() in sizes for v in p.active_variants()))

    colors = _lowered(criteria.colors)
    if colors:
        filters.append(lambda p: any(v.color and v.color.name.lower() in colors for v in p.active_variants()))

    tags = _lowered(criteria.tags)
    if tags:
        filters.append(lambda p: bool(tags & _lowered(p.tag_list)))

    if criteria.search and criteria.search.strip():
        needle = criteria.search.strip().lower()
        filters.append(
            lambda p: needle in (p.title or "").lower()
            or needle in (p.description or "").lower()
            or any(needle in tag.lower() for tag in p.tag_list)
        )

    if criteria.in_stock:
        filters.append(lambda p: (p.total_stock or 0) > 0)

    return filters


def sort_products(products, sort_key: SortKey) -> list:
    # Newest first is the base order every sort falls back to on ties.
    ordered = sorted(products, key=_created, reverse=True)

    if sort_key is SortKey.PRICE_ASC:
        return sorted(ordered, key=lambda p: p.base_price)
    if sort_key is SortKey.PRICE_DESC:
        return sorted(ordered, key=lambda p: p.base_price, reverse=True)
    if sort_key is SortKey.RATING_DESC:
        return sorted(ordered, key=lambda p: (p.average_rating or 0.0, p.review_count or 0), reverse=True)
    if sort_key is SortKey.NEWEST:
        return ordered
    return sorted(ordered, key=lambda p: (bool(p.is_featured), p.average_rating or 0.0), reverse=True)


def paginate(items, page: int, limit: int) -> ProductPage:
    limit = max(1, min(limit or DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE))
    page = max(1, page or 1)
    total = len(items)
    start = (page - 1) * limit
    return ProductPage(
        items=list(items[start : start + limit]),
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit),
    )


def list_products(criteria: ProductCriteria) -> ProductPage:
    repo = current_domain.repository_for(Product)
    filters = build_filters(criteria)

    matching = [
        product
        for product in repo.find_catalogue(include_inactive=criteria.include_inactive)
        if all(predicate(product) for predicate in filters)
    ]
    return paginate(sort_products(matching, criteria.sort), criteria.page, criteria.limit)
