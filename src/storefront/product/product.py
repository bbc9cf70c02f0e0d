"""Product aggregate root with the Variant entity and the Color value object.

A product owns its variants (size x color SKUs). Two fields are write-time
caches and are only ever changed through the aggregate:

* ``total_stock``: sum of ``stock_level`` over active variants, recomputed on
  every variant mutation.
* ``average_rating`` / ``review_count``: written by the rating engine in
  ``storefront.review.rating`` whenever the approved review set changes.

Products are never removed; ``deactivate`` is a soft delete so that order
lines and reviews keep resolving.
"""

import json
import re
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.product.events import (
    ProductCreated,
    ProductDeactivated,
    ProductRatingRecalculated,
    ProductReactivated,
    VariantAdded,
    VariantStockUpdated,
)
from storefront.domain import storefront
from storefront.shared.errors import ConflictError, NotFoundError

_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
_HEX_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class TargetGender(Enum):
    MEN = "Men"
    WOMEN = "Women"
    KIDS = "Kids"
    UNISEX = "Unisex"


def _load_list(raw):
    if not raw:
        return []
    value = json.loads(raw)
    return value if isinstance(value, list) else []


def _dump_list(values):
    return json.dumps(list(values)) if values else None


def _as_color(color):
    if isinstance(color, dict):
        return Color(**color)
    if isinstance(color, str):
        return Color(name=color)
    return color


@storefront.value_object(part_of="Product")
class Color:
    """A variant colour: a display name plus an optional swatch hex."""

    name: String(required=True, max_length=50)
    hex: String(max_length=7)

    @invariant.post
    def hex_must_be_a_css_colour(self):
        if self.hex and not _HEX_PATTERN.match(self.hex):
            raise ValidationError({"hex": [f"'{self.hex}' is not a valid hex colour"]})

    @property
    def label(self) -> str:
        return self.name[:1].upper() + self.name[1:]

    @property
    def swatch(self) -> str:
        return self.hex or self.name


@storefront.entity(part_of="Product")
class Variant:
    """One purchasable size/colour combination."""

    sku: String(required=True, max_length=64, unique=True)
    size: String(required=True, max_length=20)
    color: ValueObject(Color, required=True)
    stock_level: Integer(default=0, min_value=0)
    price_override: Float(min_value=0.0)
    images: Text()
    is_active: Boolean(default=True)

    @property
    def in_stock(self) -> bool:
        return bool(self.is_active) and (self.stock_level or 0) > 0

    @property
    def image_urls(self) -> list:
        return _load_list(self.images)

    def matches(self, size=None, color=None) -> bool:
        """Case-insensitive match; an unset size or colour matches anything."""
        if size and (self.size or "").lower() != size.lower():
            return False
        if color and (self.color.name if self.color else "").lower() != color.lower():
            return False
        return True


@storefront.aggregate
class Product:
    """Catalogue product, addressed externally by its slug."""

    slug: String(required=True, max_length=200, unique=True)
    title: String(required=True, max_length=255)
    description: Text()
    brand: String(max_length=100)
    category: String(required=True, max_length=100)
    subcategory: String(max_length=100)
    target_gender: String(choices=TargetGender, default=TargetGender.UNISEX.value)

    base_price: Float(required=True, min_value=0.01)
    mrp: Float(min_value=0.0)
    discount_percentage: Float(min_value=0.0, max_value=100.0)

    media: Text()  # JSON array of {url, type, alt}
    benefits: Text()  # JSON array of strings
    specifications: Text()  # JSON array of {key, value}
    tags: Text()  # JSON array of strings
    related_product_ids: Text()  # JSON array of product ids

    variants: HasMany(Variant)

    is_active: Boolean(default=True)
    is_featured: Boolean(default=False)
    max_quantity: Integer(min_value=1)

    total_stock: Integer(default=0)
    average_rating: Float(default=0.0)
    review_count: Integer(default=0)

    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def slug_must_be_url_safe(self):
        if self.slug and not _SLUG_PATTERN.match(self.slug):
            raise ValidationError(
                {"slug": ["Slug must be lowercase alphanumeric words separated by single hyphens"]}
            )

    @invariant.post
    def skus_must_be_unique_within_product(self):
        skus = [v.sku for v in self.variants]
        if len(skus) != len(set(skus)):
            raise ValidationError({"variants": ["Variant SKUs must be unique"]})

    @classmethod
    def create(
        cls,
        slug,
        title,
        category,
        base_price,
        description=None,
        brand=None,
        subcategory=None,
        target_gender=None,
        mrp=None,
        discount_percentage=None,
        media=None,
        benefits=None,
        specifications=None,
        tags=None,
        related_product_ids=None,
        is_featured=False,
        max_quantity=None,
    ):
        now = datetime.now(UTC)
        product = cls(
            slug=slug,
            title=title,
            description=description,
            brand=brand,
            category=category,
            subcategory=subcategory,
            target_gender=target_gender or TargetGender.UNISEX.value,
            base_price=base_price,
            mrp=mrp,
            discount_percentage=discount_percentage,
            media=_dump_list(media),
            benefits=_dump_list(benefits),
            specifications=_dump_list(specifications),
            tags=_dump_list(tags),
            related_product_ids=_dump_list(related_product_ids),
            is_featured=is_featured,
            max_quantity=max_quantity,
            total_stock=0,
            average_rating=0.0,
            review_count=0,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=product.id,
                slug=slug,
                title=title,
                category=category,
                base_price=base_price,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Variants and stock
    # -------------------------------------------------------------------
    def active_variants(self) -> list:
        return [v for v in self.variants if v.is_active]

    def active_stock(self) -> int:
        return sum(v.stock_level or 0 for v in self.active_variants())

    def variant_by_sku(self, sku):
        return next((v for v in self.variants if v.sku == sku), None)

    def add_variant(self, sku, size, color, stock_level=0, price_override=None, images=None, is_active=True):
        if self.variant_by_sku(sku) is not None:
            raise ConflictError(f"SKU {sku} already exists on this product", reason="duplicate_sku", sku=sku)

        color_vo = _as_color(color)
        if is_active and any(v.matches(size=size, color=color_vo.name) for v in self.active_variants()):
            raise ConflictError(
                f"An active {size}/{color_vo.name} variant already exists",
                reason="duplicate_variant",
                size=size,
                color=color_vo.name,
            )

        variant = Variant(
            sku=sku,
            size=size,
            color=color_vo,
            stock_level=stock_level,
            price_override=price_override,
            images=_dump_list(images),
            is_active=is_active,
        )
        with atomic_change(self):
            self.add_variants(variant)
            self.total_stock = self.active_stock()
            self.updated_at = datetime.now(UTC)

        self.raise_(
            VariantAdded(
                product_id=self.id,
                variant_id=variant.id,
                sku=sku,
                size=size,
                color=color_vo.name,
                stock_level=stock_level,
            )
        )
        return variant

    def update_variant_stock(self, sku, stock_level):
        variant = self.variant_by_sku(sku)
        if variant is None:
            raise NotFoundError(f"Variant {sku} not found", reason="variant_not_found", sku=sku)
        if stock_level is None or stock_level < 0:
            raise ValidationError({"stock_level": ["Stock level cannot be negative"]})

        previous = variant.stock_level
        with atomic_change(self):
            variant.stock_level = stock_level
            self.total_stock = self.active_stock()
            self.updated_at = datetime.now(UTC)

        self.raise_(
            VariantStockUpdated(
                product_id=self.id,
                sku=sku,
                previous_stock_level=previous,
                stock_level=stock_level,
                total_stock=self.total_stock,
            )
        )
        return variant

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def deactivate(self):
        if not self.is_active:
            raise ConflictError("Product is already inactive", reason="already_inactive")

        now = datetime.now(UTC)
        self.is_active = False
        self.updated_at = now
        self.raise_(ProductDeactivated(product_id=self.id, slug=self.slug, deactivated_at=now))

    def reactivate(self):
        if self.is_active:
            raise ConflictError("Product is already active", reason="already_active")

        now = datetime.now(UTC)
        self.is_active = True
        self.updated_at = now
        self.raise_(ProductReactivated(product_id=self.id, slug=self.slug, reactivated_at=now))

    def record_rating(self, average_rating, review_count):
        """Overwrite the cached rating. Only the rating engine calls this."""
        now = datetime.now(UTC)
        with atomic_change(self):
            self.average_rating = average_rating
            self.review_count = review_count
            self.updated_at = now

        self.raise_(
            ProductRatingRecalculated(
                product_id=self.id,
                average_rating=average_rating,
                review_count=review_count,
                recalculated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # JSON-backed lists
    # -------------------------------------------------------------------
    @property
    def tag_list(self) -> list:
        return _load_list(self.tags)

    @property
    def media_list(self) -> list:
        return _load_list(self.media)

    @property
    def benefit_list(self) -> list:
        return _load_list(self.benefits)

    @property
    def specification_list(self) -> list:
        return _load_list(self.specifications)

    @property
    def related_ids(self) -> list:
        return _load_list(self.related_product_ids)
