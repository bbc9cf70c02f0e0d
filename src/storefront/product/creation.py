"""Product creation: command and handler.

Products are written by the back office only. There is no REST endpoint for
generic product CRUD; seed scripts and admin tooling process ``CreateProduct``
directly.
"""

import json

from protean import handle
from protean.fields import Boolean, Float, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.category.category import Category
from storefront.category.resolution import resolve_category
from storefront.product.product import Product
from storefront.domain import storefront
from storefront.shared.errors import ConflictError, InvalidRequestError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

OTHER_CATEGORY = "other"


@storefront.command(part_of="Product")
class CreateProduct:
    slug: String(required=True, max_length=200)
    title: String(required=True, max_length=255)
    description: Text()
    brand: String(max_length=100)
    category: String(required=True, max_length=100)
    custom_category_name: String(max_length=100)
    subcategory: String(max_length=100)
    target_gender: String(max_length=10)
    base_price: Float(required=True)
    mrp: Float()
    discount_percentage: Float()
    media: Text()  # JSON array
    benefits: Text()  # JSON array
    specifications: Text()  # JSON array
    tags: Text()  # JSON array
    related_product_ids: Text()  # JSON array
    variants: Text()  # JSON array of {sku, size, color, stock_level, price_override, images, is_active}
    is_featured: Boolean(default=False)
    max_quantity: Integer()


def _json(raw):
    return json.loads(raw) if raw else None


@storefront.command_handler(part_of=Product)
class CreateProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        repo = current_domain.repository_for(Product)
        category_repo = current_domain.repository_for(Category)

        category = None
        category_slug = command.category.strip().lower()
        if category_slug == OTHER_CATEGORY:
            custom_name = (command.custom_category_name or "").strip()
            if not custom_name:
                raise InvalidRequestError(
                    "New category name is required when selecting Other",
                    reason="custom_category_required",
                )
            category = resolve_category(custom_name, command.target_gender)
            category_slug = category.slug
        else:
            category = category_repo.get_by_slug(category_slug)

        slug = command.slug.strip().lower()
        if repo.get_by_slug(slug) is not None:
            raise ConflictError("Product with this slug already exists", reason="duplicate_slug", slug=slug)

        variants = _json(command.variants) or []
        for entry in variants:
            if repo.sku_in_use(entry["sku"]):
                raise ConflictError(
                    f"SKU {entry['sku']} is already used by another product",
                    reason="duplicate_sku",
                    sku=entry["sku"],
                )

        product = Product.create(
            slug=slug,
            title=command.title,
            description=command.description,
            brand=command.brand,
            category=category_slug,
            subcategory=command.subcategory,
            target_gender=command.target_gender,
            base_price=command.base_price,
            mrp=command.mrp,
            discount_percentage=command.discount_percentage,
            media=_json(command.media),
            benefits=_json(command.benefits),
            specifications=_json(command.specifications),
            tags=_json(command.tags),
            related_product_ids=_json(command.related_product_ids),
            is_featured=command.is_featured,
            max_quantity=command.max_quantity,
        )
        for entry in variants:
            product.add_variant(
                sku=entry["sku"],
                size=entry["size"],
                color=entry["color"],
                stock_level=entry.get("stock_level", 0),
                price_override=entry.get("price_override"),
                images=entry.get("images"),
                is_active=entry.get("is_active", True),
            )
        repo.add(product)

        if category is not None:
            category.increment_product_count()
            category_repo.add(category)

        logger.info(
            "Product created",
            product_id=str(product.id),
            slug=slug,
            category=category_slug,
            variant_count=len(variants),
        )
        return str(product.id)
