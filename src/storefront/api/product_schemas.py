"""Pydantic schemas for the storefront product API.

Payloads are camelCase on the wire. Products are addressed by slug, which is
also what the storefront calls a product's ``id``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storefront.product.presentation import (
    available_colors,
    available_sizes,
    pricing,
)

DEFAULT_BRAND = "Polohigh"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class UpdateStockRequest(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={"examples": [{"sku": "TEE-BLK-M", "stockLevel": 42}]},
    )

    sku: str = Field(min_length=1, max_length=64)
    stock_level: int = Field(ge=0)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ColorOption(CamelModel):
    value: str
    label: str
    hex: str


class VariantColor(CamelModel):
    name: str
    hex: str | None = None


class VariantSchema(CamelModel):
    sku: str
    size: str
    color: VariantColor
    stock_level: int
    price_override: float | None = None
    images: list[str] = []
    is_active: bool

    @classmethod
    def from_variant(cls, variant) -> VariantSchema:
        return cls(
            sku=variant.sku,
            size=variant.size,
            color=VariantColor(name=variant.color.name, hex=variant.color.hex),
            stock_level=variant.stock_level or 0,
            price_override=variant.price_override,
            images=variant.image_urls,
            is_active=bool(variant.is_active),
        )


def _image_url(product) -> str:
    media = product.media_list
    primary = next((m for m in media if isinstance(m, dict) and m.get("isPrimary")), None)
    first = primary or (media[0] if media else None)
    if isinstance(first, dict):
        return first.get("url", "")
    return first or ""


class ProductSummary(CamelModel):
    id: str
    title: str
    price: float
    mrp: float
    discount_percentage: float
    brand: str
    category: str
    subcategory: str | None = None
    target_gender: str | None = None
    sizes: list[str]
    colors: list[ColorOption]
    image_url: str
    description: str | None = None
    is_available: bool
    is_featured: bool
    average_rating: float
    review_count: int

    @classmethod
    def from_product(cls, product) -> ProductSummary:
        price = pricing(product)
        return cls(
            id=product.slug,
            title=product.title,
            price=price.price,
            mrp=price.mrp,
            discount_percentage=price.discount_percentage,
            brand=product.brand or DEFAULT_BRAND,
            category=product.category,
            subcategory=product.subcategory,
            target_gender=product.target_gender,
            sizes=available_sizes(product.variants),
            colors=[ColorOption(**c) for c in available_colors(product.variants)],
            image_url=_image_url(product),
            description=product.description,
            is_available=bool(product.is_active) and (product.total_stock or 0) > 0,
            is_featured=bool(product.is_featured),
            average_rating=product.average_rating or 0.0,
            review_count=product.review_count or 0,
        )


class ProductListResponse(CamelModel):
    success: bool = True
    count: int
    total: int
    page: int
    total_pages: int
    products: list[ProductSummary]


class RelatedProduct(CamelModel):
    id: str
    title: str
    price: float
    image_url: str

    @classmethod
    def from_product(cls, product) -> RelatedProduct:
        return cls(id=product.slug, title=product.title, price=product.base_price, image_url=_image_url(product))


class ProductDetail(ProductSummary):
    slug: str
    base_price: float
    media: list = []
    benefits: list = []
    specifications: list = []
    tags: list[str] = []
    total_stock: int
    variants: list[VariantSchema]
    related_products: list[RelatedProduct] = []
    selected_variant: VariantSchema | None = None
    display_price: float
    is_purchasable: bool
    max_quantity: int


class ProductDetailResponse(CamelModel):
    success: bool = True
    product: ProductDetail


class VariantListResponse(CamelModel):
    success: bool = True
    variants: list[VariantSchema]


class AvailabilityResponse(CamelModel):
    success: bool = True
    available: bool
    sku: str | None = None
    stock_level: int | None = None
    total_stock: int | None = None


class StockLevel(CamelModel):
    sku: str
    stock_level: int


class StockUpdateResponse(CamelModel):
    success: bool = True
    message: str = "Stock updated successfully"
    variant: StockLevel
    total_stock: int
    low_stock: bool
