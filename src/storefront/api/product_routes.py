"""FastAPI endpoints for the storefront catalogue.

Reads go straight to the listing and presentation modules; the only write
here is the back-office stock update, which is processed as a command.
"""

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from storefront.api.product_schemas import (
    AvailabilityResponse,
    ProductDetail,
    ProductDetailResponse,
    ProductListResponse,
    ProductSummary,
    RelatedProduct,
    StockLevel,
    StockUpdateResponse,
    UpdateStockRequest,
    VariantListResponse,
    VariantSchema,
)
from storefront.product.listing import DEFAULT_PAGE_SIZE, ProductCriteria, SortKey, list_products
from storefront.product.presentation import (
    display_price,
    is_purchasable,
    max_purchasable_quantity,
    resolve_variant,
)
from storefront.product.product import Product
from storefront.product.stock import UpdateVariantStock
from storefront.shared.errors import InvalidRequestError, NotFoundError

product_router = APIRouter(prefix="/api/products", tags=["products"])


def _csv(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _sort_key(value: str) -> SortKey:
    try:
        return SortKey(value)
    except ValueError:
        raise InvalidRequestError(
            f"Unknown sort '{value}'",
            allowed=[key.value for key in SortKey],
        ) from None


def _active_product(slug: str) -> Product:
    product = current_domain.repository_for(Product).get_by_slug(slug)
    if product is None or not product.is_active:
        raise NotFoundError("Product not found", reason="product_not_found", product_id=slug)
    return product


@product_router.get("", response_model=ProductListResponse)
async def list_catalogue(
    category: str | None = None,
    subcategory: str | None = None,
    target_gender: str | None = Query(default=None, alias="targetGender"),
    min_price: float | None = Query(default=None, alias="minPrice", ge=0),
    max_price: float | None = Query(default=None, alias="maxPrice", ge=0),
    sizes: str | None = None,
    colors: str | None = None,
    tags: str | None = None,
    search: str | None = None,
    min_rating: float | None = Query(default=None, alias="minRating", ge=0, le=5),
    sort: str = SortKey.RELEVANCE.value,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=100),
    in_stock: bool = Query(default=False, alias="inStock"),
    include_inactive: bool = Query(default=False, alias="includeInactive"),
) -> ProductListResponse:
    criteria = ProductCriteria(
        category=category,
        subcategory=subcategory,
        target_gender=target_gender,
        min_price=min_price,
        max_price=max_price,
        sizes=_csv(sizes),
        colors=_csv(colors),
        tags=_csv(tags),
        search=search,
        min_rating=min_rating,
        in_stock=in_stock,
        include_inactive=include_inactive,
        sort=_sort_key(sort),
        page=page,
        limit=limit,
    )
    result = list_products(criteria)
    return ProductListResponse(
        count=result.count,
        total=result.total,
        page=result.page,
        total_pages=result.total_pages,
        products=[ProductSummary.from_product(p) for p in result.items],
    )


@product_router.get("/{slug}", response_model=ProductDetailResponse)
async def get_product(slug: str, size: str | None = None, color: str | None = None) -> ProductDetailResponse:
    repo = current_domain.repository_for(Product)
    product = _active_product(slug)

    variants = list(product.variants)
    selected = resolve_variant(variants, size=size, color=color)
    related = [p for p in repo.find_by_ids(product.related_ids) if p.is_active]

    detail = ProductDetail(
        **ProductSummary.from_product(product).model_dump(),
        slug=product.slug,
        base_price=product.base_price,
        media=product.media_list,
        benefits=product.benefit_list,
        specifications=product.specification_list,
        tags=product.tag_list,
        total_stock=product.total_stock or 0,
        variants=[VariantSchema.from_variant(v) for v in variants],
        related_products=[RelatedProduct.from_product(p) for p in related],
        selected_variant=VariantSchema.from_variant(selected) if selected is not None else None,
        display_price=display_price(product, selected),
        is_purchasable=is_purchasable(selected),
        max_quantity=max_purchasable_quantity(selected, product.max_quantity),
    )
    return ProductDetailResponse(product=detail)


@product_router.get("/{slug}/variants", response_model=VariantListResponse)
async def get_product_variants(slug: str, size: str | None = None, color: str | None = None) -> VariantListResponse:
    product = _active_product(slug)
    variants = [v for v in product.active_variants() if v.matches(size=size, color=color)]
    return VariantListResponse(variants=[VariantSchema.from_variant(v) for v in variants])


@product_router.get("/{slug}/availability", response_model=AvailabilityResponse)
async def check_availability(slug: str, sku: str | None = None) -> AvailabilityResponse:
    product = _active_product(slug)

    if sku:
        variant = product.variant_by_sku(sku)
        if variant is None:
            raise NotFoundError("Variant not found", reason="variant_not_found", sku=sku)
        return AvailabilityResponse(available=is_purchasable(variant), sku=variant.sku, stock_level=variant.stock_level)

    return AvailabilityResponse(
        available=bool(product.is_active) and (product.total_stock or 0) > 0,
        total_stock=product.total_stock or 0,
    )


@product_router.patch("/{slug}/stock", response_model=StockUpdateResponse)
async def update_stock(slug: str, body: UpdateStockRequest) -> StockUpdateResponse:
    command = UpdateVariantStock(product=slug, sku=body.sku, stock_level=body.stock_level)
    result = current_domain.process(command, asynchronous=False)
    return StockUpdateResponse(
        variant=StockLevel(sku=result["sku"], stock_level=result["stock_level"]),
        total_stock=result["total_stock"],
        low_stock=result["low_stock"],
    )
