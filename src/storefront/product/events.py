"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:

    product_id: Identifier(required=True)
    slug: String(required=True)
    title: String(required=True)
    category: String(required=True)
    base_price: Float(default=0.0)
    created_at: DateTime(required=True)


@storefront.event(part_of="Product")
class VariantAdded:

    product_id: Identifier(required=True)
    variant_id: Identifier(required=True)
    sku: String(required=True)
    size: String(required=True)
    color: String(required=True)
    stock_level: Integer(default=0)


@storefront.event(part_of="Product")
class VariantStockUpdated:

    product_id: Identifier(required=True)
    sku: String(required=True)
    previous_stock_level: Integer(default=0)
    stock_level: Integer(default=0)
    total_stock: Integer(default=0)


@storefront.event(part_of="Product")
class ProductDeactivated:

    product_id: Identifier(required=True)
    slug: String(required=True)
    deactivated_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductReactivated:

    product_id: Identifier(required=True)
    slug: String(required=True)
    reactivated_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductRatingRecalculated:
    """The cached rating moved because the approved review set changed."""


    product_id: Identifier(required=True)
    average_rating: Float(default=0.0)
    review_count: Integer(default=0)
    recalculated_at: DateTime(required=True)
