"""Variant stock updates: command and handler."""

from protean import handle
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from storefront.product.product import Product
from storefront.domain import storefront
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

LOW_STOCK_THRESHOLD = 10


@storefront.command(part_of="Product")
class UpdateVariantStock:
    product: String(required=True, max_length=200)  # id or slug
    sku: String(required=True, max_length=64)
    stock_level: Integer(required=True, min_value=0)


@storefront.command_handler(part_of=Product)
class UpdateVariantStockHandler:
    @handle(UpdateVariantStock)
    def update_variant_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.resolve(command.product)

        variant = product.update_variant_stock(command.sku, command.stock_level)
        repo.add(product)

        if variant.stock_level < LOW_STOCK_THRESHOLD:
            logger.warning(
                "Low stock",
                product_id=str(product.id),
                sku=variant.sku,
                stock_level=variant.stock_level,
            )

        return {
            "sku": variant.sku,
            "stock_level": variant.stock_level,
            "total_stock": product.total_stock,
            "low_stock": variant.stock_level < LOW_STOCK_THRESHOLD,
        }
