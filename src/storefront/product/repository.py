"""Repository for the Product aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.product.product import Product
from storefront.domain import storefront
from storefront.shared.errors import NotFoundError

# Catalogue reads load the whole matching set and filter/sort in memory.
QUERY_LIMIT = 10_000


@storefront.repository(part_of=Product)
class ProductRepository:
    def get_by_slug(self, slug: str) -> Product | None:
        if not slug:
            return None
        return self._dao.query.filter(slug=slug.strip().lower()).all().first

    def resolve(self, identifier: str) -> Product:
        """Resolve a product from either its internal id or its slug.

        Raises ``NotFoundError`` when neither matches.
        """
        product = None
        if identifier:
            try:
                product = self.get(identifier)
            except ObjectNotFoundError:
                product = self.get_by_slug(identifier)

        if product is not None:
            return product
        raise NotFoundError("Product not found", reason="product_not_found", product_id=identifier)

    def find_catalogue(self, include_inactive: bool = False) -> list[Product]:
        query = self._dao.query
        if not include_inactive:
            query = query.filter(is_active=True)
        return query.limit(QUERY_LIMIT).all().items

    def find_by_ids(self, product_ids) -> list[Product]:
        ids = [str(pid) for pid in product_ids or []]
        if not ids:
            return []
        return self._dao.query.filter(id__in=ids).limit(QUERY_LIMIT).all().items

    def sku_in_use(self, sku: str) -> bool:
        return any(product.variant_by_sku(sku) is not None for product in self.find_catalogue(include_inactive=True))
