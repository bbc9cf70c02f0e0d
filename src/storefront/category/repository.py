"""Repository for the Category aggregate."""

from storefront.category.category import Category
from storefront.domain import storefront

QUERY_LIMIT = 10_000


@storefront.repository(part_of=Category)
class CategoryRepository:
    def get_by_slug(self, slug: str) -> Category | None:
        if not slug:
            return None
        return self._dao.query.filter(slug=slug).all().first

    def find_by_name(self, name: str) -> Category | None:
        """Case-insensitive exact name match."""
        if not name:
            return None
        wanted = name.strip().lower()
        return next(
            (c for c in self._dao.query.limit(QUERY_LIMIT).all().items if (c.name or "").lower() == wanted),
            None,
        )

    def slug_taken(self, slug: str) -> bool:
        return self.get_by_slug(slug) is not None
