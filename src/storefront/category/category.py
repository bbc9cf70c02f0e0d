"""Category aggregate root.

Categories are a flat taxonomy keyed by slug. They are never edited through
an API here; products create or revive them through
``storefront.category.resolution``.
"""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Integer, String

from storefront.category.events import (
    CategoryCreated,
    CategoryProductCountChanged,
    CategoryReactivated,
)
from storefront.product.product import TargetGender
from storefront.domain import storefront


@storefront.aggregate
class Category:
    name: String(required=True, max_length=100)
    slug: String(required=True, max_length=120, unique=True)
    target_gender: String(choices=TargetGender)
    is_active: Boolean(default=True)
    product_count: Integer(default=0, min_value=0)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, name, slug, target_gender=None):
        now = datetime.now(UTC)
        category = cls(
            name=name,
            slug=slug,
            target_gender=target_gender,
            is_active=True,
            product_count=0,
            created_at=now,
            updated_at=now,
        )
        category.raise_(
            CategoryCreated(
                category_id=category.id,
                name=name,
                slug=slug,
                target_gender=target_gender,
            )
        )
        return category

    def reactivate(self):
        self.is_active = True
        self.updated_at = datetime.now(UTC)
        self.raise_(CategoryReactivated(category_id=self.id, slug=self.slug))

    def assign_target_gender(self, target_gender):
        """Fill the target gender only when the category has none yet."""
        if target_gender and not self.target_gender:
            self.target_gender = target_gender
            self.updated_at = datetime.now(UTC)

    def increment_product_count(self):
        self.product_count = (self.product_count or 0) + 1
        self.updated_at = datetime.now(UTC)
        self.raise_(CategoryProductCountChanged(category_id=self.id, product_count=self.product_count))
