"""Domain events for the Category aggregate."""

from protean.fields import Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Category")
class CategoryCreated:
    """A category was created on the fly while writing a product."""


    category_id: Identifier(required=True)
    name: String(required=True)
    slug: String(required=True)
    target_gender: String()


@storefront.event(part_of="Category")
class CategoryReactivated:

    category_id: Identifier(required=True)
    slug: String(required=True)


@storefront.event(part_of="Category")
class CategoryProductCountChanged:

    category_id: Identifier(required=True)
    product_count: Integer(default=0)
