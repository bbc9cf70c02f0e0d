"""Review eligibility gate.

A customer may review a product only once, and only after receiving it in a
delivered or completed order. The gate answers with a reason code the
storefront can branch on instead of parsing the message.
"""

from dataclasses import dataclass

from protean.utils.globals import current_domain

from storefront.order.ledger import find_qualifying_order
from storefront.review.review import Review

ALREADY_REVIEWED = "already_reviewed"
NOT_PURCHASED = "not_purchased_or_not_delivered"

ALREADY_REVIEWED_MESSAGE = "You have already reviewed this product. You can update your existing review instead."
NOT_PURCHASED_MESSAGE = "You can only review products that you have purchased and received."
ELIGIBLE_MESSAGE = "You can write a verified review for this product"


@dataclass(frozen=True)
class ReviewEligibility:
    can_review: bool
    reason: str | None = None
    message: str = ""
    has_purchased: bool | None = None
    order_id: str | None = None
    existing_review: dict | None = None


def check_eligibility(customer_id, product_id, order_id=None) -> ReviewEligibility:
    existing = current_domain.repository_for(Review).find_by_customer_and_product(customer_id, product_id)
    if existing is not None:
        return ReviewEligibility(
            can_review=False,
            reason=ALREADY_REVIEWED,
            message=ALREADY_REVIEWED_MESSAGE,
            existing_review={
                "id": str(existing.id),
                "rating": existing.rating.score,
                "status": existing.status,
            },
        )

    order = find_qualifying_order(customer_id, product_id, order_id=order_id)
    if order is None:
        return ReviewEligibility(
            can_review=False,
            reason=NOT_PURCHASED,
            message=NOT_PURCHASED_MESSAGE,
            has_purchased=False,
        )

    return ReviewEligibility(
        can_review=True,
        message=ELIGIBLE_MESSAGE,
        has_purchased=True,
        order_id=str(order.id),
    )
