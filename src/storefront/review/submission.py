"""SubmitReview: a verified buyer submits a review.

The product may be named by id or slug. One review per customer per product
is checked here and again by the unique ``review_key`` at the storage layer,
which settles two concurrent submissions.
"""

import json

from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.product.product import Product
from storefront.domain import storefront
from storefront.review.eligibility import ALREADY_REVIEWED, check_eligibility
from storefront.review.review import Review
from storefront.shared.errors import ConflictError, ForbiddenError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Review")
class SubmitReview:
    product = String(required=True, max_length=200)  # id or slug
    customer_id = Identifier(required=True)
    order_id = Identifier()
    rating = Integer(required=True, min_value=1, max_value=5)
    title = String(required=True, max_length=100)
    comment = Text()
    images = Text()  # JSON array of urls or {url, alt_text}
    variant_size = String(max_length=20)
    variant_color = String(max_length=50)


@storefront.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        product = current_domain.repository_for(Product).resolve(command.product)

        eligibility = check_eligibility(command.customer_id, product.id, order_id=command.order_id)
        if not eligibility.can_review:
            if eligibility.reason == ALREADY_REVIEWED:
                raise ConflictError(
                    eligibility.message,
                    reason=eligibility.reason,
                    review_id=eligibility.existing_review["id"],
                )
            raise ForbiddenError(eligibility.message, reason=eligibility.reason)

        variant = None
        if command.variant_size or command.variant_color:
            variant = {"size": command.variant_size, "color": command.variant_color}

        review = Review.submit(
            product_id=product.id,
            customer_id=command.customer_id,
            rating=command.rating,
            title=command.title,
            comment=command.comment,
            order_id=eligibility.order_id,
            images=json.loads(command.images) if command.images else None,
            variant=variant,
            is_verified_purchase=True,
        )
        current_domain.repository_for(Review).add_new(review)

        logger.info(
            "Review submitted",
            review_id=str(review.id),
            product_id=str(product.id),
            customer_id=str(command.customer_id),
            order_id=eligibility.order_id,
        )
        return str(review.id)
