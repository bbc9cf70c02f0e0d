"""EditReview: the owner changes their review.

Any edit sends the review back to moderation. If it was approved, it leaves
the approved set and the product rating is recomputed.
"""

import json

from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.review.rating import recompute_product_rating
from storefront.review.review import Review, ReviewStatus
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Review")
class EditReview:
    """Unset fields are left unchanged. ``images`` set to ``[]`` clears them."""

    review_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    rating = Integer(min_value=1, max_value=5)
    title = String(max_length=100)
    comment = Text()
    images = Text()  # JSON array
    variant_size = String(max_length=20)
    variant_color = String(max_length=50)


@storefront.command_handler(part_of=Review)
class EditReviewHandler:
    @handle(EditReview)
    def edit_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.fetch(command.review_id)

        changes = {}
        if command.rating is not None:
            changes["rating"] = command.rating
        if command.title is not None:
            changes["title"] = command.title
        if command.comment is not None:
            changes["comment"] = command.comment
        if command.images is not None:
            changes["images"] = json.loads(command.images)
        if command.variant_size is not None or command.variant_color is not None:
            changes["variant"] = {"size": command.variant_size, "color": command.variant_color}

        previous_status = review.edit(command.customer_id, **changes)
        repo.add(review)

        if previous_status == ReviewStatus.APPROVED.value:
            recompute_product_rating(review.product_id, changed=review)

        logger.info(
            "Review edited",
            review_id=str(review.id),
            product_id=str(review.product_id),
            previous_status=previous_status,
            status=review.status,
        )
        return str(review.id)
