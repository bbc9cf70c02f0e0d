"""ApproveReview / RejectReview: admin moderation.

Approval always adds the review to the approved set. Rejection removes it
only when it was approved. The product rating is recomputed whenever the
approved set changes.
"""

from protean.fields import Identifier, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.review.rating import recompute_product_rating
from storefront.review.review import Review, ReviewStatus
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Review")
class ApproveReview:
    review_id = Identifier(required=True)
    moderator_id = Identifier(required=True)


@storefront.command(part_of="Review")
class RejectReview:
    review_id = Identifier(required=True)
    moderator_id = Identifier(required=True)
    reason = Text()  # Defaults to a generic guideline message


@storefront.command_handler(part_of=Review)
class ModerateReviewHandler:
    @handle(ApproveReview)
    def approve_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.fetch(command.review_id)

        review.approve(moderator_id=command.moderator_id)
        repo.add(review)
        recompute_product_rating(review.product_id, changed=review)

        logger.info(
            "Review approved",
            review_id=str(review.id),
            product_id=str(review.product_id),
            moderator_id=str(command.moderator_id),
        )
        return str(review.id)

    @handle(RejectReview)
    def reject_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.fetch(command.review_id)

        previous_status = review.reject(moderator_id=command.moderator_id, reason=command.reason)
        repo.add(review)
        if previous_status == ReviewStatus.APPROVED.value:
            recompute_product_rating(review.product_id, changed=review)

        logger.info(
            "Review rejected",
            review_id=str(review.id),
            product_id=str(review.product_id),
            moderator_id=str(command.moderator_id),
            previous_status=previous_status,
        )
        return str(review.id)
