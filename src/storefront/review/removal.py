"""DeleteReview: the owner deletes their review, in any state."""

from protean.fields import Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.review.rating import recompute_product_rating
from storefront.review.review import Review
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Review")
class DeleteReview:
    review_id = Identifier(required=True)
    customer_id = Identifier(required=True)


@storefront.command_handler(part_of=Review)
class DeleteReviewHandler:
    @handle(DeleteReview)
    def delete_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.fetch(command.review_id)

        was_approved = review.is_approved
        review.mark_deleted(command.customer_id)
        repo._dao.delete(review)

        if was_approved:
            recompute_product_rating(review.product_id, changed=review, deleted=True)

        logger.info(
            "Review deleted",
            review_id=str(review.id),
            product_id=str(review.product_id),
            customer_id=str(command.customer_id),
        )
