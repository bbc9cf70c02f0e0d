"""RespondToReview: attach the store's public reply to a review."""

from protean.fields import Identifier, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.review.review import Review


@storefront.command(part_of="Review")
class RespondToReview:
    review_id = Identifier(required=True)
    admin_id = Identifier(required=True)
    message = Text(required=True)


@storefront.command_handler(part_of=Review)
class RespondToReviewHandler:
    @handle(RespondToReview)
    def respond_to_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.fetch(command.review_id)

        review.respond(admin_id=command.admin_id, message=command.message)
        repo.add(review)
        return str(review.id)
