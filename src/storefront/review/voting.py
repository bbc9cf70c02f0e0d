"""MarkReviewHelpful / UnmarkReviewHelpful: one helpful mark per customer."""

from protean.fields import Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.review.review import Review


@storefront.command(part_of="Review")
class MarkReviewHelpful:
    review_id = Identifier(required=True)
    customer_id = Identifier(required=True)


@storefront.command(part_of="Review")
class UnmarkReviewHelpful:
    review_id = Identifier(required=True)
    customer_id = Identifier(required=True)


@storefront.command_handler(part_of=Review)
class HelpfulVoteHandler:
    @handle(MarkReviewHelpful)
    def mark_helpful(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.fetch(command.review_id)
        review.mark_helpful(command.customer_id)
        repo.add(review)
        return review.helpful_votes

    @handle(UnmarkReviewHelpful)
    def unmark_helpful(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.fetch(command.review_id)
        review.unmark_helpful(command.customer_id)
        repo.add(review)
        return review.helpful_votes
