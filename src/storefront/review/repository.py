"""Repository for the Review aggregate."""

from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.domain import storefront
from storefront.review.eligibility import ALREADY_REVIEWED, ALREADY_REVIEWED_MESSAGE
from storefront.review.review import Review, ReviewStatus, review_key
from storefront.shared.errors import ConflictError, NotFoundError

QUERY_LIMIT = 10_000


@storefront.repository(part_of=Review)
class ReviewRepository:
    def find_by_customer_and_product(self, customer_id, product_id) -> Review | None:
        return self._dao.query.filter(review_key=review_key(customer_id, product_id)).all().first

    def find_for_product(self, product_id, status: ReviewStatus | None = None) -> list[Review]:
        query = self._dao.query.filter(product_id=str(product_id))
        if status is not None:
            query = query.filter(status=status.value)
        return query.limit(QUERY_LIMIT).all().items

    def find_approved_for_product(self, product_id) -> list[Review]:
        return self.find_for_product(product_id, status=ReviewStatus.APPROVED)

    def find_for_customer(self, customer_id) -> list[Review]:
        return self._dao.query.filter(customer_id=str(customer_id)).limit(QUERY_LIMIT).all().items

    def find_all(self) -> list[Review]:
        return self._dao.query.limit(QUERY_LIMIT).all().items

    def fetch(self, review_id) -> Review:
        """``get`` that raises the storefront ``NotFoundError``."""
        try:
            return self.get(review_id)
        except ObjectNotFoundError:
            raise NotFoundError("Review not found", reason="review_not_found", review_id=str(review_id)) from None

    def add_new(self, review: Review) -> Review:
        """``add`` for a fresh submission.

        A taken ``review_key`` means a concurrent submission for the same
        customer and product won the race; report it as a duplicate review.
        """
        try:
            return self.add(review)
        except ValidationError as exc:
            if "review_key" not in exc.messages:
                raise
            raise ConflictError(
                ALREADY_REVIEWED_MESSAGE,
                reason=ALREADY_REVIEWED,
                product_id=str(review.product_id),
            ) from None
