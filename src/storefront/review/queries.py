"""Read-side queries over reviews.

Listings load the candidate reviews through the repository, then filter,
sort and paginate them in memory.
"""

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime

from protean.utils.globals import current_domain

from storefront.product.product import Product
from storefront.review.presentation import reconcile_pending
from storefront.review.rating import RatingSummary, summarize_ratings
from storefront.review.review import Review, ReviewStatus
from storefront.shared.errors import InvalidRequestError

PRODUCT_PAGE_SIZE = 10
MODERATION_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

_EPOCH = datetime.min.replace(tzinfo=UTC)


def _created_at(review) -> datetime:
    if review.created_at is None:
        return _EPOCH
    return review.created_at if review.created_at.tzinfo else review.created_at.replace(tzinfo=UTC)


_SORT_FIELDS = {
    "createdAt": _created_at,
    "rating": lambda r: r.rating.score,
    "helpfulVotes": lambda r: r.helpful_votes or 0,
}


@dataclass(frozen=True)
class ReviewPage:
    reviews: list = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = PRODUCT_PAGE_SIZE
    summary: RatingSummary | None = None

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    @property
    def has_more(self) -> bool:
        return (self.page - 1) * self.limit + len(self.reviews) < self.total


def _sort(reviews, sort_by, sort_order) -> list:
    key = _SORT_FIELDS.get(sort_by)
    if key is None:
        raise InvalidRequestError(
            f"Cannot sort reviews by '{sort_by}'",
            allowed=sorted(_SORT_FIELDS),
        )
    if sort_order not in ("asc", "desc"):
        raise InvalidRequestError(f"Sort order must be 'asc' or 'desc', got '{sort_order}'")
    return sorted(reviews, key=key, reverse=sort_order == "desc")


def _page(reviews, page, limit, default_limit, summary=None) -> ReviewPage:
    limit = max(1, min(limit or default_limit, MAX_PAGE_SIZE))
    page = max(1, page or 1)
    start = (page - 1) * limit
    return ReviewPage(
        reviews=reviews[start : start + limit],
        total=len(reviews),
        page=page,
        limit=limit,
        summary=summary,
    )


def list_product_reviews(
    identifier,
    page=1,
    limit=PRODUCT_PAGE_SIZE,
    rating=None,
    sort_by="createdAt",
    sort_order="desc",
    verified_only=False,
    viewer_id=None,
) -> ReviewPage:
    """Approved reviews of a product, with the rating summary of the whole approved set.

    When ``viewer_id`` is given, the viewer's own review that is still
    awaiting moderation (or was rejected) leads the listing. It takes a slot
    on the first page and counts towards ``total``; the summary is unaffected.
    """
    product = current_domain.repository_for(Product).resolve(identifier)
    repo = current_domain.repository_for(Review)

    approved = repo.find_approved_for_product(product.id)
    summary = summarize_ratings(review.rating.score for review in approved)

    matching = [
        review
        for review in approved
        if (rating is None or review.rating.score == rating) and (not verified_only or review.is_verified_purchase)
    ]
    ordered = _sort(matching, sort_by, sort_order)
    if viewer_id:
        own = repo.find_by_customer_and_product(viewer_id, product.id)
        if own is not None and not own.is_approved:
            ordered = reconcile_pending(ordered, [own]) + ordered
    return _page(ordered, page, limit, PRODUCT_PAGE_SIZE, summary=summary)


def list_customer_reviews(customer_id, page=1, limit=PRODUCT_PAGE_SIZE) -> ReviewPage:
    """A customer's own reviews in every state, newest first."""
    reviews = current_domain.repository_for(Review).find_for_customer(customer_id)
    return _page(_sort(reviews, "createdAt", "desc"), page, limit, PRODUCT_PAGE_SIZE)


def list_reviews_for_moderation(
    status=None,
    rating=None,
    verified_only=False,
    search=None,
    page=1,
    limit=MODERATION_PAGE_SIZE,
    sort_by="createdAt",
    sort_order="desc",
) -> ReviewPage:
    if status is not None:
        try:
            status = ReviewStatus(status).value
        except ValueError:
            raise InvalidRequestError(f"Unknown review status '{status}'") from None

    needle = (search or "").strip().lower()

    def matches(review) -> bool:
        if status is not None and review.status != status:
            return False
        if rating is not None and review.rating.score != rating:
            return False
        if verified_only and not review.is_verified_purchase:
            return False
        if needle:
            return needle in (review.title or "").lower() or needle in (review.comment or "").lower()
        return True

    reviews = [review for review in current_domain.repository_for(Review).find_all() if matches(review)]
    return _page(_sort(reviews, sort_by, sort_order), page, limit, MODERATION_PAGE_SIZE)
