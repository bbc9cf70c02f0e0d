"""FastAPI routes for product reviews.

Each route translates between the Pydantic schemas (external contract) and
Protean commands or read-side queries. Acting user ids travel in the
request: in the body for writes, in the query string for reads and deletes.
"""

import json

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from storefront.product.product import Product
from storefront.api.review_schemas import (
    AdminResponseEnvelope,
    AdminResponseResult,
    AdminResponseSchema,
    EditReviewRequest,
    EligibilityResponse,
    EligibilitySchema,
    HelpfulVoteRequest,
    HelpfulVotesData,
    HelpfulVotesResponse,
    ModeratorRequest,
    PaginationSchema,
    RatingSummarySchema,
    RejectReviewRequest,
    RespondToReviewRequest,
    ReviewEnvelope,
    ReviewListData,
    ReviewListResponse,
    ReviewResponse,
    ReviewSchema,
    StatusResponse,
    SubmitReviewRequest,
)
from storefront.review.queries import (
    MODERATION_PAGE_SIZE,
    PRODUCT_PAGE_SIZE,
    list_customer_reviews,
    list_product_reviews,
    list_reviews_for_moderation,
)
from storefront.review.editing import EditReview
from storefront.review.eligibility import check_eligibility
from storefront.review.moderation import ApproveReview, RejectReview
from storefront.review.removal import DeleteReview
from storefront.review.repository import ReviewRepository
from storefront.review.response import RespondToReview
from storefront.review.review import Review
from storefront.review.submission import SubmitReview
from storefront.review.voting import MarkReviewHelpful, UnmarkReviewHelpful

review_router = APIRouter(prefix="/api/reviews", tags=["reviews"])


def _images_json(images):
    if images is None:
        return None
    return json.dumps([image.model_dump() for image in images])


def _load(review_id) -> Review:
    repo: ReviewRepository = current_domain.repository_for(Review)
    return repo.fetch(review_id)


def _review_response(review_id, message) -> ReviewResponse:
    return ReviewResponse(message=message, data=ReviewEnvelope(review=ReviewSchema.from_review(_load(review_id))))


def _list_response(page) -> ReviewListResponse:
    return ReviewListResponse(
        data=ReviewListData(
            reviews=[ReviewSchema.from_review(review) for review in page.reviews],
            summary=RatingSummarySchema.from_summary(page.summary) if page.summary else None,
            pagination=PaginationSchema.from_page(page),
        )
    )


# ---------------------------------------------------------------------------
# Customer endpoints
# ---------------------------------------------------------------------------
@review_router.post("", status_code=201, response_model=ReviewResponse)
async def submit_review(body: SubmitReviewRequest) -> ReviewResponse:
    """Submit a review for a product the customer has received."""
    command = SubmitReview(
        product=body.product_id,
        customer_id=body.customer_id,
        order_id=body.order_id,
        rating=body.rating,
        title=body.title,
        comment=body.comment,
        images=_images_json(body.images),
        variant_size=body.variant.size if body.variant else None,
        variant_color=body.variant.color if body.variant else None,
    )
    review_id = current_domain.process(command, asynchronous=False)
    return _review_response(review_id, "Review submitted successfully. It will be visible after admin approval.")


@review_router.get("/product/{product_id}", response_model=ReviewListResponse)
async def get_product_reviews(
    product_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=PRODUCT_PAGE_SIZE, ge=1, le=100),
    rating: int | None = Query(default=None, ge=1, le=5),
    sort_by: str = Query(default="createdAt", alias="sortBy"),
    sort_order: str = Query(default="desc", alias="sortOrder"),
    verified: bool = False,
    viewer_id: str | None = Query(default=None, alias="viewerId"),
) -> ReviewListResponse:
    result = list_product_reviews(
        product_id,
        page=page,
        limit=limit,
        rating=rating,
        sort_by=sort_by,
        sort_order=sort_order,
        verified_only=verified,
        viewer_id=viewer_id,
    )
    return _list_response(result)


@review_router.get("/can-review/{product_id}", response_model=EligibilityResponse, response_model_exclude_none=True)
async def can_review_product(product_id: str, customer_id: str = Query(alias="customerId")) -> EligibilityResponse:
    product = current_domain.repository_for(Product).resolve(product_id)
    eligibility = check_eligibility(customer_id, product.id)
    return EligibilityResponse(
        data=EligibilitySchema(
            can_review=eligibility.can_review,
            reason=eligibility.reason,
            message=eligibility.message,
            has_purchased=eligibility.has_purchased,
            order_id=eligibility.order_id,
            existing_review=eligibility.existing_review,
        )
    )


@review_router.get("/customer/{customer_id}", response_model=ReviewListResponse)
async def get_customer_reviews(
    customer_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=PRODUCT_PAGE_SIZE, ge=1, le=100),
) -> ReviewListResponse:
    return _list_response(list_customer_reviews(customer_id, page=page, limit=limit))


@review_router.put("/{review_id}", response_model=ReviewResponse)
async def edit_review(review_id: str, body: EditReviewRequest) -> ReviewResponse:
    command = EditReview(
        review_id=review_id,
        customer_id=body.customer_id,
        rating=body.rating,
        title=body.title,
        comment=body.comment,
        images=_images_json(body.images),
        variant_size=body.variant.size if body.variant else None,
        variant_color=body.variant.color if body.variant else None,
    )
    current_domain.process(command, asynchronous=False)
    return _review_response(review_id, "Review updated successfully. It will be re-reviewed by admin.")


@review_router.delete("/{review_id}", response_model=StatusResponse)
async def delete_review(review_id: str, customer_id: str = Query(alias="customerId")) -> StatusResponse:
    current_domain.process(DeleteReview(review_id=review_id, customer_id=customer_id), asynchronous=False)
    return StatusResponse(message="Review deleted successfully")


@review_router.patch("/{review_id}/helpful", response_model=HelpfulVotesResponse)
async def mark_review_helpful(review_id: str, body: HelpfulVoteRequest) -> HelpfulVotesResponse:
    votes = current_domain.process(
        MarkReviewHelpful(review_id=review_id, customer_id=body.customer_id),
        asynchronous=False,
    )
    return HelpfulVotesResponse(message="Review marked as helpful", data=HelpfulVotesData(helpful_votes=votes))


@review_router.delete("/{review_id}/helpful", response_model=HelpfulVotesResponse)
async def unmark_review_helpful(review_id: str, customer_id: str = Query(alias="customerId")) -> HelpfulVotesResponse:
    votes = current_domain.process(
        UnmarkReviewHelpful(review_id=review_id, customer_id=customer_id),
        asynchronous=False,
    )
    return HelpfulVotesResponse(message="Helpful mark removed", data=HelpfulVotesData(helpful_votes=votes))


# ---------------------------------------------------------------------------
# Admin endpoints
# ---------------------------------------------------------------------------
@review_router.get("/admin/all", response_model=ReviewListResponse)
async def get_all_reviews(
    status: str | None = None,
    rating: int | None = Query(default=None, ge=1, le=5),
    verified: bool = False,
    search: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=MODERATION_PAGE_SIZE, ge=1, le=100),
    sort_by: str = Query(default="createdAt", alias="sortBy"),
    sort_order: str = Query(default="desc", alias="sortOrder"),
) -> ReviewListResponse:
    result = list_reviews_for_moderation(
        status=status,
        rating=rating,
        verified_only=verified,
        search=search,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return _list_response(result)


@review_router.patch("/{review_id}/approve", response_model=ReviewResponse)
async def approve_review(review_id: str, body: ModeratorRequest) -> ReviewResponse:
    current_domain.process(ApproveReview(review_id=review_id, moderator_id=body.moderator_id), asynchronous=False)
    return _review_response(review_id, "Review approved successfully")


@review_router.patch("/{review_id}/reject", response_model=ReviewResponse)
async def reject_review(review_id: str, body: RejectReviewRequest) -> ReviewResponse:
    command = RejectReview(review_id=review_id, moderator_id=body.moderator_id, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    return _review_response(review_id, "Review rejected successfully")


@review_router.patch("/{review_id}/respond", response_model=AdminResponseResult)
async def respond_to_review(review_id: str, body: RespondToReviewRequest) -> AdminResponseResult:
    command = RespondToReview(review_id=review_id, admin_id=body.admin_id, message=body.message)
    current_domain.process(command, asynchronous=False)

    response = _load(review_id).admin_response
    return AdminResponseResult(
        data=AdminResponseEnvelope(
            admin_response=AdminResponseSchema(
                message=response.message,
                responded_by=str(response.responded_by),
                responded_at=response.responded_at,
            )
        )
    )
