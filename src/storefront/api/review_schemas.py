"""Pydantic request/response schemas for the reviews API.

These are separate from the Protean commands: the API is the external,
camelCase contract and the commands are internal domain concepts.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storefront.review.review import ADMIN_RESPONSE_MAX_LENGTH


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class ReviewImageSchema(CamelModel):
    url: str = Field(max_length=500)
    alt_text: str | None = None


class VariantSnapshotSchema(CamelModel):
    size: str | None = None
    color: str | None = None


class SubmitReviewRequest(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "productId": "classic-polo-tee",
                    "customerId": "cust-1001",
                    "rating": 5,
                    "title": "Fits perfectly",
                    "comment": "Soft fabric and the colour held up after washing.",
                    "variant": {"size": "M", "color": "navy"},
                }
            ]
        },
    )

    product_id: str = Field(min_length=1)
    customer_id: str = Field(min_length=1)
    order_id: str | None = None
    rating: int = Field(ge=1, le=5)
    title: str = Field(min_length=1, max_length=100)
    comment: str | None = Field(default=None, max_length=2000)
    images: list[ReviewImageSchema] | None = Field(default=None, max_length=5)
    variant: VariantSnapshotSchema | None = None


class EditReviewRequest(CamelModel):
    customer_id: str = Field(min_length=1)
    rating: int | None = Field(default=None, ge=1, le=5)
    title: str | None = Field(default=None, min_length=1, max_length=100)
    comment: str | None = Field(default=None, max_length=2000)
    images: list[ReviewImageSchema] | None = Field(default=None, max_length=5)
    variant: VariantSnapshotSchema | None = None


class ModeratorRequest(CamelModel):
    moderator_id: str = Field(min_length=1)


class RejectReviewRequest(ModeratorRequest):
    reason: str | None = Field(default=None, min_length=10, max_length=500)


class RespondToReviewRequest(CamelModel):
    admin_id: str = Field(min_length=1)
    message: str = Field(min_length=1, max_length=ADMIN_RESPONSE_MAX_LENGTH)


class HelpfulVoteRequest(CamelModel):
    customer_id: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class AdminResponseSchema(CamelModel):
    message: str
    responded_by: str
    responded_at: datetime


class ReviewSchema(CamelModel):
    id: str
    product_id: str
    customer_id: str
    order_id: str | None = None
    rating: int
    title: str
    comment: str | None = None
    images: list[ReviewImageSchema] = []
    variant: VariantSnapshotSchema | None = None
    is_verified_purchase: bool
    status: str
    rejection_reason: str | None = None
    helpful_votes: int
    admin_response: AdminResponseSchema | None = None
    moderated_by: str | None = None
    moderated_at: datetime | None = None
    is_edited: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_review(cls, review) -> ReviewSchema:
        response = review.admin_response
        return cls(
            id=str(review.id),
            product_id=str(review.product_id),
            customer_id=str(review.customer_id),
            order_id=str(review.order_id) if review.order_id else None,
            rating=review.rating.score,
            title=review.title,
            comment=review.comment,
            images=[
                ReviewImageSchema(url=image.url, alt_text=image.alt_text)
                for image in sorted(review.images, key=lambda i: i.display_order or 0)
            ],
            variant=VariantSnapshotSchema(size=review.variant.size, color=review.variant.color)
            if review.variant
            else None,
            is_verified_purchase=bool(review.is_verified_purchase),
            status=review.status,
            rejection_reason=review.rejection_reason,
            helpful_votes=review.helpful_votes or 0,
            admin_response=AdminResponseSchema(
                message=response.message,
                responded_by=str(response.responded_by),
                responded_at=response.responded_at,
            )
            if response
            else None,
            moderated_by=str(review.moderated_by) if review.moderated_by else None,
            moderated_at=review.moderated_at,
            is_edited=bool(review.is_edited),
            created_at=review.created_at,
            updated_at=review.updated_at,
        )


class ReviewEnvelope(CamelModel):
    review: ReviewSchema


class ReviewResponse(CamelModel):
    success: bool = True
    message: str
    data: ReviewEnvelope


class RatingSummarySchema(CamelModel):
    average_rating: float
    total_reviews: int
    rating_distribution: dict[str, int]

    @classmethod
    def from_summary(cls, summary) -> RatingSummarySchema:
        return cls(
            average_rating=summary.average_rating,
            total_reviews=summary.review_count,
            rating_distribution={str(score): count for score, count in summary.distribution.items()},
        )


class PaginationSchema(CamelModel):
    current_page: int
    total_pages: int
    total_reviews: int
    has_more: bool

    @classmethod
    def from_page(cls, page) -> PaginationSchema:
        return cls(
            current_page=page.page,
            total_pages=page.total_pages,
            total_reviews=page.total,
            has_more=page.has_more,
        )


class ReviewListData(CamelModel):
    reviews: list[ReviewSchema]
    summary: RatingSummarySchema | None = None
    pagination: PaginationSchema


class ReviewListResponse(CamelModel):
    success: bool = True
    data: ReviewListData


class ExistingReviewSchema(CamelModel):
    id: str
    rating: int
    status: str


class EligibilitySchema(CamelModel):
    can_review: bool
    reason: str | None = None
    message: str
    has_purchased: bool | None = None
    order_id: str | None = None
    existing_review: ExistingReviewSchema | None = None


class EligibilityResponse(CamelModel):
    success: bool = True
    data: EligibilitySchema


class HelpfulVotesData(CamelModel):
    helpful_votes: int


class HelpfulVotesResponse(CamelModel):
    success: bool = True
    message: str
    data: HelpfulVotesData


class AdminResponseEnvelope(CamelModel):
    admin_response: AdminResponseSchema


class AdminResponseResult(CamelModel):
    success: bool = True
    message: str = "Response added successfully"
    data: AdminResponseEnvelope


class StatusResponse(CamelModel):
    success: bool = True
    message: str
