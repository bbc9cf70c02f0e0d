"""Review aggregate: a verified buyer's rating and comment on a product.

Reviews are created only for customers holding a delivered or completed
order for the product (see ``eligibility``). Each review is moderated before
it counts toward the product's rating.

State Machine:
    PENDING  -> APPROVED | REJECTED        (admin)
    REJECTED -> APPROVED                   (admin re-approval)
    APPROVED -> REJECTED                   (admin)
    APPROVED | REJECTED -> PENDING         (owner edit)

There is no terminal state. Deletion is a separate, owner-only operation.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.review.events import (
    AdminResponseAdded,
    ReviewApproved,
    ReviewDeleted,
    ReviewEdited,
    ReviewHelpfulMarkRemoved,
    ReviewMarkedHelpful,
    ReviewRejected,
    ReviewSubmitted,
)
from storefront.shared.errors import ConflictError, ForbiddenError

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()

MAX_IMAGES = 5
DEFAULT_REJECTION_REASON = "Does not meet review guidelines"
REJECTION_REASON_LENGTH = (10, 500)
ADMIN_RESPONSE_MAX_LENGTH = 1000


class ReviewStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def review_key(customer_id, product_id) -> str:
    """Storage-level uniqueness key: one review per customer per product."""
    return f"{customer_id}:{product_id}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Review")
class Rating:
    """A star rating from 1 to 5."""

    score = Integer(required=True)

    @invariant.post
    def score_must_be_in_range(self):
        if self.score is not None and (self.score < 1 or self.score > 5):
            raise ValidationError({"rating": ["Rating must be between 1 and 5"]})


@storefront.value_object(part_of="Review")
class VariantSnapshot:
    """Size and colour as the reviewer bought them. Not a live variant reference."""

    size = String(max_length=20)
    color = String(max_length=50)


@storefront.value_object(part_of="Review")
class AdminResponse:
    message = Text(required=True)
    responded_by = Identifier(required=True)
    responded_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Review")
class ReviewImage:
    url = String(required=True, max_length=500)
    alt_text = String(max_length=255)
    display_order = Integer(default=0)


def _check_image_count(images):
    if images and len(images) > MAX_IMAGES:
        raise ValidationError({"images": [f"Cannot attach more than {MAX_IMAGES} images to a review"]})


def _image(item, position) -> ReviewImage:
    if isinstance(item, str):
        return ReviewImage(url=item, display_order=position)
    return ReviewImage(url=item["url"], alt_text=item.get("alt_text") or item.get("alt"), display_order=position)


def _snapshot(variant):
    if not variant:
        return None
    if isinstance(variant, VariantSnapshot):
        return variant
    return VariantSnapshot(size=variant.get("size"), color=variant.get("color"))


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Review:
    # Core identifiers
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    order_id = Identifier()
    review_key = String(required=True, max_length=100, unique=True)

    # Content
    rating = ValueObject(Rating, required=True)
    title = String(required=True, max_length=100)
    comment = Text()
    images = HasMany(ReviewImage)
    variant = ValueObject(VariantSnapshot)

    # Verification, fixed at submission
    is_verified_purchase = Boolean(default=False)

    # Moderation
    status = String(choices=ReviewStatus, default=ReviewStatus.PENDING.value)
    rejection_reason = Text()
    moderated_by = Identifier()
    moderated_at = DateTime()
    admin_response = ValueObject(AdminResponse)

    # Helpfulness
    helpful_votes = Integer(default=0)
    helpful_by = Text()  # JSON array of distinct customer ids

    # Editing
    is_edited = Boolean(default=False)
    edited_at = DateTime()

    # Timestamps
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def images_cannot_exceed_maximum(self):
        if len(self.images) > MAX_IMAGES:
            raise ValidationError({"images": [f"Cannot attach more than {MAX_IMAGES} images to a review"]})

    @invariant.post
    def title_must_not_be_empty(self):
        if self.title is not None and len(self.title.strip()) == 0:
            raise ValidationError({"title": ["Review title cannot be empty"]})

    @invariant.post
    def rejection_reason_only_when_rejected(self):
        rejected = self.status == ReviewStatus.REJECTED.value
        if rejected and not self.rejection_reason:
            raise ValidationError({"rejection_reason": ["A rejected review must carry a reason"]})
        if not rejected and self.rejection_reason:
            raise ValidationError({"rejection_reason": ["Only rejected reviews carry a rejection reason"]})

    @invariant.post
    def helpful_votes_match_voters(self):
        if self.helpful_votes != len(self.helpful_voters):
            raise ValidationError({"helpful_votes": ["Helpful vote count must equal the number of voters"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(
        cls,
        product_id,
        customer_id,
        rating,
        title,
        comment=None,
        order_id=None,
        images=None,
        variant=None,
        is_verified_purchase=True,
    ):
        _check_image_count(images)
        now = datetime.now(UTC)

        review = cls(
            product_id=product_id,
            customer_id=customer_id,
            order_id=order_id,
            review_key=review_key(customer_id, product_id),
            rating=Rating(score=rating),
            title=title,
            comment=comment,
            variant=_snapshot(variant),
            is_verified_purchase=is_verified_purchase,
            status=ReviewStatus.PENDING.value,
            helpful_votes=0,
            helpful_by=json.dumps([]),
            is_edited=False,
            created_at=now,
            updated_at=now,
        )

        for position, item in enumerate(images or []):
            review.add_images(_image(item, position))

        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                product_id=str(product_id),
                customer_id=str(customer_id),
                order_id=str(order_id) if order_id else None,
                rating=rating,
                title=title,
                comment=comment,
                image_count=len(review.images),
                submitted_at=now,
            )
        )
        return review

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def helpful_voters(self) -> list:
        return json.loads(self.helpful_by) if self.helpful_by else []

    @property
    def is_approved(self) -> bool:
        return self.status == ReviewStatus.APPROVED.value

    def is_owned_by(self, customer_id) -> bool:
        return str(self.customer_id) == str(customer_id)

    def _assert_owner(self, customer_id, action):
        if not self.is_owned_by(customer_id):
            raise ForbiddenError(
                f"You can only {action} your own review",
                reason="not_review_owner",
                review_id=str(self.id),
            )

    # -------------------------------------------------------------------
    # Owner actions
    # -------------------------------------------------------------------
    def edit(
        self,
        customer_id,
        rating=_UNSET,
        title=_UNSET,
        comment=_UNSET,
        images=_UNSET,
        variant=_UNSET,
    ):
        """Apply the owner's changes and send the review back to moderation.

        Returns the status the review had before the edit.
        """
        self._assert_owner(customer_id, "edit")
        if images is not _UNSET:
            _check_image_count(images)

        previous_status = self.status
        now = datetime.now(UTC)

        with atomic_change(self):
            if rating is not _UNSET:
                self.rating = Rating(score=rating)
            if title is not _UNSET:
                self.title = title
            if comment is not _UNSET:
                self.comment = comment
            if variant is not _UNSET:
                self.variant = _snapshot(variant)
            if images is not _UNSET:
                for image in list(self.images):
                    self.remove_images(image)
                for position, item in enumerate(images or []):
                    self.add_images(_image(item, position))

            self.status = ReviewStatus.PENDING.value
            self.rejection_reason = None
            self.is_edited = True
            self.edited_at = now
            self.updated_at = now

        self.raise_(
            ReviewEdited(
                review_id=str(self.id),
                product_id=str(self.product_id),
                previous_status=previous_status,
                rating=self.rating.score,
                title=self.title,
                comment=self.comment,
                edited_at=now,
            )
        )
        return previous_status

    def mark_deleted(self, customer_id):
        """Check ownership and record the deletion. The handler removes the row."""
        self._assert_owner(customer_id, "delete")
        self.raise_(
            ReviewDeleted(
                review_id=str(self.id),
                product_id=str(self.product_id),
                customer_id=str(self.customer_id),
                status=self.status,
                deleted_at=datetime.now(UTC),
            )
        )

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    def approve(self, moderator_id):
        if self.status == ReviewStatus.APPROVED.value:
            raise ConflictError("Review is already approved", reason="already_approved", review_id=str(self.id))

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = ReviewStatus.APPROVED.value
            self.rejection_reason = None
            self.moderated_by = moderator_id
            self.moderated_at = now
            self.updated_at = now

        self.raise_(
            ReviewApproved(
                review_id=str(self.id),
                product_id=str(self.product_id),
                customer_id=str(self.customer_id),
                rating=self.rating.score,
                moderated_by=str(moderator_id),
                approved_at=now,
            )
        )

    def reject(self, moderator_id, reason=None):
        """Reject the review. Returns the status it had before."""
        if self.status == ReviewStatus.REJECTED.value:
            raise ConflictError("Review is already rejected", reason="already_rejected", review_id=str(self.id))

        reason = (reason or "").strip() or DEFAULT_REJECTION_REASON
        low, high = REJECTION_REASON_LENGTH
        if not low <= len(reason) <= high:
            raise ValidationError({"reason": [f"Rejection reason must be between {low} and {high} characters"]})

        previous_status = self.status
        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = ReviewStatus.REJECTED.value
            self.rejection_reason = reason
            self.moderated_by = moderator_id
            self.moderated_at = now
            self.updated_at = now

        self.raise_(
            ReviewRejected(
                review_id=str(self.id),
                product_id=str(self.product_id),
                customer_id=str(self.customer_id),
                previous_status=previous_status,
                reason=reason,
                moderated_by=str(moderator_id),
                rejected_at=now,
            )
        )
        return previous_status

    def respond(self, admin_id, message):
        """Attach or replace the store's public reply. Status is untouched."""
        message = (message or "").strip()
        if not message or len(message) > ADMIN_RESPONSE_MAX_LENGTH:
            raise ValidationError(
                {"message": [f"Response must be between 1 and {ADMIN_RESPONSE_MAX_LENGTH} characters"]}
            )

        now = datetime.now(UTC)
        self.admin_response = AdminResponse(message=message, responded_by=admin_id, responded_at=now)
        self.updated_at = now

        self.raise_(
            AdminResponseAdded(
                review_id=str(self.id),
                message=message,
                responded_by=str(admin_id),
                responded_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Helpfulness
    # -------------------------------------------------------------------
    def mark_helpful(self, customer_id):
        voters = self.helpful_voters
        if str(customer_id) in voters:
            raise ConflictError(
                "You have already marked this review as helpful",
                reason="already_marked_helpful",
                review_id=str(self.id),
            )

        voters.append(str(customer_id))
        self._set_voters(voters)
        self.raise_(
            ReviewMarkedHelpful(
                review_id=str(self.id),
                customer_id=str(customer_id),
                helpful_votes=self.helpful_votes,
            )
        )

    def unmark_helpful(self, customer_id):
        voters = self.helpful_voters
        if str(customer_id) not in voters:
            raise ConflictError(
                "You haven't marked this review as helpful",
                reason="not_marked_helpful",
                review_id=str(self.id),
            )

        voters.remove(str(customer_id))
        self._set_voters(voters)
        self.raise_(
            ReviewHelpfulMarkRemoved(
                review_id=str(self.id),
                customer_id=str(customer_id),
                helpful_votes=self.helpful_votes,
            )
        )

    def _set_voters(self, voters):
        with atomic_change(self):
            self.helpful_by = json.dumps(voters)
            self.helpful_votes = len(voters)
            self.updated_at = datetime.now(UTC)
