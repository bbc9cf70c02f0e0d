"""Tests for the review moderation state machine and admin responses."""

import pytest
from protean.exceptions import ValidationError

from storefront.review.events import AdminResponseAdded, ReviewApproved, ReviewRejected
from storefront.review.review import (
    ADMIN_RESPONSE_MAX_LENGTH,
    DEFAULT_REJECTION_REASON,
    Review,
    ReviewStatus,
)
from storefront.shared.errors import ConflictError


def _pending_review():
    review = Review.submit(
        product_id="prod-001",
        customer_id="cust-001",
        rating=5,
        title="Love it",
        comment="Soft fabric and true to size.",
    )
    review._events.clear()
    return review


class TestApprove:
    def test_approve_pending(self):
        review = _pending_review()

        review.approve(moderator_id="admin-001")

        assert review.status == ReviewStatus.APPROVED.value
        assert review.is_approved
        assert review.moderated_by == "admin-001"
        assert review.moderated_at is not None
        event = review._events[0]
        assert isinstance(event, ReviewApproved)
        assert event.rating == 5

    def test_approve_rejected_review(self):
        review = _pending_review()
        review.reject(moderator_id="admin-001", reason="Off-topic content")

        review.approve(moderator_id="admin-002")

        assert review.status == ReviewStatus.APPROVED.value
        assert review.rejection_reason is None
        assert review.moderated_by == "admin-002"

    def test_approve_twice_conflicts(self):
        review = _pending_review()
        review.approve(moderator_id="admin-001")

        with pytest.raises(ConflictError) as exc:
            review.approve(moderator_id="admin-001")
        assert exc.value.reason == "already_approved"


class TestReject:
    def test_reject_pending_with_reason(self):
        review = _pending_review()

        previous = review.reject(moderator_id="admin-001", reason="Contains personal data")

        assert previous == ReviewStatus.PENDING.value
        assert review.status == ReviewStatus.REJECTED.value
        assert review.rejection_reason == "Contains personal data"
        event = review._events[0]
        assert isinstance(event, ReviewRejected)
        assert event.previous_status == ReviewStatus.PENDING.value

    def test_reject_uses_default_reason(self):
        review = _pending_review()

        review.reject(moderator_id="admin-001")

        assert review.rejection_reason == DEFAULT_REJECTION_REASON

    def test_reject_approved_review(self):
        review = _pending_review()
        review.approve(moderator_id="admin-001")

        previous = review.reject(moderator_id="admin-001", reason="Reported as spam")

        assert previous == ReviewStatus.APPROVED.value
        assert not review.is_approved

    def test_reject_twice_conflicts(self):
        review = _pending_review()
        review.reject(moderator_id="admin-001")

        with pytest.raises(ConflictError) as exc:
            review.reject(moderator_id="admin-001")
        assert exc.value.reason == "already_rejected"

    @pytest.mark.parametrize("reason", ["too short", "x" * 501])
    def test_reason_length_is_bounded(self, reason):
        review = _pending_review()

        with pytest.raises(ValidationError) as exc:
            review.reject(moderator_id="admin-001", reason=reason)
        assert "reason" in exc.value.messages
        assert review.status == ReviewStatus.PENDING.value


class TestRespond:
    def test_respond(self):
        review = _pending_review()

        review.respond(admin_id="admin-001", message="  Thanks for the feedback!  ")

        assert review.admin_response.message == "Thanks for the feedback!"
        assert review.admin_response.responded_by == "admin-001"
        assert review.status == ReviewStatus.PENDING.value
        assert isinstance(review._events[0], AdminResponseAdded)

    def test_respond_replaces_previous_response(self):
        review = _pending_review()
        review.respond(admin_id="admin-001", message="First")

        review.respond(admin_id="admin-002", message="Second")

        assert review.admin_response.message == "Second"
        assert review.admin_response.responded_by == "admin-002"

    @pytest.mark.parametrize("message", ["", "   ", "x" * (ADMIN_RESPONSE_MAX_LENGTH + 1)])
    def test_respond_message_length(self, message):
        with pytest.raises(ValidationError) as exc:
            _pending_review().respond(admin_id="admin-001", message=message)
        assert "message" in exc.value.messages
