"""Application tests for moderation, edits and deletes keeping the product rating in step."""

import pytest
from protean.utils.globals import current_domain

from storefront.product.product import Product
from storefront.review.editing import EditReview
from storefront.review.moderation import ApproveReview, RejectReview
from storefront.review.removal import DeleteReview
from storefront.review.review import Review, ReviewStatus
from storefront.review.submission import SubmitReview
from storefront.shared.errors import ConflictError, ForbiddenError, NotFoundError


@pytest.fixture()
def submit(product, place_order):
    """Factory: a verified buyer submits a review of ``product``."""

    def _submit(customer_id, rating, title="Review title"):
        place_order(customer_id, product.id)
        return current_domain.process(
            SubmitReview(product=str(product.id), customer_id=customer_id, rating=rating, title=title),
            asynchronous=False,
        )

    return _submit


def _approve(review_id, moderator_id="admin-001"):
    return current_domain.process(ApproveReview(review_id=review_id, moderator_id=moderator_id), asynchronous=False)


def _reject(review_id, reason=None, moderator_id="admin-001"):
    return current_domain.process(
        RejectReview(review_id=review_id, moderator_id=moderator_id, reason=reason),
        asynchronous=False,
    )


def _rating(product):
    stored = current_domain.repository_for(Product).get(product.id)
    return stored.average_rating, stored.review_count


def _review(review_id):
    return current_domain.repository_for(Review).get(review_id)


class TestApproveReview:
    def test_first_approval_sets_rating(self, product, submit):
        review_id = submit("cust-001", 4)

        _approve(review_id)

        assert _review(review_id).status == ReviewStatus.APPROVED.value
        assert _rating(product) == (4.0, 1)

    def test_average_over_approved_reviews(self, product, submit):
        for customer_id, rating in (("cust-001", 5), ("cust-002", 4), ("cust-003", 3)):
            _approve(submit(customer_id, rating))

        assert _rating(product) == (4.0, 3)

    def test_pending_reviews_do_not_count(self, product, submit):
        _approve(submit("cust-001", 5))
        submit("cust-002", 1)

        assert _rating(product) == (5.0, 1)

    def test_rounding_half_up(self, product, submit):
        for customer_id, rating in (("cust-001", 5), ("cust-002", 5), ("cust-003", 4)):
            _approve(submit(customer_id, rating))

        assert _rating(product) == (4.7, 3)

    def test_approve_twice_conflicts(self, submit):
        review_id = submit("cust-001", 4)
        _approve(review_id)

        with pytest.raises(ConflictError):
            _approve(review_id)

    def test_approve_unknown_review(self):
        with pytest.raises(NotFoundError) as exc:
            _approve("missing-review")
        assert exc.value.reason == "review_not_found"


class TestRejectReview:
    def test_rejecting_approved_review_recomputes(self, product, submit):
        for customer_id, rating in (("cust-001", 5), ("cust-002", 4), ("cust-003", 3)):
            _approve(submit(customer_id, rating))
        three_star = current_domain.repository_for(Review).find_by_customer_and_product("cust-003", product.id)

        _reject(str(three_star.id), reason="Contains a phone number")

        assert _rating(product) == (4.5, 2)
        rejected = _review(str(three_star.id))
        assert rejected.status == ReviewStatus.REJECTED.value
        assert rejected.rejection_reason == "Contains a phone number"

    def test_rejecting_pending_review_keeps_rating(self, product, submit):
        _approve(submit("cust-001", 4))
        pending_id = submit("cust-002", 1)

        _reject(pending_id)

        assert _rating(product) == (4.0, 1)
        assert _review(pending_id).rejection_reason == "Does not meet review guidelines"

    def test_rejecting_only_approved_review_resets_rating(self, product, submit):
        review_id = submit("cust-001", 4)
        _approve(review_id)

        _reject(review_id)

        assert _rating(product) == (0.0, 0)

    def test_re_approving_rejected_review(self, product, submit):
        review_id = submit("cust-001", 2)
        _reject(review_id)

        _approve(review_id)

        assert _rating(product) == (2.0, 1)


class TestEditReview:
    def test_editing_approved_review_removes_it_from_rating(self, product, submit):
        review_id = submit("cust-001", 5)
        _approve(review_id)

        current_domain.process(
            EditReview(review_id=review_id, customer_id="cust-001", rating=3, title="Changed my mind"),
            asynchronous=False,
        )

        review = _review(review_id)
        assert review.status == ReviewStatus.PENDING.value
        assert review.rating.score == 3
        assert review.title == "Changed my mind"
        assert review.is_edited is True
        assert _rating(product) == (0.0, 0)

    def test_re_approval_after_edit_uses_new_rating(self, product, submit):
        review_id = submit("cust-001", 5)
        _approve(review_id)
        current_domain.process(EditReview(review_id=review_id, customer_id="cust-001", rating=2), asynchronous=False)

        _approve(review_id)

        assert _rating(product) == (2.0, 1)

    def test_editing_pending_review_keeps_rating(self, product, submit):
        _approve(submit("cust-001", 4))
        pending_id = submit("cust-002", 1)

        current_domain.process(EditReview(review_id=pending_id, customer_id="cust-002", comment="More detail"), asynchronous=False)

        assert _rating(product) == (4.0, 1)
        assert _review(pending_id).comment == "More detail"

    def test_only_owner_can_edit(self, submit):
        review_id = submit("cust-001", 4)

        with pytest.raises(ForbiddenError):
            current_domain.process(EditReview(review_id=review_id, customer_id="cust-002", rating=1), asynchronous=False)


class TestDeleteReview:
    def test_deleting_approved_review_recomputes(self, product, submit):
        keep_id = submit("cust-001", 5)
        drop_id = submit("cust-002", 1)
        _approve(keep_id)
        _approve(drop_id)
        assert _rating(product) == (3.0, 2)

        current_domain.process(DeleteReview(review_id=drop_id, customer_id="cust-002"), asynchronous=False)

        assert _rating(product) == (5.0, 1)
        assert current_domain.repository_for(Review).find_by_customer_and_product("cust-002", product.id) is None

    def test_deleting_the_only_approved_review_resets_rating(self, product, submit):
        review_id = submit("cust-001", 5)
        _approve(review_id)
        assert _rating(product) == (5.0, 1)

        current_domain.process(DeleteReview(review_id=review_id, customer_id="cust-001"), asynchronous=False)

        assert _rating(product) == (0.0, 0)
        assert current_domain.repository_for(Review).find_for_customer("cust-001") == []

    def test_deleting_pending_review(self, product, submit):
        review_id = submit("cust-001", 4)

        current_domain.process(DeleteReview(review_id=review_id, customer_id="cust-001"), asynchronous=False)

        with pytest.raises(NotFoundError):
            current_domain.repository_for(Review).fetch(review_id)

    def test_customer_may_review_again_after_delete(self, product, submit):
        review_id = submit("cust-001", 4)
        current_domain.process(DeleteReview(review_id=review_id, customer_id="cust-001"), asynchronous=False)

        new_id = current_domain.process(
            SubmitReview(product=str(product.id), customer_id="cust-001", rating=5, title="Second try"),
            asynchronous=False,
        )

        assert new_id != review_id

    def test_only_owner_can_delete(self, submit):
        review_id = submit("cust-001", 4)

        with pytest.raises(ForbiddenError):
            current_domain.process(DeleteReview(review_id=review_id, customer_id="cust-002"), asynchronous=False)

        assert _review(review_id) is not None
