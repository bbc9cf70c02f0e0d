"""Shared BDD fixtures and step definitions for review moderation."""

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then

from storefront.product.product import Product
from storefront.order.order import Order
from storefront.review.moderation import ApproveReview, RejectReview
from storefront.review.review import Review
from storefront.review.submission import SubmitReview
from storefront.shared.errors import StorefrontError


@pytest.fixture()
def error():
    """Container for the failure raised by a moderation step."""
    return {"exc": None}


def _received_and_reviewed(product, customer_id, stars):
    order = Order.place(
        customer_id=customer_id,
        items=[{"product_id": str(product.id), "title": product.title, "unit_price": product.base_price, "quantity": 1}],
    )
    order.update_status("delivered")
    current_domain.repository_for(Order).add(order)

    return current_domain.process(
        SubmitReview(product=product.slug, customer_id=customer_id, rating=stars, title=f"{stars} stars"),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a catalogue product "{slug}"'), target_fixture="listed_product")
def catalogue_product(slug):
    product = Product.create(slug=slug, title="Navy Polo", category="polos", base_price=899.0)
    product.add_variant(sku=f"{slug.upper()}-M", size="M", color="navy", stock_level=10)
    current_domain.repository_for(Product).add(product)
    return product


@given(
    parsers.cfparse('customer "{customer_id}" received the product and reviewed it with {stars:d} stars'),
    target_fixture="review_id",
)
def pending_review(listed_product, customer_id, stars):
    return _received_and_reviewed(listed_product, customer_id, stars)


@given(
    parsers.cfparse('customer "{customer_id}" has an approved {stars:d} star review'),
    target_fixture="review_id",
)
def approved_review(listed_product, customer_id, stars):
    review_id = _received_and_reviewed(listed_product, customer_id, stars)
    current_domain.process(ApproveReview(review_id=review_id, moderator_id="admin-seed"), asynchronous=False)
    return review_id


@given(parsers.cfparse('moderator "{moderator_id}" has rejected the review'))
def rejected_review(review_id, moderator_id):
    current_domain.process(RejectReview(review_id=review_id, moderator_id=moderator_id), asynchronous=False)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the review status is "{status}"'))
def review_status_is(review_id, status):
    assert current_domain.repository_for(Review).get(review_id).status == status


@then(parsers.cfparse('the rejection reason is "{reason}"'))
def rejection_reason_is(review_id, reason):
    assert current_domain.repository_for(Review).get(review_id).rejection_reason == reason


@then(parsers.cfparse("the product has {count:d} approved reviews averaging {average:f}"))
def product_rating_is(listed_product, count, average):
    stored = current_domain.repository_for(Product).get(listed_product.id)
    assert stored.review_count == count
    assert stored.average_rating == average


@then(parsers.cfparse('the moderation fails with reason "{reason}"'))
def moderation_fails_with_reason(error, reason):
    assert isinstance(error["exc"], StorefrontError), f"Expected a storefront error, got {error['exc']!r}"
    assert error["exc"].reason == reason


@then("the moderation fails with a validation error")
def moderation_fails_with_validation_error(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)
