"""Domain events for the Review aggregate.

Every event that changes the approved set carries ``product_id`` so the
rating of that product can be recomputed from it.
"""

from protean.fields import DateTime, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Review")
class ReviewSubmitted:
    """A customer with a received order submitted a review. It awaits moderation."""


    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    order_id = Identifier()
    rating = Integer(required=True)
    title = String(required=True)
    comment = Text()
    image_count = Integer(default=0)
    submitted_at = DateTime(required=True)


@storefront.event(part_of="Review")
class ReviewEdited:
    """The owner edited the review. An edited review goes back to moderation."""


    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_status = String(required=True)
    rating = Integer()
    title = String()
    comment = Text()
    edited_at = DateTime(required=True)


@storefront.event(part_of="Review")
class ReviewApproved:

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    rating = Integer(required=True)
    moderated_by = Identifier(required=True)
    approved_at = DateTime(required=True)


@storefront.event(part_of="Review")
class ReviewRejected:

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    previous_status = String(required=True)
    reason = Text(required=True)
    moderated_by = Identifier(required=True)
    rejected_at = DateTime(required=True)


@storefront.event(part_of="Review")
class ReviewDeleted:

    review_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    status = String(required=True)
    deleted_at = DateTime(required=True)


@storefront.event(part_of="Review")
class AdminResponseAdded:

    review_id = Identifier(required=True)
    message = Text(required=True)
    responded_by = Identifier(required=True)
    responded_at = DateTime(required=True)


@storefront.event(part_of="Review")
class ReviewMarkedHelpful:

    review_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    helpful_votes = Integer(default=0)


@storefront.event(part_of="Review")
class ReviewHelpfulMarkRemoved:

    review_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    helpful_votes = Integer(default=0)
