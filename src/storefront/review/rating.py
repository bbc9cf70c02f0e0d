"""Rating aggregate engine.

A product's ``average_rating`` and ``review_count`` are derived from its
approved reviews only. Every operation that changes the approved set
(approve, reject, owner edit, delete) calls ``recompute_product_rating``
inside the same command handler, so the product is consistent as soon as
the command returns.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from protean.utils.globals import current_domain

from storefront.product.product import Product
from storefront.review.review import Review
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

SCORES = (5, 4, 3, 2, 1)


def _empty_distribution() -> dict[int, int]:
    return {score: 0 for score in SCORES}


@dataclass(frozen=True)
class RatingSummary:
    average_rating: float = 0.0
    review_count: int = 0
    distribution: dict[int, int] = field(default_factory=_empty_distribution)


def round_rating(value) -> float:
    """Round half-up to one decimal place."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def summarize_ratings(scores) -> RatingSummary:
    distribution = _empty_distribution()
    for score in scores:
        if score not in distribution:
            raise ValueError(f"Rating {score} is outside 1-5")
        distribution[score] += 1

    count = sum(distribution.values())
    if count == 0:
        return RatingSummary(distribution=distribution)

    total = sum(score * bucket for score, bucket in distribution.items())
    return RatingSummary(
        average_rating=round_rating(Decimal(total) / Decimal(count)),
        review_count=count,
        distribution=distribution,
    )


def approved_scores(product_id, changed: Review | None = None, deleted: bool = False) -> list[int]:
    """Scores of the approved set, with ``changed`` overlaid.

    ``changed`` is the review mutated by the running command. Its stored copy
    is replaced by the in-memory one (or dropped when ``deleted``), so the
    result does not depend on whether the write is visible yet.
    """
    approved = {
        str(review.id): review for review in current_domain.repository_for(Review).find_approved_for_product(product_id)
    }

    if changed is not None:
        approved.pop(str(changed.id), None)
        if not deleted and changed.is_approved:
            approved[str(changed.id)] = changed

    return [review.rating.score for review in approved.values()]


def recompute_product_rating(product_id, changed: Review | None = None, deleted: bool = False) -> RatingSummary:
    summary = summarize_ratings(approved_scores(product_id, changed=changed, deleted=deleted))

    product_repo = current_domain.repository_for(Product)
    product = product_repo.get(product_id)
    product.record_rating(summary.average_rating, summary.review_count)
    product_repo.add(product)

    logger.info(
        "Product rating recomputed",
        product_id=str(product_id),
        average_rating=summary.average_rating,
        review_count=summary.review_count,
    )
    return summary
