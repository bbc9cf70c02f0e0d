"""Storefront bounded context: the catalogue, its purchase ledger and product reviews.

Products own their size/color variants and carry write-time caches
(total stock, average rating, review count). Reviews are purchase-gated,
moderated by admins, and feed the rating cache synchronously whenever the
approved set changes.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging(log_file_prefix="storefront")

logger = get_logger(__name__)

storefront = Domain(name="storefront")
