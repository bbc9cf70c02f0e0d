"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared across
users. State tracks ids returned by earlier steps so follow-up requests can
reference them.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks a browsing session through the catalogue."""

    product_slug: str | None = None
    sizes: list[str] = field(default_factory=list)
    colors: list[str] = field(default_factory=list)
    selected_sku: str | None = None


@dataclass
class ReviewState:
    """Tracks a single reviewer's lifecycle on one product."""

    customer_id: str | None = None
    product_slug: str | None = None
    review_id: str | None = None
    can_review: bool = False
    current_status: str = "pending"


@dataclass
class ModerationState:
    """Tracks the reviews a moderator has pulled from the queue."""

    moderator_id: str | None = None
    pending_ids: list[str] = field(default_factory=list)
    approved: int = 0
    rejected: int = 0
