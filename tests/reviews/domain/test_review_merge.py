"""Tests for merging optimistic reviews with confirmed ones."""

from datetime import UTC, datetime

from storefront.review.presentation import merge_reviews, reconcile_pending
from storefront.review.review import Review


def _review(review_id, created_at, **extra):
    return {"id": review_id, "createdAt": created_at, **extra}


class TestReconcilePending:
    def test_drops_confirmed_entries(self):
        confirmed = [_review("r1", "2025-06-01T10:00:00Z")]
        pending = [_review("r1", "2025-06-01T10:00:00Z"), _review("r2", "2025-06-02T10:00:00Z")]

        assert [r["id"] for r in reconcile_pending(confirmed, pending)] == ["r2"]

    def test_nothing_confirmed_keeps_all(self):
        pending = [_review("r1", "2025-06-01T10:00:00Z")]
        assert reconcile_pending([], pending) == pending


class TestMergeReviews:
    def test_union_is_newest_first(self):
        confirmed = [_review("r1", "2025-06-01T10:00:00Z"), _review("r3", "2025-06-03T10:00:00Z")]
        pending = [_review("r2", "2025-06-02T10:00:00Z")]

        assert [r["id"] for r in merge_reviews(confirmed, pending)] == ["r3", "r2", "r1"]

    def test_confirmed_copy_wins(self):
        confirmed = [_review("r1", "2025-06-01T10:00:00Z", status="approved")]
        pending = [_review("r1", "2025-06-01T10:00:00Z", status="pending")]

        merged = merge_reviews(confirmed, pending)

        assert len(merged) == 1
        assert merged[0]["status"] == "approved"

    def test_ids_are_compared_as_strings(self):
        confirmed = [{"id": 7, "created_at": datetime(2025, 6, 1, tzinfo=UTC)}]
        pending = [{"id": "7", "created_at": datetime(2025, 6, 1, tzinfo=UTC)}]

        assert len(merge_reviews(confirmed, pending)) == 1

    def test_missing_timestamps_sort_last(self):
        confirmed = [{"id": "old"}, _review("new", "2025-06-01T10:00:00+00:00")]

        assert [r["id"] for r in merge_reviews(confirmed, [])] == ["new", "old"]

    def test_accepts_review_aggregates(self):
        confirmed = Review.submit(product_id="prod-001", customer_id="cust-001", rating=5, title="Confirmed")
        pending = Review.submit(product_id="prod-001", customer_id="cust-002", rating=3, title="Pending")

        merged = merge_reviews([confirmed], [pending])

        assert [r.title for r in merged] == ["Pending", "Confirmed"]
