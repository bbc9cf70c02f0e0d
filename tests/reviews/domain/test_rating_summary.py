"""Tests for rating summaries and half-up rounding."""

import pytest

from storefront.review.rating import RatingSummary, round_rating, summarize_ratings


class TestSummarizeRatings:
    def test_empty_set(self):
        summary = summarize_ratings([])

        assert summary.average_rating == 0.0
        assert summary.review_count == 0
        assert summary.distribution == {5: 0, 4: 0, 3: 0, 2: 0, 1: 0}

    def test_single_rating(self):
        summary = summarize_ratings([3])

        assert summary.average_rating == 3.0
        assert summary.review_count == 1
        assert summary.distribution[3] == 1

    def test_average_and_distribution(self):
        summary = summarize_ratings([5, 4, 3])

        assert summary.average_rating == 4.0
        assert summary.review_count == 3
        assert summary.distribution == {5: 1, 4: 1, 3: 1, 2: 0, 1: 0}

    def test_distribution_sums_to_count(self):
        summary = summarize_ratings([5, 5, 4, 1, 2, 5])
        assert sum(summary.distribution.values()) == summary.review_count == 6

    def test_average_is_rounded_to_one_decimal(self):
        # 14 / 3 = 4.666...
        assert summarize_ratings([5, 5, 4]).average_rating == 4.7

    def test_accepts_generators(self):
        assert summarize_ratings(score for score in (4, 5)).average_rating == 4.5

    @pytest.mark.parametrize("score", [0, 6])
    def test_out_of_range_scores_are_rejected(self, score):
        with pytest.raises(ValueError):
            summarize_ratings([4, score])

    def test_default_summary(self):
        summary = RatingSummary()
        assert summary.review_count == 0
        assert summary.distribution[1] == 0


class TestRoundRating:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (4.25, 4.3),
            (4.35, 4.4),
            (4.24, 4.2),
            (3.0, 3.0),
            (4.05, 4.1),
        ],
    )
    def test_half_up(self, value, expected):
        assert round_rating(value) == expected
