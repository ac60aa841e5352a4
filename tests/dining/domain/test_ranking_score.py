"""Tests for the weighted ranking score of a single establishment."""

from datetime import UTC, datetime, timedelta

import pytest

from dining.ranking.scoring import days_since, normalized_reactions, score_establishment

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _score(**overrides):
    defaults = {
        "mean_rating": 4.0,
        "review_count": 3,
        "likes": 5,
        "dislikes": 1,
        "latest_review_at": NOW,
        "now": NOW,
    }
    defaults.update(overrides)
    return score_establishment(**defaults)


class TestScoreEstablishment:
    def test_reference_score(self):
        result = _score()
        assert result.score == 4.15
        assert result.breakdown.rating == 2.4
        assert result.breakdown.likes == 1.25
        assert result.breakdown.recency == 0.5

    def test_no_reactions_is_neutral(self):
        result = _score(likes=0, dislikes=0)
        assert result.breakdown.likes == 0.75

    def test_only_dislikes_zeroes_likes_component(self):
        result = _score(likes=0, dislikes=4)
        assert result.breakdown.likes == 0.0

    def test_recency_decays_over_ninety_days(self):
        result = _score(latest_review_at=NOW - timedelta(days=90))
        # exp(-1) * 0.1 * 5
        assert result.breakdown.recency == 0.18

    def test_future_reviews_count_as_fresh(self):
        result = _score(latest_review_at=NOW + timedelta(days=3))
        assert result.breakdown.recency == 0.5
        assert result.score <= 5

    def test_establishment_without_reviews_scores_on_rating_only(self):
        result = _score(mean_rating=0.0, review_count=0, likes=0, dislikes=0, latest_review_at=None)
        assert result.score == 0.0
        assert result.breakdown.likes == 0.0
        assert result.breakdown.recency == 0.0

    def test_perfect_establishment_scores_five(self):
        result = _score(mean_rating=5.0, likes=10, dislikes=0)
        assert result.score == 5.0

    @pytest.mark.parametrize(
        "mean_rating, likes, dislikes, age_days",
        [
            (1.0, 0, 50, 3650),
            (5.0, 50, 0, 0),
            (3.2, 7, 7, 45),
            (2.5, 1, 0, -10),
        ],
    )
    def test_score_is_bounded(self, mean_rating, likes, dislikes, age_days):
        result = _score(
            mean_rating=mean_rating,
            likes=likes,
            dislikes=dislikes,
            latest_review_at=NOW - timedelta(days=age_days),
        )
        assert 0 <= result.score <= 5

    def test_higher_rating_scores_higher(self):
        assert _score(mean_rating=4.5).score > _score(mean_rating=3.5).score


class TestScoreHelpers:
    def test_normalized_reactions(self):
        assert normalized_reactions(0, 0) == 0.5
        assert normalized_reactions(3, 0) == 1.0
        assert normalized_reactions(0, 3) == 0.0
        assert normalized_reactions(3, 1) == 0.75

    def test_days_since(self):
        assert days_since(NOW - timedelta(hours=36), NOW) == 1.5
        assert days_since(NOW + timedelta(days=1), NOW) == 0.0
