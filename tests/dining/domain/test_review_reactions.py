"""Tests for the per-user reaction state machine on a Review."""

import pytest

from dining.errors import SelfReactionForbidden
from dining.review.review import ReactionState, Review


def _make_review(**overrides):
    defaults = {
        "author_id": "user-author",
        "establishment_id": "est-001",
        "rating": 4,
        "comment": "Lovely pasta and a friendly crew.",
    }
    defaults.update(overrides)
    return Review.write(**defaults)


class TestToggleLike:
    def test_like_from_none(self):
        review = _make_review()
        assert review.toggle_like("user-1") == ReactionState.LIKED
        assert review.liked_by == {"user-1"}
        assert review.likes_count == 1

    def test_like_twice_retracts(self):
        review = _make_review()
        review.toggle_like("user-1")
        assert review.toggle_like("user-1") == ReactionState.NONE
        assert review.liked_by == frozenset()
        assert review.likes_count == 0

    def test_like_moves_user_out_of_dislikes(self):
        review = _make_review()
        review.toggle_dislike("user-1")
        review.toggle_like("user-1")
        assert review.liked_by == {"user-1"}
        assert review.disliked_by == frozenset()
        assert (review.likes_count, review.dislikes_count) == (1, 0)


class TestToggleDislike:
    def test_dislike_from_none(self):
        review = _make_review()
        assert review.toggle_dislike("user-1") == ReactionState.DISLIKED
        assert review.dislikes_count == 1

    def test_dislike_twice_retracts(self):
        review = _make_review()
        review.toggle_dislike("user-1")
        assert review.toggle_dislike("user-1") == ReactionState.NONE
        assert review.dislikes_count == 0

    def test_like_then_dislike_moves_user_in_one_call(self):
        review = _make_review()
        review.toggle_like("user-1")
        assert (review.likes_count, review.dislikes_count) == (1, 0)

        review.toggle_dislike("user-1")
        assert review.liked_by == frozenset()
        assert review.disliked_by == {"user-1"}
        assert (review.likes_count, review.dislikes_count) == (0, 1)


class TestReactionRules:
    def test_author_cannot_like_own_review(self):
        review = _make_review(author_id="user-author")
        with pytest.raises(SelfReactionForbidden) as exc:
            review.toggle_like("user-author")
        assert "your own review" in str(exc.value)
        assert review.likes_count == 0

    def test_author_cannot_dislike_own_review(self):
        review = _make_review(author_id="user-author")
        with pytest.raises(SelfReactionForbidden):
            review.toggle_dislike("user-author")

    @pytest.mark.parametrize("toggles", [1, 2, 3, 4, 7])
    def test_repeated_likes_alternate(self, toggles):
        review = _make_review()
        for _ in range(toggles):
            review.toggle_like("user-1")
        expected = ReactionState.LIKED if toggles % 2 else ReactionState.NONE
        assert review.reaction_of("user-1") == expected

    def test_default_state_is_none(self):
        assert _make_review().reaction_of("user-1") == ReactionState.NONE

    def test_toggles_by_different_users_commute(self):
        first = _make_review()
        first.toggle_like("user-1")
        first.toggle_dislike("user-2")
        first.toggle_like("user-3")

        second = _make_review()
        second.toggle_like("user-3")
        second.toggle_like("user-1")
        second.toggle_dislike("user-2")

        assert first.liked_by == second.liked_by == {"user-1", "user-3"}
        assert first.disliked_by == second.disliked_by == {"user-2"}

    def test_a_user_is_never_in_both_sets(self):
        review = _make_review()
        for step in ["like", "dislike", "dislike", "like", "dislike", "like", "like"]:
            getattr(review, f"toggle_{step}")("user-1")
            assert not review.liked_by & review.disliked_by
            assert review.likes_count == len(review.liked_by)
            assert review.dislikes_count == len(review.disliked_by)

    def test_toggles_leave_updated_at_alone(self):
        review = _make_review()
        original = review.updated_at
        review.toggle_like("user-1")
        assert review.updated_at == original
