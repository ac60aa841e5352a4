"""Review aggregate, the core of the Dining domain.

A Review is one user's rating of one establishment, optionally about one of
its menu items. Other users react to it with a like or a dislike.

Reactions are Reaction entities, one per (review, user), tagged ``liked`` or
``disliked``. ``likes_count`` and ``dislikes_count`` are recomputed from them
on every toggle.

Reaction state machine per (review, user), default NONE:
    toggle_like:    NONE → LIKED, LIKED → NONE, DISLIKED → LIKED
    toggle_dislike: NONE → DISLIKED, DISLIKED → NONE, LIKED → DISLIKED
"""

from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text

from dining.domain import dining
from dining.errors import SelfReactionForbidden
from dining.shared.clock import utcnow

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()

MIN_RATING = 1
MAX_RATING = 5
COMMENT_MIN_LENGTH = 10
COMMENT_MAX_LENGTH = 500


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ReactionKind(Enum):
    LIKED = "liked"
    DISLIKED = "disliked"


class ReactionState(Enum):
    NONE = "none"
    LIKED = "liked"
    DISLIKED = "disliked"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def validate_rating(value):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError({"rating": ["Rating must be a whole number"]})
    if value < MIN_RATING or value > MAX_RATING:
        raise ValidationError({"rating": [f"Rating must be between {MIN_RATING} and {MAX_RATING}"]})
    return value


def clean_comment(value):
    if value is None or not value.strip():
        raise ValidationError({"comment": ["Comment is required"]})

    comment = value.strip()
    if not COMMENT_MIN_LENGTH <= len(comment) <= COMMENT_MAX_LENGTH:
        raise ValidationError(
            {"comment": [f"Comment must be between {COMMENT_MIN_LENGTH} and {COMMENT_MAX_LENGTH} characters"]}
        )
    return comment


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@dining.entity(part_of="Review")
class Reaction:
    """A user's like or dislike on a review."""

    user_id = Identifier(required=True)
    kind = String(choices=ReactionKind, required=True)
    reacted_at = DateTime()


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@dining.aggregate
class Review:
    author_id = Identifier(required=True)
    establishment_id = Identifier(required=True)
    menu_item_id = Identifier()

    # Content
    rating = Integer(required=True, min_value=MIN_RATING, max_value=MAX_RATING)
    comment = Text(required=True)

    # Reactions
    reactions = HasMany(Reaction)
    likes_count = Integer(default=0)
    dislikes_count = Integer(default=0)

    # Timestamps
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def one_reaction_per_user(self):
        users = [str(r.user_id) for r in self.reactions]
        if len(users) != len(set(users)):
            raise ValidationError({"reactions": ["A user can hold at most one reaction per review"]})

    @invariant.post
    def authors_do_not_react(self):
        if any(str(r.user_id) == str(self.author_id) for r in self.reactions):
            raise ValidationError({"reactions": ["Authors cannot react to their own review"]})

    @invariant.post
    def reaction_counts_match(self):
        if self.likes_count != len(self.liked_by) or self.dislikes_count != len(self.disliked_by):
            raise ValidationError({"reactions": ["Reaction counts are out of sync"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def write(cls, author_id, establishment_id, rating, comment, menu_item_id=None):
        """Write a new review with no reactions."""
        now = utcnow()

        return cls(
            author_id=str(author_id),
            establishment_id=str(establishment_id),
            menu_item_id=str(menu_item_id) if menu_item_id else None,
            rating=validate_rating(rating),
            comment=clean_comment(comment),
            likes_count=0,
            dislikes_count=0,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Edit
    # -------------------------------------------------------------------
    def revise(self, rating=_UNSET, comment=_UNSET, menu_item_id=_UNSET):
        """Apply an author's edit. Returns True when the rating changed."""
        rating_changed = rating is not _UNSET and rating != self.rating

        with atomic_change(self):
            if rating is not _UNSET:
                self.rating = validate_rating(rating)
            if comment is not _UNSET:
                self.comment = clean_comment(comment)
            if menu_item_id is not _UNSET:
                self.menu_item_id = str(menu_item_id) if menu_item_id else None

            self.updated_at = utcnow()

        return rating_changed

    def is_authored_by(self, user_id):
        return str(user_id) == str(self.author_id)

    # -------------------------------------------------------------------
    # Reactions
    # -------------------------------------------------------------------
    @property
    def liked_by(self):
        return frozenset(str(r.user_id) for r in self.reactions if r.kind == ReactionKind.LIKED.value)

    @property
    def disliked_by(self):
        return frozenset(str(r.user_id) for r in self.reactions if r.kind == ReactionKind.DISLIKED.value)

    def reaction_of(self, user_id):
        reaction = self._reaction_for(user_id)
        if reaction is None:
            return ReactionState.NONE
        return ReactionState(reaction.kind)

    def toggle_like(self, user_id):
        return self._toggle(user_id, ReactionKind.LIKED)

    def toggle_dislike(self, user_id):
        return self._toggle(user_id, ReactionKind.DISLIKED)

    def _reaction_for(self, user_id):
        return next((r for r in self.reactions if str(r.user_id) == str(user_id)), None)

    def _toggle(self, user_id, kind):
        if self.is_authored_by(user_id):
            raise SelfReactionForbidden(review_id=str(self.id), user_id=str(user_id))

        existing = self._reaction_for(user_id)

        with atomic_change(self):
            if existing is not None:
                self.remove_reactions(existing)

            if existing is not None and existing.kind == kind.value:
                # Toggling the same reaction again retracts it
                state = ReactionState.NONE
            else:
                # Switching sides moves the user in one step
                self.add_reactions(Reaction(user_id=str(user_id), kind=kind.value, reacted_at=utcnow()))
                state = ReactionState(kind.value)

            self.likes_count = len(self.liked_by)
            self.dislikes_count = len(self.disliked_by)

        return state

    def withdraw_reactions(self):
        """Drop every reaction, ahead of removing the review itself."""
        with atomic_change(self):
            for reaction in list(self.reactions):
                self.remove_reactions(reaction)
            self.likes_count = 0
            self.dislikes_count = 0
