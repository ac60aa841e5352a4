"""Establishment and MenuItem aggregates.

The establishment's catalog data (name, category, approval) is owned by the
catalog. The engine only reads approval and menu-item membership, and writes
the derived rating fields ``mean_rating`` and ``review_count`` through
``refresh_rating``.
"""

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from dining.domain import dining
from dining.shared.clock import utcnow

MAX_MEAN_RATING = 5


@dining.aggregate
class Establishment:
    name = String(required=True, max_length=200)
    category_id = Identifier()
    is_approved = Boolean(default=False)

    # Derived from the establishment's reviews, never authored directly
    mean_rating = Float(default=0.0)
    review_count = Integer(default=0)

    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def rating_aggregate_is_consistent(self):
        if self.review_count is not None and self.review_count < 0:
            raise ValidationError({"review_count": ["Review count cannot be negative"]})
        if self.review_count == 0 and self.mean_rating:
            raise ValidationError({"mean_rating": ["An establishment without reviews has a mean rating of 0"]})
        if self.mean_rating is not None and not 0 <= self.mean_rating <= MAX_MEAN_RATING:
            raise ValidationError({"mean_rating": ["Mean rating must be between 0 and 5"]})

    @classmethod
    def register(cls, name, category_id=None):
        """Register a new establishment, pending approval."""
        if not name or not name.strip():
            raise ValidationError({"name": ["Establishment name cannot be empty"]})

        now = utcnow()
        return cls(
            name=name.strip(),
            category_id=category_id,
            is_approved=False,
            mean_rating=0.0,
            review_count=0,
            created_at=now,
            updated_at=now,
        )

    def approve(self):
        if self.is_approved:
            raise ValidationError({"is_approved": ["Establishment is already approved"]})

        with atomic_change(self):
            self.is_approved = True
            self.updated_at = utcnow()

    def refresh_rating(self, mean_rating: float, review_count: int):
        """Store a freshly computed rating aggregate."""
        with atomic_change(self):
            self.mean_rating = mean_rating
            self.review_count = review_count
            self.updated_at = utcnow()


@dining.aggregate
class MenuItem:
    establishment_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    created_at = DateTime()

    @classmethod
    def offer(cls, establishment_id, name):
        if not name or not name.strip():
            raise ValidationError({"name": ["Menu item name cannot be empty"]})

        return cls(establishment_id=str(establishment_id), name=name.strip(), created_at=utcnow())
