"""Establishment rating aggregate, recomputed from the full review set.

Every review create, rating change and delete calls ``recompute_rating`` inside
the same unit of work, after locking the establishment row. The mean is always
derived from the ratings currently stored, never adjusted incrementally.
"""

from decimal import ROUND_HALF_UP, Decimal

from protean.fields import Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from dining.domain import dining
from dining.establishment.establishment import Establishment
from dining.review.review import Review
from dining.utils.logging import get_logger

logger = get_logger(__name__)

TWO_PLACES = Decimal("0.01")


def round_half_up(value) -> float:
    """Round to two decimals, halves away from zero (2.125 → 2.13)."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return float(value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def compute_mean_rating(ratings) -> tuple[float, int]:
    """Return ``(mean, count)``; an empty set yields ``(0.0, 0)``."""
    ratings = list(ratings)
    if not ratings:
        return 0.0, 0
    return round_half_up(Decimal(sum(ratings)) / Decimal(len(ratings))), len(ratings)


def recompute_rating(establishment: Establishment, changed: Review | None = None, removed: bool = False):
    """Refresh the aggregate of an establishment the caller has locked.

    ``changed`` is a review written in this unit of work; its stored row may
    not be flushed yet, so its current rating is taken from the aggregate, or
    left out entirely when ``removed``.
    """
    ratings = current_domain.repository_for(Review).ratings_for(
        establishment.id,
        excluding=changed.id if changed is not None else None,
    )
    if changed is not None and not removed:
        ratings.append(changed.rating)

    mean_rating, review_count = compute_mean_rating(ratings)
    establishment.refresh_rating(mean_rating, review_count)
    current_domain.repository_for(Establishment).add(establishment)

    logger.debug(
        "Establishment rating recomputed",
        establishment_id=str(establishment.id),
        mean_rating=mean_rating,
        review_count=review_count,
    )
    return establishment


@dining.command(part_of="Establishment")
class RecomputeRatings:
    establishment_id = Identifier()  # Every establishment when left out


@dining.command_handler(part_of=Establishment)
class RatingMaintenanceHandler:
    @handle(RecomputeRatings)
    def recompute_ratings(self, command):
        """Rebuild aggregates from stored reviews. Returns how many were refreshed."""
        repo = current_domain.repository_for(Establishment)
        establishment_ids = [command.establishment_id] if command.establishment_id else repo.all_ids()

        for establishment_id in establishment_ids:
            recompute_rating(repo.lock(establishment_id))

        logger.info("Recomputed establishment ratings", count=len(establishment_ids))
        return len(establishment_ids)
