"""Weighted ranking score of one establishment.

    rating  = (mean_rating / 5) * 0.6
    likes   = ((likes - dislikes) / max(likes + dislikes, 1) + 1) / 2 * 0.3
    recency = exp(-days_since_latest_review / 90) * 0.1
    score   = (rating + likes + recency) * 5

The score and each breakdown component are reported on the 0-5 scale,
rounded half-up to two decimals.
"""

import math
from datetime import datetime

from pydantic import BaseModel

from dining.review.aggregation import round_half_up

RATING_WEIGHT = 0.6
LIKES_WEIGHT = 0.3
RECENCY_WEIGHT = 0.1
SCORE_SCALE = 5
MAX_RATING = 5
RECENCY_DECAY_DAYS = 90
SECONDS_PER_DAY = 86400


class ScoreBreakdown(BaseModel):
    rating: float
    likes: float
    recency: float


class RankingScore(BaseModel):
    score: float
    breakdown: ScoreBreakdown


def normalized_reactions(likes: int, dislikes: int) -> float:
    """Net reactions mapped onto [0, 1]; no reactions is neutral (0.5)."""
    return ((likes - dislikes) / max(likes + dislikes, 1) + 1) / 2


def days_since(moment: datetime, now: datetime) -> float:
    """Whole and fractional days elapsed; future moments count as zero."""
    return max((now - moment).total_seconds() / SECONDS_PER_DAY, 0.0)


def score_establishment(
    mean_rating: float,
    review_count: int,
    likes: int,
    dislikes: int,
    latest_review_at: datetime | None,
    now: datetime,
) -> RankingScore:
    rating_component = (mean_rating / MAX_RATING) * RATING_WEIGHT

    if review_count > 0 and latest_review_at is not None:
        likes_component = normalized_reactions(likes, dislikes) * LIKES_WEIGHT
        recency_component = math.exp(-days_since(latest_review_at, now) / RECENCY_DECAY_DAYS) * RECENCY_WEIGHT
    else:
        likes_component = 0.0
        recency_component = 0.0

    total = rating_component + likes_component + recency_component

    return RankingScore(
        score=round_half_up(total * SCORE_SCALE),
        breakdown=ScoreBreakdown(
            rating=round_half_up(rating_component * SCORE_SCALE),
            likes=round_half_up(likes_component * SCORE_SCALE),
            recency=round_half_up(recency_component * SCORE_SCALE),
        ),
    )
