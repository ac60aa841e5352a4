"""RankEstablishments: paginated ranking of approved, reviewed establishments.

Runs over committed state and never writes. Ordering is by score, highest
first, with ties broken by establishment id ascending.
"""

from datetime import datetime

from protean.utils.globals import current_domain
from pydantic import BaseModel, Field

from dining.establishment.establishment import Establishment
from dining.ranking.scoring import ScoreBreakdown, score_establishment
from dining.review.review import Review
from dining.shared.clock import as_utc, utcnow
from dining.shared.pagination import Pagination, offset_for


class RankEstablishments(BaseModel):
    category_id: str | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


class RankedEstablishment(BaseModel):
    establishment_id: str
    name: str
    category_id: str | None = None
    mean_rating: float
    review_count: int
    score: float
    breakdown: ScoreBreakdown


class RankingPage(BaseModel):
    items: list[RankedEstablishment]
    pagination: Pagination


def rank_establishments(query: RankEstablishments, now: datetime | None = None) -> RankingPage:
    now = as_utc(now) if now else utcnow()

    candidates = current_domain.repository_for(Establishment).ranking_candidates(query.category_id)
    totals = current_domain.repository_for(Review).reaction_totals([establishment.id for establishment in candidates])

    ranked = []
    for establishment in candidates:
        likes, dislikes, latest_review_at = totals.get(establishment.id, (0, 0, None))
        result = score_establishment(
            mean_rating=establishment.mean_rating,
            review_count=establishment.review_count,
            likes=likes,
            dislikes=dislikes,
            latest_review_at=as_utc(latest_review_at),
            now=now,
        )
        ranked.append(
            RankedEstablishment(
                establishment_id=establishment.id,
                name=establishment.name,
                category_id=establishment.category_id,
                mean_rating=establishment.mean_rating,
                review_count=establishment.review_count,
                score=result.score,
                breakdown=result.breakdown,
            )
        )

    ranked.sort(key=lambda item: (-item.score, item.establishment_id))

    start = offset_for(query.page, query.limit)
    return RankingPage(
        items=ranked[start : start + query.limit],
        pagination=Pagination.of(query.page, query.limit, len(ranked)),
    )
