"""Read-side operations over reviews. None of these mutate."""

from typing import Literal

from protean.utils.globals import current_domain
from pydantic import BaseModel, Field

from dining.establishment.establishment import Establishment
from dining.projections.review_detail import ReviewDetail, ReviewPage
from dining.review.review import Review
from dining.shared.pagination import Pagination, offset_for


class ListReviews(BaseModel):
    establishment_id: str
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
    sort_by: Literal["created_at", "rating", "likes_count"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"


def get_review(review_id: str) -> ReviewDetail:
    return ReviewDetail.of(current_domain.repository_for(Review).find(review_id))


def list_reviews(query: ListReviews) -> ReviewPage:
    # Unknown establishments are an error, not an empty page
    current_domain.repository_for(Establishment).find(query.establishment_id)

    reviews, total = current_domain.repository_for(Review).page_for_establishment(
        query.establishment_id,
        offset=offset_for(query.page, query.limit),
        limit=query.limit,
        sort_by=query.sort_by,
        sort_order=query.sort_order,
    )
    return ReviewPage(
        items=[ReviewDetail.of(review) for review in reviews],
        pagination=Pagination.of(query.page, query.limit, total),
    )
