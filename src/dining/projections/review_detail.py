"""ReviewDetail: the read model returned for a single review."""

from datetime import datetime

from pydantic import BaseModel

from dining.review.review import Review
from dining.shared.clock import as_utc
from dining.shared.pagination import Pagination


class ReviewDetail(BaseModel):
    id: str
    author_id: str
    establishment_id: str
    menu_item_id: str | None = None
    rating: int
    comment: str
    likes_count: int
    dislikes_count: int
    liked_by: list[str]
    disliked_by: list[str]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def of(cls, review: Review) -> "ReviewDetail":
        return cls(
            id=str(review.id),
            author_id=str(review.author_id),
            establishment_id=str(review.establishment_id),
            menu_item_id=str(review.menu_item_id) if review.menu_item_id else None,
            rating=review.rating,
            comment=review.comment,
            likes_count=review.likes_count,
            dislikes_count=review.dislikes_count,
            liked_by=sorted(review.liked_by),
            disliked_by=sorted(review.disliked_by),
            created_at=as_utc(review.created_at),
            updated_at=as_utc(review.updated_at),
        )


class ReviewPage(BaseModel):
    items: list[ReviewDetail]
    pagination: Pagination
