"""FastAPI routes for the Dining bounded context.

Each route translates between Pydantic schemas (external contract) and
protean commands (internal domain concepts). Commands are processed
synchronously and retried when they lose a race with a concurrent write.
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query

from dining.api.dependencies import Caller, get_caller
from dining.api.schemas import (
    CreateReviewRequest,
    EditReviewRequest,
    ReactionStateResponse,
    StatusResponse,
)
from dining.projections.review_detail import ReviewDetail, ReviewPage
from dining.ranking.ranking import RankEstablishments, RankingPage, rank_establishments
from dining.review.editing import EditReview
from dining.review.queries import ListReviews, get_review, list_reviews
from dining.review.reactions import ToggleDislike, ToggleLike, reaction_state
from dining.review.removal import DeleteReview
from dining.review.submission import CreateReview
from dining.utils.transactions import process

establishment_router = APIRouter(prefix="/establishments", tags=["establishments"])
review_router = APIRouter(prefix="/reviews", tags=["reviews"])


# ---------------------------------------------------------------------------
# Establishments
# ---------------------------------------------------------------------------
@establishment_router.get("/ranking", response_model=RankingPage)
def get_ranking(
    category_id: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> RankingPage:
    """Approved establishments ranked by score."""
    return rank_establishments(RankEstablishments(category_id=category_id, page=page, limit=limit))


@establishment_router.post("/{establishment_id}/reviews", status_code=201, response_model=ReviewDetail)
def create_review(
    establishment_id: str,
    body: CreateReviewRequest,
    caller: Caller = Depends(get_caller),
) -> ReviewDetail:
    """Review an establishment."""
    command = CreateReview(
        author_id=caller.user_id,
        establishment_id=establishment_id,
        rating=body.rating,
        comment=body.comment,
        menu_item_id=body.menu_item_id,
    )
    return process(command)


@establishment_router.get("/{establishment_id}/reviews", response_model=ReviewPage)
def get_establishment_reviews(
    establishment_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    sort_by: Literal["created_at", "rating", "likes_count"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
) -> ReviewPage:
    """Reviews of one establishment, newest first by default."""
    query = ListReviews(
        establishment_id=establishment_id,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return list_reviews(query)


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
@review_router.get("/{review_id}", response_model=ReviewDetail)
def get_review_detail(review_id: str) -> ReviewDetail:
    return get_review(review_id)


@review_router.put("/{review_id}", response_model=ReviewDetail)
def edit_review(
    review_id: str,
    body: EditReviewRequest,
    caller: Caller = Depends(get_caller),
) -> ReviewDetail:
    """Edit one's own review. Only the fields sent are changed."""
    command = EditReview(
        review_id=review_id,
        author_id=caller.user_id,
        rating=body.rating,
        comment=body.comment,
        menu_item_id=body.menu_item_id,
        clear_menu_item="menu_item_id" in body.model_fields_set and body.menu_item_id is None,
    )
    return process(command)


@review_router.delete("/{review_id}", response_model=StatusResponse)
def delete_review(review_id: str, caller: Caller = Depends(get_caller)) -> StatusResponse:
    """Delete a review. Authors and administrators only."""
    command = DeleteReview(
        review_id=review_id,
        requester_id=caller.user_id,
        requester_is_admin=caller.is_admin,
    )
    process(command)
    return StatusResponse(status="deleted")


@review_router.post("/{review_id}/like", response_model=ReviewDetail)
def like_review(review_id: str, caller: Caller = Depends(get_caller)) -> ReviewDetail:
    return process(ToggleLike(review_id=review_id, user_id=caller.user_id))


@review_router.post("/{review_id}/dislike", response_model=ReviewDetail)
def dislike_review(review_id: str, caller: Caller = Depends(get_caller)) -> ReviewDetail:
    return process(ToggleDislike(review_id=review_id, user_id=caller.user_id))


@review_router.get("/{review_id}/reaction", response_model=ReactionStateResponse)
def get_reaction(review_id: str, caller: Caller = Depends(get_caller)) -> ReactionStateResponse:
    """The caller's current reaction to a review."""
    state = reaction_state(review_id, caller.user_id)
    return ReactionStateResponse(review_id=review_id, user_id=caller.user_id, state=state.value)
