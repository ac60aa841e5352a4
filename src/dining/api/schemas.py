"""Pydantic request/response schemas for the Dining API.

These are separate from the domain commands. The API layer is the external
contract; commands are internal domain concepts. Range and length rules are
enforced by the domain so they share its error format.
"""

from __future__ import annotations

from pydantic import BaseModel, StrictInt, StrictStr


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class CreateReviewRequest(BaseModel):
    rating: StrictInt
    comment: StrictStr
    menu_item_id: str | None = None


class EditReviewRequest(BaseModel):
    rating: StrictInt | None = None
    comment: StrictStr | None = None
    menu_item_id: str | None = None  # Explicit null detaches the menu item


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ReactionStateResponse(BaseModel):
    review_id: str
    user_id: str
    state: str


class StatusResponse(BaseModel):
    status: str = "ok"
