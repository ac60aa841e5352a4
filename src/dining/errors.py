"""Named failure conditions raised by the Dining domain.

Every error carries a stable machine-readable ``code``, a human-readable
``message`` and the HTTP status the API layer answers with. ``context`` holds
identifiers useful in logs; it is only exposed to clients in debug mode.
Field-level validation failures are protean's own ``ValidationError``.
"""


class DiningError(Exception):
    code = "INTERNAL_ERROR"
    message = "Internal server error"
    status_code = 500

    def __init__(self, message: str | None = None, **context):
        self.message = message or self.message
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class NotFound(DiningError):
    code = "NOT_FOUND"
    message = "Resource not found"
    status_code = 404


class ReviewNotFound(NotFound):
    code = "REVIEW_NOT_FOUND"
    message = "Review not found"


class EstablishmentNotFound(NotFound):
    code = "ESTABLISHMENT_NOT_FOUND"
    message = "Establishment not found"


class EstablishmentNotApproved(EstablishmentNotFound):
    code = "ESTABLISHMENT_NOT_APPROVED"
    message = "Establishment has not been approved yet"
    status_code = 403


class MenuItemNotFound(NotFound):
    code = "MENU_ITEM_NOT_FOUND"
    message = "Menu item not found"


class AuthenticationRequired(DiningError):
    code = "AUTHENTICATION_REQUIRED"
    message = "Caller identity is required"
    status_code = 401


class Forbidden(DiningError):
    code = "FORBIDDEN"
    message = "You do not have permission to perform this action"
    status_code = 403


class SelfReactionForbidden(Forbidden):
    code = "SELF_REACTION_FORBIDDEN"
    message = "You cannot like or dislike your own review"


class DuplicateReview(DiningError):
    code = "DUPLICATE_REVIEW"
    message = "You have already reviewed this establishment"
    status_code = 409


class MenuItemNotInEstablishment(DiningError):
    code = "MENU_ITEM_NOT_IN_ESTABLISHMENT"
    message = "Menu item does not belong to this establishment"
    status_code = 400


class Conflict(DiningError):
    code = "CONFLICT"
    message = "The request conflicted with a concurrent update, please retry"
    status_code = 409
