"""Request-scoped dependencies: the caller's identity.

Identity is owned by an upstream gateway, which forwards the authenticated
user as ``X-User-Id`` and their role as ``X-User-Role``.
"""

from fastapi import Header
from pydantic import BaseModel

from dining.errors import AuthenticationRequired

ADMIN_ROLE = "admin"


class Caller(BaseModel):
    user_id: str
    is_admin: bool = False


def get_caller(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Caller:
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationRequired()
    return Caller(
        user_id=x_user_id.strip(),
        is_admin=(x_user_role or "").strip().lower() == ADMIN_ROLE,
    )
