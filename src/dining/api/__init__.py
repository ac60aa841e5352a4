"""Dining domain API package."""

from dining.api.routes import establishment_router, review_router

__all__ = ["establishment_router", "review_router"]
