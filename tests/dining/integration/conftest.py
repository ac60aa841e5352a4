import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from dining.api import establishment_router, review_router
from dining.api.errors import register_error_handlers
from dining.domain import dining


def build_app() -> FastAPI:
    """The API routers with the domain context pushed per request."""
    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with dining.domain_context():
            response = await call_next(request)
        return response

    app.include_router(establishment_router)
    app.include_router(review_router)
    register_error_handlers(app)
    return app


@pytest.fixture()
def api_app():
    return build_app()


@pytest.fixture()
def client(api_app):
    return TestClient(api_app)
