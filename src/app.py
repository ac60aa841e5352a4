"""TableRank FastAPI application.

Serves review, reaction and ranking operations of the Dining domain over HTTP.
Commands are processed synchronously, each in its own unit of work.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from dining/domain.toml.
import uuid

from dining.domain import dining
from dining.utils.logging import add_context, clear_context
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

dining.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="TableRank API",
    description="Establishment reviews, reactions and rankings",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the Dining domain context for each request."""
    with dining.domain_context():
        response = await call_next(request)
    return response


@app.middleware("http")
async def logging_context_middleware(request: Request, call_next):
    """Bind request identifiers to every log line emitted while serving it."""
    clear_context()
    add_context(
        request_id=request.headers.get("X-Request-Id") or str(uuid.uuid4()),
        method=request.method,
        path=request.url.path,
    )
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers and error handlers
# ---------------------------------------------------------------------------
from dining.api import establishment_router, review_router  # noqa: E402
from dining.api.errors import register_error_handlers  # noqa: E402

app.include_router(establishment_router)
app.include_router(review_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "dining": {"name": dining.name, "debug": bool(dining.config.get("debug"))},
            },
        }
    )
