"""Translate failures into the ``{"error": {...}}`` response envelope."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from dining.domain import dining
from dining.errors import DiningError, NotFound
from dining.utils.logging import get_logger

logger = get_logger(__name__)


def _debug() -> bool:
    return bool(dining.config.get("debug"))


def error_body(exc: DiningError, debug: bool = False) -> dict:
    error = exc.to_dict()
    if debug and exc.context:
        error["details"] = exc.context
    return {"error": error}


def validation_body(messages: dict) -> dict:
    return {"error": {"code": "VALIDATION_ERROR", "message": "Validation error", "fields": messages}}


def _request_fields(exc: RequestValidationError) -> dict:
    fields = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        fields.setdefault(".".join(location) or "body", []).append(error.get("msg", "Invalid value"))
    return fields


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DiningError)
    async def handle_dining_error(request: Request, exc: DiningError):
        if exc.status_code >= 500:
            logger.error("Request failed", path=request.url.path, code=exc.code)
        else:
            logger.info("Request rejected", path=request.url.path, code=exc.code, status=exc.status_code)

        return JSONResponse(status_code=exc.status_code, content=error_body(exc, _debug()))

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("Request rejected", path=request.url.path, code="VALIDATION_ERROR", status=422)
        return JSONResponse(status_code=422, content=validation_body(exc.messages))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=422, content=validation_body(_request_fields(exc)))

    @app.exception_handler(ObjectNotFoundError)
    async def handle_object_not_found(request: Request, exc: ObjectNotFoundError):
        return JSONResponse(status_code=404, content=error_body(NotFound()))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path)

        error = DiningError(type=type(exc).__name__, detail=str(exc))
        return JSONResponse(status_code=500, content=error_body(error, _debug()))
