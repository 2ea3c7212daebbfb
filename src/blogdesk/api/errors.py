"""
blogdesk.api.errors

Centralized error rendering for the HTTP API.

Responsibilities:
- Render `HTTPException`s as `{"message": ...}`.
- Turn request validation failures into 400 with the first error message.
- Catch-all: log unexpected exceptions and answer a generic 500.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

from blogdesk.observability.logging import get_logger

log = get_logger(__name__)

GENERIC_ERROR = "An unexpected error occurred"


def first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    return str(errors[0].get("msg", "Invalid request"))


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        message = first_validation_message(exc)
        log.info("request_invalid", message=message)
        return JSONResponse(status_code=HTTP_400_BAD_REQUEST, content={"message": message})

    @app.exception_handler(Exception)
    async def _unexpected_error(_: Request, exc: Exception) -> JSONResponse:
        log.exception("unhandled_error", error_type=type(exc).__name__)
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": GENERIC_ERROR},
        )


# --- Module Notes -----------------------------------------------------------
# Expected failures (not found, conflict, forbidden) are raised as HTTPException at
# the point of occurrence in the routers; only surprises reach `_unexpected_error`.
