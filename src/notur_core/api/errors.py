"""HTTP error handlers.

Every error leaves the API as ``{"error": {...}}``, the shape
``NoturError.to_dict()`` produces, stamped with the request id and, for
requests under an extension namespace, the owning extension.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notur_core.api.dependencies import resolve_extension_id
from notur_core.api.middleware import get_extension_id, get_request_id
from notur_core.errors import NoturError
from notur_core.logging import get_logger

logger = get_logger("api")


def error_response(status_code: int, error: dict[str, Any]) -> JSONResponse:
    """Wrap ``error`` in the envelope and fill in request context."""
    error.setdefault("request_id", get_request_id())
    if error.get("extension_id") is None:
        error["extension_id"] = get_extension_id()
    return JSONResponse(status_code=status_code, content={"error": error})


def setup_error_handlers(app: FastAPI) -> None:
    """Install the NoturError, HTTP, validation and catch-all handlers."""

    @app.exception_handler(NoturError)
    async def notur_error_handler(request: Request, exc: NoturError) -> JSONResponse:
        return error_response(exc.http_status, exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Plain HTTP errors get an ``HTTP_<status>`` code."""
        if isinstance(exc.detail, dict):
            return error_response(exc.status_code, dict(exc.detail))

        return error_response(
            exc.status_code,
            {
                "code": f"HTTP_{exc.status_code}",
                "category": "SYSTEM",
                "message": str(exc.detail),
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        message = errors[0].get("msg", "Validation error") if errors else "Validation error"

        return error_response(
            422,
            {
                "code": "VALIDATION_ERROR",
                "category": "VALIDATION",
                "message": message,
                "detail": str(errors),
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Unexpected exceptions, including ones raised by extension routes.

        Runs outside the request context middleware, so the owning extension
        is resolved from the path again.
        """
        extension_id = resolve_extension_id(request.url.path)
        logger.exception(
            "Unhandled exception",
            exc=exc,
            path=request.url.path,
            extension_id=extension_id,
        )
        return error_response(
            500,
            {
                "code": "INTERNAL_ERROR",
                "category": "SYSTEM",
                "message": "An unexpected error occurred",
                "detail": str(exc) if app.debug else None,
                "extension_id": extension_id,
                "request_id": getattr(request.state, "request_id", None),
            },
        )
