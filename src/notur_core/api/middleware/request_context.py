"""Per-request context: request id and owning extension."""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from notur_core.api.dependencies import resolve_extension_id

REQUEST_ID_HEADER = "X-Request-ID"
EXTENSION_HEADER = "X-Notur-Extension"

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
extension_id_var: ContextVar[str | None] = ContextVar("notur_extension_id", default=None)


def get_request_id() -> str | None:
    return request_id_var.get()


def get_extension_id() -> str | None:
    """Extension whose namespace the current request path falls under."""
    return extension_id_var.get()


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tags requests with an ``X-Request-ID`` and their owning extension.

    An incoming request id is reused so a host proxy can correlate
    extension requests with its own logs. Responses from extension route
    groups also carry ``X-Notur-Extension``.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        extension_id = resolve_extension_id(request.url.path)
        request_token = request_id_var.set(request_id)
        extension_token = extension_id_var.set(extension_id)

        try:
            request.state.request_id = request_id
            response = await call_next(request)
        finally:
            extension_id_var.reset(extension_token)
            request_id_var.reset(request_token)

        response.headers[REQUEST_ID_HEADER] = request_id
        if extension_id is not None:
            response.headers[EXTENSION_HEADER] = extension_id
        return response
