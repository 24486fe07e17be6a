"""HTTP middleware."""

from .request_context import (
    EXTENSION_HEADER,
    REQUEST_ID_HEADER,
    RequestContextMiddleware,
    extension_id_var,
    get_extension_id,
    get_request_id,
    request_id_var,
)

__all__ = [
    "RequestContextMiddleware",
    "REQUEST_ID_HEADER",
    "EXTENSION_HEADER",
    "get_request_id",
    "get_extension_id",
    "request_id_var",
    "extension_id_var",
]
