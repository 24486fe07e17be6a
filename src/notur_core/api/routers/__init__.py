"""REST API routers."""

from .capabilities import router as capabilities_router
from .extensions import extension_router
from .frontend import frontend_router
from .health import health_router
from .slots import slot_router

__all__ = [
    "capabilities_router",
    "extension_router",
    "frontend_router",
    "health_router",
    "slot_router",
]
