"""REST API application factory."""

from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notur_core.api.errors import setup_error_handlers
from notur_core.api.middleware import RequestContextMiddleware
from notur_core.api.routers import (
    capabilities_router,
    extension_router,
    frontend_router,
    health_router,
    slot_router,
)
from notur_core.config import NoturConfig

if TYPE_CHECKING:
    from notur_core.extensions import ExtensionManager


def create_app(
    manager: "ExtensionManager",
    config: NoturConfig | None = None,
) -> FastAPI:
    """Create the FastAPI application hosting the extension API.

    The app is handed to the manager before activation so the routes
    feature can mount extension route files on it; call
    ``manager.activate()`` after this returns.

    Args:
        manager: Extension manager serving the API
        config: Host configuration (defaults to NoturConfig())

    Returns:
        Configured FastAPI application
    """
    config = config or NoturConfig()
    server = config.server

    app = FastAPI(
        title=server.title,
        version=server.version,
        docs_url="/docs" if server.docs_enabled else None,
        redoc_url="/redoc" if server.docs_enabled else None,
        openapi_url="/openapi.json" if server.docs_enabled else None,
    )

    # Store dependencies in app state
    app.state.manager = manager
    app.state.config = config
    app.state.activation_report = None

    if manager.app is None:
        manager.app = app

    # Request id and extension tagging (always enabled)
    app.add_middleware(RequestContextMiddleware)

    if server.cors_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=server.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    setup_error_handlers(app)

    app.include_router(capabilities_router)  # No prefix - already has /api/v1
    app.include_router(health_router, prefix=server.prefix)
    app.include_router(extension_router, prefix=server.prefix)
    app.include_router(slot_router, prefix=server.prefix)
    app.include_router(frontend_router, prefix=server.prefix)

    return app
