"""Client bootstrap payload router."""

from typing import Any

from fastapi import APIRouter, Request

frontend_router = APIRouter(tags=["Frontend"])


@frontend_router.get("/frontend")
async def frontend_payload(request: Request) -> dict[str, Any]:
    """Payload the client bridge consumes on page load.

    Lists enabled extensions with their bundle and style URLs, their slot
    bindings and their manifest theme variables.
    """
    manager = request.app.state.manager
    config = request.app.state.config
    return manager.frontend_payload(config.extensions.public_path)
