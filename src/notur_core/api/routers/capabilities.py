"""Capabilities endpoint.

GET /api/v1/capabilities reports which extension features this host offers
and at which capability version, plus the slot ids it renders. Extension
tooling uses it to check a manifest's ``capabilities`` block before install.
"""

from fastapi import APIRouter, Request

from notur_core.extensions.capabilities import DefaultCapabilitiesProvider

router = APIRouter(prefix="/api/v1", tags=["capabilities"])


@router.get("/capabilities")
async def get_capabilities(request: Request) -> dict:
    """
    Get host capabilities.

    Returns:
        dict: Host capabilities including:
            - version: Host version
            - features: capability id -> version (None for always-on features)
            - slots: every slot id the host renders
    """
    manager = request.app.state.manager
    config = request.app.state.config
    provider = DefaultCapabilitiesProvider(manager.features, version=config.server.version)
    return provider.get_capabilities().to_dict()
