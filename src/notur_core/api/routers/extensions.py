"""Extension router."""

from dataclasses import asdict

from fastapi import APIRouter, Request

from notur_core.api.models import (
    EXTENSION_ERROR_RESPONSES,
    ExtensionDetail,
    ExtensionHealthResponse,
    ExtensionListResponse,
    ExtensionSummary,
    ExtensionToggleResponse,
    HealthResult,
)
from notur_core.errors import create_error
from notur_core.extensions import ExtensionManager, InstalledExtension

extension_router = APIRouter(prefix="/extensions", tags=["Extensions"])


def _require_record(manager: ExtensionManager, extension_id: str) -> InstalledExtension:
    record = manager.store.get(extension_id)
    if record is None:
        raise create_error("EXTENSION_NOT_INSTALLED", extension_id=extension_id)
    return record


def _summary(manager: ExtensionManager, record: InstalledExtension) -> ExtensionSummary:
    manifest = manager.get_manifest(record.extension_id)
    return ExtensionSummary(
        id=record.extension_id,
        name=manifest.name if manifest else record.extension_id,
        version=record.version,
        description=manifest.description if manifest else "",
        enabled=record.enabled,
        active=manager.get(record.extension_id) is not None,
    )


@extension_router.get("", response_model=ExtensionListResponse)
async def list_extensions(request: Request, enabled: bool | None = None) -> ExtensionListResponse:
    """List installed extensions."""
    manager: ExtensionManager = request.app.state.manager
    records = manager.list_installed()
    if enabled is not None:
        records = [r for r in records if r.enabled == enabled]

    summaries = [_summary(manager, r) for r in records]
    return ExtensionListResponse(extensions=summaries, total=len(summaries))


@extension_router.get(
    "/{vendor}/{name}", response_model=ExtensionDetail, responses=EXTENSION_ERROR_RESPONSES
)
async def get_extension(vendor: str, name: str, request: Request) -> ExtensionDetail:
    """Get one installed extension."""
    manager: ExtensionManager = request.app.state.manager
    extension_id = f"{vendor}/{name}"
    record = _require_record(manager, extension_id)
    manifest = manager.get_manifest(extension_id)
    summary = _summary(manager, record)

    permissions = manager.permissions.get_extension_permissions(extension_id)
    return ExtensionDetail(
        **summary.model_dump(),
        path=record.path,
        installed_at=record.installed_at,
        capabilities=manifest.capabilities if manifest else None,
        permissions=permissions,
        scoped_permissions=[
            manager.permissions.scope_permission(extension_id, p) for p in permissions
        ],
        dependencies=manifest.dependencies if manifest else [],
        route_groups=[asdict(g) for g in manager.get_route_groups(extension_id)],
        schedules=[asdict(t) for t in manager.get_schedules() if t.extension_id == extension_id],
        has_health_checks=manager.has_health_checks(extension_id),
    )


@extension_router.post(
    "/{vendor}/{name}/enable", response_model=ExtensionToggleResponse, responses=EXTENSION_ERROR_RESPONSES
)
async def enable_extension(vendor: str, name: str, request: Request) -> ExtensionToggleResponse:
    """Enable an installed extension."""
    manager: ExtensionManager = request.app.state.manager
    extension_id = f"{vendor}/{name}"
    manager.enable(extension_id)
    return ExtensionToggleResponse(id=extension_id, enabled=True)


@extension_router.post(
    "/{vendor}/{name}/disable", response_model=ExtensionToggleResponse, responses=EXTENSION_ERROR_RESPONSES
)
async def disable_extension(vendor: str, name: str, request: Request) -> ExtensionToggleResponse:
    """Disable an installed extension."""
    manager: ExtensionManager = request.app.state.manager
    extension_id = f"{vendor}/{name}"
    manager.disable(extension_id)
    return ExtensionToggleResponse(id=extension_id, enabled=False)


@extension_router.get(
    "/{vendor}/{name}/health", response_model=ExtensionHealthResponse, responses=EXTENSION_ERROR_RESPONSES
)
async def extension_health(vendor: str, name: str, request: Request) -> ExtensionHealthResponse:
    """Run an extension's health checks."""
    manager: ExtensionManager = request.app.state.manager
    extension_id = f"{vendor}/{name}"
    checks = [HealthResult(**entry) for entry in manager.get_health(extension_id)]
    return ExtensionHealthResponse(id=extension_id, checks=checks)
