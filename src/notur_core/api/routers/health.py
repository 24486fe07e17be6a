"""Host health and info router."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from notur_core.api.models import HostHealth, HostInfo, HostStatus
from notur_core.bridge import BRIDGE_VERSION

health_router = APIRouter(tags=["Health"])


@health_router.get("/health", response_model=HostHealth)
async def health_check(request: Request) -> HostHealth:
    """Report whether activation ran and which extensions failed it."""
    manager = request.app.state.manager
    report = request.app.state.activation_report

    checks = {"extensions": "ok" if manager.activated else "not_activated"}
    failures = report.failures if report is not None else []
    for failure in failures:
        checks.setdefault(failure.extension_id or "host", f"error: {failure.message}")

    healthy = manager.activated and not failures
    return HostHealth(
        status=HostStatus.HEALTHY if healthy else HostStatus.DEGRADED,
        activated=manager.activated,
        failures=len(failures),
        checks=checks,
        timestamp=datetime.now(timezone.utc),
    )


@health_router.get("/info", response_model=HostInfo)
async def server_info(request: Request) -> HostInfo:
    config = request.app.state.config
    manager = request.app.state.manager
    installed = manager.list_installed()

    return HostInfo(
        version=config.server.version,
        bridge_version=BRIDGE_VERSION,
        features={feature.name: True for feature in manager.features.all()},
        extensions=len(installed),
        enabled_extensions=sum(1 for record in installed if record.enabled),
    )
