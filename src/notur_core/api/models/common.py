"""Host-level REST API models: error envelope, health and info."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

# ─────────────────────────────────────────────────────────────────
# Error envelope
# ─────────────────────────────────────────────────────────────────


class ErrorDetail(BaseModel):
    """Body of ``{"error": {...}}``, as produced by ``NoturError.to_dict()``."""

    code: str
    category: str
    message: str
    detail: str | None = None
    suggestion: str | None = None
    extension_id: str | None = None
    request_id: str | None = None


class ErrorResponse(BaseModel):
    error: ErrorDetail


# Shared ``responses=`` mapping for routes that address one extension.
EXTENSION_ERROR_RESPONSES: dict[int | str, dict] = {
    404: {"model": ErrorResponse, "description": "Extension not installed"},
}

# ─────────────────────────────────────────────────────────────────
# Host status
# ─────────────────────────────────────────────────────────────────


class HostStatus(str, Enum):
    """Degraded until activation ran, and whenever it collected failures."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"


class HostHealth(BaseModel):
    """GET /health.

    ``checks`` has an ``extensions`` entry plus one ``error: ...`` entry per
    extension that failed activation (``host`` for unattributed failures).
    """

    status: HostStatus
    activated: bool
    failures: int = 0
    checks: dict[str, str]
    timestamp: datetime


class HostInfo(BaseModel):
    """GET /info."""

    name: str = "Notur"
    version: str
    bridge_version: str
    features: dict[str, bool]
    extensions: int = Field(description="Installed extensions")
    enabled_extensions: int
