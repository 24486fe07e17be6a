"""Extension REST API models."""

from typing import Any

from pydantic import BaseModel, Field


class ExtensionSummary(BaseModel):
    """Installed extension as listed by the host."""

    id: str
    name: str
    version: str
    description: str = ""
    enabled: bool
    active: bool = False


class ExtensionDetail(ExtensionSummary):
    """Full extension details, including what it contributed."""

    path: str = ""
    installed_at: str | None = None
    capabilities: dict[str, Any] | None = None
    permissions: list[str] = Field(default_factory=list)
    scoped_permissions: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)
    route_groups: list[dict[str, Any]] = Field(default_factory=list)
    schedules: list[dict[str, Any]] = Field(default_factory=list)
    has_health_checks: bool = False


class ExtensionListResponse(BaseModel):
    """Extension list response."""

    extensions: list[ExtensionSummary]
    total: int


class ExtensionToggleResponse(BaseModel):
    """Result of enabling or disabling an extension."""

    id: str
    enabled: bool


class HealthResult(BaseModel):
    """One normalized health check result."""

    id: str
    status: str
    message: str | None = None
    details: dict[str, Any] | None = None
    checked_at: str | None = None


class ExtensionHealthResponse(BaseModel):
    """Health results of one extension."""

    id: str
    checks: list[HealthResult]


class SlotDefinitionModel(BaseModel):
    """A named UI mount point."""

    id: str
    type: str
    description: str


class SlotListResponse(BaseModel):
    """Every slot id the host renders."""

    slots: list[SlotDefinitionModel]
    total: int
