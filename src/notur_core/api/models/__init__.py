"""REST API models."""

from .common import (
    EXTENSION_ERROR_RESPONSES,
    ErrorDetail,
    ErrorResponse,
    HostHealth,
    HostInfo,
    HostStatus,
)
from .extension import (
    ExtensionDetail,
    ExtensionHealthResponse,
    ExtensionListResponse,
    ExtensionSummary,
    ExtensionToggleResponse,
    HealthResult,
    SlotDefinitionModel,
    SlotListResponse,
)

__all__ = [
    # Common
    "ErrorDetail",
    "ErrorResponse",
    "EXTENSION_ERROR_RESPONSES",
    "HostStatus",
    "HostHealth",
    "HostInfo",
    # Extensions
    "ExtensionSummary",
    "ExtensionDetail",
    "ExtensionListResponse",
    "ExtensionToggleResponse",
    "HealthResult",
    "ExtensionHealthResponse",
    # Slots
    "SlotDefinitionModel",
    "SlotListResponse",
]
