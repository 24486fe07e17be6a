"""Shared types for Notur.

Import from here rather than submodules:
    from notur_core.types import LogLevel, RouteArea, ValidationResult
"""

from .enums import (
    HealthState,
    LifecyclePhase,
    LogFormat,
    LogLevel,
    RouteArea,
    RouteGroup,
    SlotType,
)
from .validation import ValidationIssue, ValidationResult

__all__ = [
    # Enums
    "LogLevel",
    "LogFormat",
    "LifecyclePhase",
    "RouteGroup",
    "RouteArea",
    "SlotType",
    "HealthState",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
