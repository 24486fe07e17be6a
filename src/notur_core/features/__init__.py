"""Notur features - capability-gated units applied to extensions."""

from .base import ExtensionFeature, FeatureKind
from .builtin import (
    DEFAULT_FEATURES,
    HealthChecksFeature,
    RoutesFeature,
    ScheduledTask,
    SchedulesFeature,
)
from .context import ExtensionContext
from .registry import FeatureRegistry, PhaseResult

__all__ = [
    # Base
    "ExtensionFeature",
    "FeatureKind",
    "ExtensionContext",
    # Registry
    "FeatureRegistry",
    "PhaseResult",
    # Built-in features
    "RoutesFeature",
    "HealthChecksFeature",
    "SchedulesFeature",
    "ScheduledTask",
    "DEFAULT_FEATURES",
]
