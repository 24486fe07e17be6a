"""Built-in Notur features.

This module exports the built-in features and DEFAULT_FEATURES, the order
in which FeatureRegistry.defaults() applies them.
"""

from .health import HealthChecksFeature
from .routes import MountedRouteGroup, RoutesFeature, route_prefix
from .schedules import ScheduledTask, SchedulesFeature, schedule_to_cron

# Routing before health checks before schedules
DEFAULT_FEATURES: list[type] = [
    RoutesFeature,
    HealthChecksFeature,
    SchedulesFeature,
]

__all__ = [
    "RoutesFeature",
    "HealthChecksFeature",
    "SchedulesFeature",
    "ScheduledTask",
    "MountedRouteGroup",
    "route_prefix",
    "schedule_to_cron",
    "DEFAULT_FEATURES",
]
