"""Health checks feature."""

from notur_core.features.base import ExtensionFeature, FeatureKind
from notur_core.features.context import ExtensionContext


class HealthChecksFeature(ExtensionFeature):
    """Registers the extension as a health check provider with the manager."""

    name = "health"
    kind = FeatureKind.HEALTH
    capability_id = "health"
    capability_version = 1
    enabled_by_default = False

    def supports(self, context: ExtensionContext) -> bool:
        return context.extension.provides_health_checks()

    def register(self, context: ExtensionContext) -> None:
        context.manager.register_health_check_provider(context.id, context.extension)
