"""Extension feature base class.

A feature is one independent unit of host behavior (routing, health
checks, scheduled tasks) applied to every extension that opts into it.
"""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import ExtensionContext


class FeatureKind(str, Enum):
    """Closed set of feature variants."""

    ROUTES = "routes"
    HEALTH = "health"
    SCHEDULES = "schedules"
    CUSTOM = "custom"


class ExtensionFeature:
    """Base class for extension features.

    Attributes:
        name: Feature name, used by ``features.disabled`` in config
        kind: Variant tag
        capability_id: Manifest capability key gating the feature; None means
            the feature is always eligible
        capability_version: Major version the feature implements
        enabled_by_default: Eligibility for manifests without a capabilities block
    """

    name: str = "feature"
    kind: FeatureKind = FeatureKind.CUSTOM
    capability_id: str | None = None
    capability_version: int = 1
    enabled_by_default: bool = False

    def supports(self, context: "ExtensionContext") -> bool:
        """Structural check, independent of capabilities."""
        return True

    def register(self, context: "ExtensionContext") -> None:
        """Apply the feature after the extension's own register()."""

    def boot(self, context: "ExtensionContext") -> None:
        """Finalize the feature after the extension's own boot()."""

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(capability_id={self.capability_id!r}, "
            f"version={self.capability_version})"
        )
