"""Feature registry: capability gating and per-extension phase application."""

from dataclasses import dataclass, field

from notur_core.errors import NoturError, get_error_factory
from notur_core.extensions.capabilities import CapabilityMatcher
from notur_core.logging import get_logger
from notur_core.types import LifecyclePhase

from .base import ExtensionFeature
from .context import ExtensionContext


@dataclass
class PhaseResult:
    """Outcome of applying one phase of every feature to one extension.

    Attributes:
        extension_id: Extension the phase ran for
        phase: register or boot
        applied: Names of features that ran successfully
        skipped: Names of features that were not eligible or not supported
        failed: One error per feature that raised
    """

    extension_id: str
    phase: LifecyclePhase
    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[NoturError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class FeatureRegistry:
    """Ordered collection of features.

    Features run in the order they were added. A failing feature is
    reported in the PhaseResult and does not stop the remaining features
    of the same extension.
    """

    def __init__(
        self,
        features: list[ExtensionFeature] | None = None,
        matcher: type[CapabilityMatcher] = CapabilityMatcher,
    ):
        self._features: list[ExtensionFeature] = list(features or [])
        self._matcher = matcher
        self._logger = get_logger("feature")

    @classmethod
    def defaults(cls, disabled: list[str] | None = None) -> "FeatureRegistry":
        """Registry with the built-in features, minus any named in ``disabled``."""
        from .builtin import DEFAULT_FEATURES

        skip = set(disabled or [])
        return cls([feature_class() for feature_class in DEFAULT_FEATURES if feature_class.name not in skip])

    def add(self, feature: ExtensionFeature) -> None:
        self._features.append(feature)

    def all(self) -> list[ExtensionFeature]:
        return list(self._features)

    def get(self, name: str) -> ExtensionFeature | None:
        for feature in self._features:
            if feature.name == name:
                return feature
        return None

    def is_enabled_for(self, feature: ExtensionFeature, context: ExtensionContext) -> bool:
        """Capability gate for one (feature, extension) pair."""
        if feature.capability_id is None:
            return True

        capabilities = context.manifest.capabilities
        if capabilities is None:
            return feature.enabled_by_default

        constraint = capabilities.get(feature.capability_id)
        if constraint is None:
            return False

        return self._matcher.matches(constraint, feature.capability_version)

    def register(self, context: ExtensionContext) -> PhaseResult:
        return self._apply(context, LifecyclePhase.REGISTER)

    def boot(self, context: ExtensionContext) -> PhaseResult:
        return self._apply(context, LifecyclePhase.BOOT)

    def _apply(self, context: ExtensionContext, phase: LifecyclePhase) -> PhaseResult:
        result = PhaseResult(extension_id=context.id, phase=phase)

        for feature in self._features:
            try:
                eligible = self.is_enabled_for(feature, context) and feature.supports(context)
                if not eligible:
                    result.skipped.append(feature.name)
                    continue

                if phase == LifecyclePhase.REGISTER:
                    feature.register(context)
                else:
                    feature.boot(context)
                result.applied.append(feature.name)
            except Exception as e:
                error = get_error_factory().from_exception(
                    e,
                    extension_id=context.id,
                    feature=feature.name,
                    phase=phase.value,
                    fallback_code="LIFECYCLE_FAILED",
                )
                result.failed.append(error)
                self._logger.exception(
                    f"Feature '{feature.name}' failed during {phase.value}",
                    exc=e,
                    **error.location,
                )

        return result
