"""Tests for FeatureRegistry capability gating and phase application."""

from pathlib import Path

import pytest

from notur_core.extensions import NoturExtension
from notur_core.features import (
    DEFAULT_FEATURES,
    ExtensionContext,
    ExtensionFeature,
    FeatureRegistry,
)
from notur_core.types import LifecyclePhase


class ReportsFeature(ExtensionFeature):
    """Feature gated on the ``reports`` capability, version 2."""

    name = "reports"
    capability_id = "reports"
    capability_version = 2
    enabled_by_default = True

    def __init__(self):
        self.calls = []

    def register(self, context):
        self.calls.append(("register", context.id))

    def boot(self, context):
        self.calls.append(("boot", context.id))


class AlwaysFeature(ExtensionFeature):
    """Feature with no capability id."""

    name = "always"


class FailingFeature(ExtensionFeature):
    name = "failing"

    def register(self, context):
        raise RuntimeError("kaboom")


class UnsupportedFeature(ExtensionFeature):
    name = "unsupported"

    def supports(self, context):
        return False

    def register(self, context):
        raise AssertionError("must not run")


@pytest.fixture
def context_for(make_manifest):
    """Build an ExtensionContext around a manifest."""

    def factory(**overrides):
        manifest = make_manifest("acme/analytics", **overrides)
        return ExtensionContext(
            id=manifest.id,
            extension=NoturExtension(manifest),
            manifest=manifest,
            path=Path("/tmp/acme/analytics"),
            app=None,
            manager=None,
        )

    return factory


class TestCapabilityGate:
    """Tests for is_enabled_for."""

    def test_legacy_manifest_uses_default(self, context_for):
        """Without a capabilities block, enabled_by_default decides."""
        feature = ReportsFeature()
        registry = FeatureRegistry([feature])

        assert registry.is_enabled_for(feature, context_for())

        feature.enabled_by_default = False
        assert not registry.is_enabled_for(feature, context_for())

    def test_empty_block_disables(self, context_for):
        """An empty capabilities block means no capabilities."""
        feature = ReportsFeature()
        registry = FeatureRegistry([feature])

        assert not registry.is_enabled_for(feature, context_for(capabilities={}))

    def test_missing_key_disables(self, context_for):
        """A block without the feature's key leaves it off."""
        feature = ReportsFeature()
        registry = FeatureRegistry([feature])

        assert not registry.is_enabled_for(feature, context_for(capabilities={"routes": "^1"}))

    @pytest.mark.parametrize(
        "constraint,expected",
        [("^2", True), ("2", True), ("2.3", True), ("^1", False), ("^3", False), ("two", False)],
    )
    def test_constraint_matching(self, context_for, constraint, expected):
        """The declared constraint must select the feature's major version."""
        feature = ReportsFeature()
        registry = FeatureRegistry([feature])

        context = context_for(capabilities={"reports": constraint})

        assert registry.is_enabled_for(feature, context) is expected

    def test_no_capability_id_always_eligible(self, context_for):
        """Features without a capability id ignore the manifest."""
        feature = AlwaysFeature()
        registry = FeatureRegistry([feature])

        assert registry.is_enabled_for(feature, context_for(capabilities={}))


class TestPhaseApplication:
    """Tests for register/boot results."""

    def test_applied_and_skipped(self, context_for):
        """Eligible features apply, the others are skipped."""
        reports = ReportsFeature()
        registry = FeatureRegistry([reports, AlwaysFeature(), UnsupportedFeature()])

        result = registry.register(context_for(capabilities={}))

        assert result.phase == LifecyclePhase.REGISTER
        assert result.applied == ["always"]
        assert result.skipped == ["reports", "unsupported"]
        assert result.ok
        assert reports.calls == []

    def test_boot_phase(self, context_for):
        """boot() calls each feature's boot hook."""
        reports = ReportsFeature()
        registry = FeatureRegistry([reports])

        result = registry.boot(context_for())

        assert result.phase == LifecyclePhase.BOOT
        assert reports.calls == [("boot", "acme/analytics")]

    def test_failure_does_not_stop_others(self, context_for):
        """A raising feature is recorded and the next feature still runs."""
        reports = ReportsFeature()
        registry = FeatureRegistry([FailingFeature(), reports])

        result = registry.register(context_for())

        assert result.applied == ["reports"]
        [error] = result.failed
        assert error.code == "LIFECYCLE_FAILED"
        assert error.feature == "failing"
        assert error.phase == "register"
        assert error.extension_id == "acme/analytics"
        assert not result.ok


class TestRegistryContents:
    """Tests for defaults, add and lookup."""

    def test_defaults(self):
        """defaults() holds the built-in features in order."""
        registry = FeatureRegistry.defaults()

        assert [f.name for f in registry.all()] == ["routes", "health", "schedules"]
        assert [type(f) for f in registry.all()] == DEFAULT_FEATURES

    def test_defaults_with_disabled(self):
        """Disabled names are left out."""
        registry = FeatureRegistry.defaults(disabled=["health"])

        assert [f.name for f in registry.all()] == ["routes", "schedules"]

    def test_add_and_get(self):
        """Added features are found by name."""
        registry = FeatureRegistry([])
        feature = AlwaysFeature()

        registry.add(feature)

        assert registry.get("always") is feature
        assert registry.get("nope") is None
