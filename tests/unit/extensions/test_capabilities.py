"""Tests for capability constraint matching and the host capability report."""

import pytest

from notur_core.bridge.slots import SLOT_IDS
from notur_core.extensions.capabilities import (
    Capabilities,
    CapabilityMatcher,
    DefaultCapabilitiesProvider,
    matches,
)
from notur_core.features import FeatureRegistry


class TestMatches:
    """Tests for the constraint matcher."""

    @pytest.mark.parametrize("constraint", ["^1", "~1", ">=1", "1", "1.0", "^1.4", " ^1 ", ">= 1"])
    def test_accepts_major_one(self, constraint):
        """Every accepted form with major 1 matches version 1."""
        assert matches(constraint, 1) is True

    def test_major_must_equal_version(self):
        """A constraint never matches a different major."""
        assert matches("^2", 1) is False
        assert matches("^1", 2) is False
        assert matches("2", 2) is True

    def test_zero_major_never_matches(self):
        """A major of 0 is rejected even against version 0."""
        assert matches("^0", 0) is False
        assert matches("0", 0) is False

    @pytest.mark.parametrize("constraint", ["", "abc", "^", "v1", "1.x", "^1.2.3", "<1", "*"])
    def test_malformed_constraint_does_not_match(self, constraint):
        """Unparseable constraints return False rather than raising."""
        assert matches(constraint, 1) is False

    @pytest.mark.parametrize("constraint", ["1.0.0", "^1.x", "1.*", ">=1.0.0"])
    def test_only_major_or_major_minor_forms_parse(self, constraint):
        """Semver triples and wildcards are not read by their leading digits."""
        assert matches(constraint, 1) is False

    @pytest.mark.parametrize("constraint", [None, 1, 1.0, ["^1"], {"v": 1}, True])
    def test_non_string_constraint_does_not_match(self, constraint):
        """Non-string constraints are treated as non-matching."""
        assert matches(constraint, 1) is False

    def test_matcher_class_delegates(self):
        """CapabilityMatcher.matches is the same function."""
        assert CapabilityMatcher.matches("^1", 1) is True
        assert CapabilityMatcher.matches("^2", 1) is False


class TestCapabilitiesReport:
    """Tests for the host capability report."""

    def test_to_dict(self):
        """Capabilities serialize to a plain dict."""
        caps = Capabilities(version="1.0.0", features={"routes": 1}, slots=["navbar"])
        assert caps.to_dict() == {"version": "1.0.0", "features": {"routes": 1}, "slots": ["navbar"]}

    def test_default_provider_reports_builtin_features(self):
        """Every built-in feature is reported with its capability version."""
        provider = DefaultCapabilitiesProvider(FeatureRegistry.defaults(), version="2.3.0")
        caps = provider.get_capabilities()

        assert caps.version == "2.3.0"
        assert caps.features == {"routes": 1, "health": 1, "schedules": 1}
        assert caps.slots == list(SLOT_IDS)

    def test_default_provider_respects_disabled_features(self):
        """Disabled features are absent from the report."""
        provider = DefaultCapabilitiesProvider(FeatureRegistry.defaults(["schedules"]))
        assert "schedules" not in provider.get_capabilities().features
