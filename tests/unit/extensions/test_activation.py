"""Tests for two-phase activation, ordering and failure isolation."""

import pytest

from notur_core.extensions import ExtensionManager, InstalledExtension
from notur_core.features import ExtensionFeature, FeatureRegistry

EXTENSION_SOURCE = """
from notur_core.extensions import NoturExtension


class Ext(NoturExtension):
    def register(self):
        self.config["log"].append(("register", self.id))
        if self.config.get("fail") == "register":
            raise RuntimeError("register exploded")

    def boot(self):
        self.config["log"].append(("boot", self.id))
        if self.config.get("fail") == "boot":
            raise RuntimeError("boot exploded")
"""


class RecordingFeature(ExtensionFeature):
    """Always-eligible feature that records every phase call."""

    name = "recording"

    def __init__(self, log, fail_for=None):
        self.log = log
        self.fail_for = fail_for

    def register(self, context):
        self.log.append(("feature.register", context.id))
        if context.id == self.fail_for:
            raise ValueError("feature exploded")

    def boot(self, context):
        self.log.append(("feature.boot", context.id))


class SecondFeature(RecordingFeature):
    name = "second"


@pytest.fixture
def log():
    return []


@pytest.fixture
def install(make_extension_dir):
    """Install an extension with the recording entrypoint on a manager."""

    def factory(manager, ext_id, **overrides):
        ext_dir = make_extension_dir(
            ext_id,
            entrypoint="extension.py:Ext",
            files={"extension.py": EXTENSION_SOURCE},
            **overrides,
        )
        return manager.install(ext_dir)

    return factory


def build_manager(log, settings=None, features=None):
    ids = ["acme/one", "acme/two", "acme/three", "acme/four"]
    merged = {ext_id: {"log": log} for ext_id in ids}
    for ext_id, extra in (settings or {}).items():
        merged[ext_id].update(extra)
    return ExtensionManager(
        features=FeatureRegistry(features if features is not None else []),
        extension_settings=merged,
    )


class TestPhaseOrdering:
    """Tests for register-before-boot and dependency order."""

    def test_every_register_precedes_every_boot(self, log, install):
        """No extension boots before all extensions registered."""
        manager = build_manager(log)
        install(manager, "acme/one")
        install(manager, "acme/two")

        report = manager.activate()

        assert report.ok
        assert log == [
            ("register", "acme/one"),
            ("register", "acme/two"),
            ("boot", "acme/one"),
            ("boot", "acme/two"),
        ]
        assert report.registered == ["acme/one", "acme/two"]
        assert report.booted == ["acme/one", "acme/two"]

    def test_feature_register_follows_extension_register(self, log, install):
        """Features apply after the extension's own hook, per phase."""
        manager = build_manager(log, features=[RecordingFeature(log)])
        install(manager, "acme/one")

        manager.activate()

        assert log == [
            ("register", "acme/one"),
            ("feature.register", "acme/one"),
            ("boot", "acme/one"),
            ("feature.boot", "acme/one"),
        ]

    def test_dependencies_activate_first(self, log, install):
        """A dependency registers before its dependent regardless of install order."""
        manager = build_manager(log)
        install(manager, "acme/one", dependencies=["acme/two"])
        install(manager, "acme/two")

        report = manager.activate()

        assert report.order == ["acme/two", "acme/one"]
        assert log[0] == ("register", "acme/two")

    def test_disabled_extensions_are_skipped(self, log, install):
        """Only enabled extensions take part in activation."""
        manager = build_manager(log)
        install(manager, "acme/one")
        install(manager, "acme/two")
        manager.disable("acme/two")

        report = manager.activate()

        assert report.order == ["acme/one"]
        assert manager.get("acme/two") is None

    def test_activate_is_idempotent(self, log, install):
        """A second activate() does nothing."""
        manager = build_manager(log)
        install(manager, "acme/one")

        manager.activate()
        second = manager.activate()

        assert second.order == []
        assert log.count(("register", "acme/one")) == 1
        assert manager.activated is True


class TestFailureIsolation:
    """Tests for per-cell failure isolation."""

    def test_register_failure_isolated(self, log, install):
        """A failing register skips that extension's features and boot only."""
        manager = build_manager(
            log,
            settings={"acme/two": {"fail": "register"}},
            features=[RecordingFeature(log)],
        )
        for ext_id in ("acme/one", "acme/two", "acme/three"):
            install(manager, ext_id)

        report = manager.activate()

        assert report.registered == ["acme/one", "acme/three"]
        assert report.booted == ["acme/one", "acme/three"]
        assert ("feature.register", "acme/two") not in log
        assert ("boot", "acme/two") not in log

        [failure] = report.failures
        assert failure.code == "LIFECYCLE_FAILED"
        assert failure.extension_id == "acme/two"
        assert failure.phase == "register"
        assert "register exploded" in failure.detail

    def test_boot_failure_isolated(self, log, install):
        """A failing boot still lets its features boot and others boot."""
        manager = build_manager(
            log,
            settings={"acme/one": {"fail": "boot"}},
            features=[RecordingFeature(log)],
        )
        install(manager, "acme/one")
        install(manager, "acme/two")

        report = manager.activate()

        assert report.booted == ["acme/two"]
        assert ("feature.boot", "acme/one") in log
        assert ("boot", "acme/two") in log
        assert [f.phase for f in report.failures] == ["boot"]

    def test_feature_failure_isolated(self, log, install):
        """A failing feature does not stop other features or extensions."""
        failing = RecordingFeature(log, fail_for="acme/one")
        second = SecondFeature(log)
        manager = build_manager(log, features=[failing, second])
        install(manager, "acme/one")
        install(manager, "acme/two")

        report = manager.activate()

        assert log.count(("feature.register", "acme/one")) == 2
        assert report.booted == ["acme/one", "acme/two"]

        [failure] = report.failures
        assert failure.extension_id == "acme/one"
        assert failure.feature == "recording"
        assert failure.phase == "register"

        register_results = [p for p in report.phases if p.extension_id == "acme/one"][0]
        assert register_results.applied == ["second"]
        assert len(register_results.failed) == 1

    def test_invalid_entrypoint_is_a_register_failure(self, log, make_extension_dir):
        """An entrypoint that cannot load fails only that extension."""
        manager = build_manager(log)
        manager.install(make_extension_dir("acme/one", entrypoint="missing.py:Ext"))
        manager.install(make_extension_dir("acme/two"))

        report = manager.activate()

        assert report.registered == ["acme/two"]
        assert report.failures_for("acme/one")[0].code == "ENTRYPOINT_INVALID"

    def test_missing_manifest_on_disk(self, log, tmp_path):
        """A store record whose directory vanished is reported and skipped."""
        manager = build_manager(log)
        manager.store.save(
            InstalledExtension(extension_id="acme/gone", version="1", path=str(tmp_path / "gone"))
        )

        report = manager.activate()

        assert report.order == []
        assert report.failures[0].code == "MANIFEST_NOT_FOUND"
        assert report.failures[0].extension_id == "acme/gone"


class TestDependencyCycles:
    """Tests for cycle handling during activation."""

    def test_cycle_members_excluded(self, log, install):
        """Every cycle member gets a DEPENDENCY_CYCLE failure; others activate."""
        manager = build_manager(log)
        install(manager, "acme/one", dependencies=["acme/two"])
        install(manager, "acme/two", dependencies=["acme/one"])
        install(manager, "acme/three")

        report = manager.activate()

        assert report.order == ["acme/three"]
        cycle_failures = [f for f in report.failures if f.code == "DEPENDENCY_CYCLE"]
        assert sorted(f.extension_id for f in cycle_failures) == ["acme/one", "acme/two"]
        assert cycle_failures[0].detail == "acme/one -> acme/two -> acme/one"

    def test_missing_dependency_is_not_fatal(self, log, install):
        """Depending on an uninstalled extension only logs a warning."""
        manager = build_manager(log)
        install(manager, "acme/one", dependencies=["other/absent"])

        report = manager.activate()

        assert report.ok
        assert report.booted == ["acme/one"]

    def test_malformed_dependencies_are_not_fatal(self, log, install):
        """A dependencies value of the wrong shape is ignored for ordering."""
        manager = build_manager(log)
        install(manager, "acme/one")
        install(manager, "acme/two", dependencies=5)

        report = manager.activate()

        assert report.ok
        assert report.booted == ["acme/one", "acme/two"]

    def test_single_dependency_string_orders_activation(self, log, install):
        """A bare id in dependencies still activates the dependency first."""
        manager = build_manager(log)
        install(manager, "acme/one", dependencies="acme/two")
        install(manager, "acme/two")

        report = manager.activate()

        assert report.order == ["acme/two", "acme/one"]
