"""Tests for ExtensionManager install state, host events and aggregation."""

import pytest

from notur_core.errors import NoturError
from notur_core.extensions import ExtensionManager, JSONExtensionStore
from notur_core.features import FeatureRegistry

HEALTHY_SOURCE = """
from notur_core.extensions import NoturExtension


class Ext(NoturExtension):
    def get_health_checks(self):
        return {"db": {"status": "OK", "message": "reachable"}}
"""

BROKEN_HEALTH_SOURCE = """
from notur_core.extensions import NoturExtension


class Ext(NoturExtension):
    def get_health_checks(self):
        raise ConnectionError("database unreachable")
"""


LISTENING_SOURCE = """
from notur_core.extensions import NoturExtension


class Ext(NoturExtension):
    def get_event_listeners(self):
        return {
            "extension.disabled": [self.config["seen"].append],
            "extension.rebooted": [self.config["seen"].append],
        }
"""

class TestInstall:
    """Tests for install and uninstall."""

    def test_install_manifest(self, manager, make_manifest):
        """Installing records the extension as enabled."""
        record = manager.install(make_manifest("acme/analytics"))

        assert record.extension_id == "acme/analytics"
        assert record.version == "1.0.0"
        assert manager.is_installed("acme/analytics")
        assert manager.is_enabled("acme/analytics")
        assert manager.get_manifest("acme/analytics").name == "Analytics"

    def test_install_disabled(self, manager, make_manifest):
        """enabled=False installs without enabling."""
        manager.install(make_manifest(), enabled=False)

        assert manager.is_installed("acme/analytics")
        assert not manager.is_enabled("acme/analytics")

    def test_install_from_directory(self, manager, make_extension_dir):
        """A directory path is read through its manifest."""
        ext_dir = make_extension_dir("acme/tickets")

        record = manager.install(ext_dir)

        assert record.path == str(ext_dir)
        assert manager.get_manifest("acme/tickets").base_path == ext_dir

    def test_install_twice_rejected(self, manager, make_manifest):
        """Extension ids are unique."""
        manager.install(make_manifest())

        with pytest.raises(NoturError) as exc_info:
            manager.install(make_manifest())

        assert exc_info.value.code == "EXTENSION_ALREADY_INSTALLED"
        assert exc_info.value.http_status == 409

    def test_uninstall(self, manager, make_manifest):
        """Uninstall forgets the record and the manifest."""
        manager.install(make_manifest())

        manager.uninstall("acme/analytics")

        assert not manager.is_installed("acme/analytics")
        assert manager.get_manifest("acme/analytics") is None
        assert manager.list_installed() == []

    def test_uninstall_unknown(self, manager):
        """Uninstalling an unknown id raises EXTENSION_NOT_INSTALLED."""
        with pytest.raises(NoturError) as exc_info:
            manager.uninstall("acme/ghost")

        assert exc_info.value.code == "EXTENSION_NOT_INSTALLED"

    def test_uninstall_drops_activation_state(self, make_manifest):
        """Uninstall removes permissions and slots registered at activation."""
        manager = ExtensionManager(features=FeatureRegistry([]))
        manager.install(
            make_manifest(
                backend={"permissions": ["view"]},
                frontend={"slots": {"navbar": {"component": "Nav"}}},
            )
        )
        manager.activate()
        assert "acme/analytics" in manager.permissions.get_all_permissions()

        manager.uninstall("acme/analytics")

        assert manager.get("acme/analytics") is None
        assert "acme/analytics" not in manager.permissions.get_all_permissions()
        assert manager.get_frontend_slots() == {}


class TestEnableDisable:
    """Tests for toggling installed extensions."""

    def test_disable_then_enable(self, manager, make_manifest):
        """The enabled flag follows enable/disable."""
        manager.install(make_manifest())

        manager.disable("acme/analytics")
        assert not manager.is_enabled("acme/analytics")

        manager.enable("acme/analytics")
        assert manager.is_enabled("acme/analytics")

    @pytest.mark.parametrize("method", ["enable", "disable"])
    def test_unknown_extension(self, manager, method):
        """Toggling an unknown id raises EXTENSION_NOT_INSTALLED."""
        with pytest.raises(NoturError) as exc_info:
            getattr(manager, method)("acme/ghost")

        assert exc_info.value.code == "EXTENSION_NOT_INSTALLED"
        assert exc_info.value.http_status == 404

    def test_is_enabled_unknown(self, manager):
        """Unknown ids are neither installed nor enabled."""
        assert not manager.is_installed("acme/ghost")
        assert not manager.is_enabled("acme/ghost")

    def test_toggle_persists(self, tmp_path, make_manifest):
        """The JSON store keeps the flag across manager instances."""
        state_file = tmp_path / "state.json"
        manager = ExtensionManager(store=JSONExtensionStore(state_file))
        manager.install(make_manifest())
        manager.disable("acme/analytics")

        reloaded = ExtensionManager(store=JSONExtensionStore(state_file))

        assert reloaded.is_installed("acme/analytics")
        assert not reloaded.is_enabled("acme/analytics")


class TestHostEvents:
    """Tests for host event emission."""

    def test_lifecycle_events(self, manager, make_manifest):
        """Install, toggle and uninstall each emit one event."""
        events = []
        manager.on(lambda event, payload: events.append((event, payload)))

        manager.install(make_manifest())
        manager.disable("acme/analytics")
        manager.enable("acme/analytics")
        manager.uninstall("acme/analytics")

        assert events == [
            ("extension.installed", {"extension_id": "acme/analytics", "version": "1.0.0"}),
            ("extension.disabled", {"extension_id": "acme/analytics"}),
            ("extension.enabled", {"extension_id": "acme/analytics"}),
            ("extension.uninstalled", {"extension_id": "acme/analytics"}),
        ]

    def test_unsubscribe(self, manager, make_manifest):
        """An unsubscribed listener receives nothing."""
        events = []
        unsubscribe = manager.on(lambda event, payload: events.append(event))
        unsubscribe()
        unsubscribe()

        manager.install(make_manifest())

        assert events == []

    def test_failing_listener_does_not_block_others(self, manager, make_manifest):
        """A raising listener is logged and the next one still runs."""
        events = []

        def broken(event, payload):
            raise RuntimeError("listener exploded")

        manager.on(broken)
        manager.on(lambda event, payload: events.append(event))

        manager.install(make_manifest())

        assert events == ["extension.installed"]

    def test_extension_event_listeners(self, make_extension_dir, make_manifest):
        """Listeners from get_event_listeners() receive payloads of their event only."""
        seen = []
        manager = ExtensionManager(
            features=FeatureRegistry([]),
            extension_settings={"acme/listener": {"seen": seen}},
        )
        manager.install(
            make_extension_dir(
                "acme/listener",
                entrypoint="extension.py:Ext",
                files={"extension.py": LISTENING_SOURCE},
            )
        )
        manager.install(make_manifest("acme/other"))

        report = manager.activate()
        manager.enable("acme/other")
        manager.disable("acme/other")

        assert report.ok
        assert seen == [{"extension_id": "acme/other"}]

    def test_extension_listeners_dropped_on_uninstall(self, make_extension_dir, make_manifest):
        seen = []
        manager = ExtensionManager(
            features=FeatureRegistry([]),
            extension_settings={"acme/listener": {"seen": seen}},
        )
        manager.install(
            make_extension_dir(
                "acme/listener",
                entrypoint="extension.py:Ext",
                files={"extension.py": LISTENING_SOURCE},
            )
        )
        manager.install(make_manifest("acme/other"))
        manager.activate()

        manager.uninstall("acme/listener")
        manager.disable("acme/other")

        assert seen == []


class TestDiscover:
    """Tests for directory discovery."""

    def test_discovers_vendor_name_layout(self, manager, extensions_root, make_extension_dir):
        """Every <vendor>/<name> directory with a manifest is installed."""
        make_extension_dir("acme/analytics")
        make_extension_dir("zeta/billing")

        installed = manager.discover(extensions_root)

        assert [r.extension_id for r in installed] == ["acme/analytics", "zeta/billing"]

    def test_skips_invalid_manifests(self, manager, extensions_root, make_extension_dir):
        """A directory with a broken manifest is skipped."""
        make_extension_dir("acme/analytics")
        broken = extensions_root / "acme" / "broken"
        broken.mkdir(parents=True)
        (broken / "extension.yaml").write_text("id: acme/broken\n")

        installed = manager.discover(extensions_root)

        assert [r.extension_id for r in installed] == ["acme/analytics"]

    def test_skips_already_installed(self, manager, extensions_root, make_extension_dir):
        """Rediscovery does not reinstall."""
        make_extension_dir("acme/analytics")
        manager.discover(extensions_root)

        assert manager.discover(extensions_root) == []

    def test_missing_directory(self, manager, tmp_path):
        """A directory that does not exist yields nothing."""
        assert manager.discover(tmp_path / "nowhere") == []


class TestAggregation:
    """Tests for the accessors built after activation."""

    def test_frontend_slots_and_theme(self, make_manifest):
        """Slots and theme variables are collected per enabled extension."""
        manager = ExtensionManager(features=FeatureRegistry([]))
        manager.install(
            make_manifest(
                "acme/analytics",
                frontend={"slots": {"dashboard.widgets": {"component": "Chart", "order": 10}}},
                theme={"css_variables": {"--notur-primary": "#ff0000"}},
            )
        )
        manager.install(make_manifest("acme/quiet"))
        manager.activate()

        assert manager.get_frontend_slots() == {
            "acme/analytics": {"dashboard.widgets": {"component": "Chart", "order": 10}},
            "acme/quiet": {},
        }
        assert manager.get_theme_overrides() == {"acme/analytics": {"--notur-primary": "#ff0000"}}

        manager.disable("acme/analytics")

        assert "acme/analytics" not in manager.get_frontend_slots()
        assert manager.get_theme_overrides() == {}

    def test_frontend_payload(self, make_extension_dir):
        """The payload links bundles under the public path."""
        manager = ExtensionManager(features=FeatureRegistry([]))
        manager.install(
            make_extension_dir(
                "acme/analytics",
                files={"dist/extension.js": "// bundle\n"},
                frontend={"slots": {"navbar": {"component": "Nav"}}},
            )
        )
        manager.activate()

        payload = manager.frontend_payload("/notur/extensions/")

        [extension] = payload["extensions"]
        assert extension["id"] == "acme/analytics"
        assert extension["bundle"] == "/notur/extensions/acme/analytics/dist/extension.js"
        assert extension["styles"] is None
        assert extension["slots"] == {"navbar": {"component": "Nav"}}
        assert payload["slots"] == {"acme/analytics": {"navbar": {"component": "Nav"}}}
        assert payload["theme"] == {}

    def test_all_and_get(self, make_manifest):
        """Registered extensions are reachable by id."""
        manager = ExtensionManager(features=FeatureRegistry([]))
        manager.install(make_manifest())
        manager.activate()

        assert list(manager.all()) == ["acme/analytics"]
        assert manager.get("acme/analytics").id == "acme/analytics"
        assert manager.get("acme/ghost") is None


class TestHealth:
    """Tests for get_health."""

    def test_unknown_extension(self, manager):
        """Health of an unknown id raises EXTENSION_NOT_INSTALLED."""
        with pytest.raises(NoturError) as exc_info:
            manager.get_health("acme/ghost")

        assert exc_info.value.code == "EXTENSION_NOT_INSTALLED"

    def test_no_provider(self, manager, make_manifest):
        """An extension without health checks reports nothing."""
        manager.install(make_manifest())

        assert manager.get_health("acme/analytics") == []
        assert not manager.has_health_checks("acme/analytics")

    def test_provider_results_normalized(self, make_extension_dir):
        """Provider results come back normalized."""
        manager = ExtensionManager()
        manager.install(
            make_extension_dir(
                "acme/analytics",
                entrypoint="extension.py:Ext",
                capabilities={"health": "^1"},
                files={"extension.py": HEALTHY_SOURCE},
            )
        )
        manager.activate()

        assert manager.has_health_checks("acme/analytics")
        [result] = manager.get_health("acme/analytics")
        assert result["id"] == "db"
        assert result["status"] == "ok"
        assert result["message"] == "reachable"

    def test_raising_provider(self, make_extension_dir):
        """A provider that raises yields a single error entry."""
        manager = ExtensionManager()
        manager.install(
            make_extension_dir(
                "acme/analytics",
                entrypoint="extension.py:Ext",
                capabilities={"health": "^1"},
                files={"extension.py": BROKEN_HEALTH_SOURCE},
            )
        )
        manager.activate()

        assert manager.get_health("acme/analytics") == [
            {
                "id": "provider",
                "status": "error",
                "message": "database unreachable",
                "details": None,
                "checked_at": None,
            }
        ]
