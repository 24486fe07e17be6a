"""Tests for PluginRegistry registration, queries and events."""

import pytest

from notur_core.bridge import (
    DEFAULT_SLOT_ORDER,
    ExtensionRegistration,
    PluginRegistry,
    RouteRegistration,
    SlotRegistration,
    ThemeRegistration,
)


def widget(props):
    return "widget"


def slot(slot_id="dashboard.widgets", **kwargs):
    return SlotRegistration(slot=slot_id, component=widget, **kwargs)


def route(area="server", path="/stats", **kwargs):
    kwargs.setdefault("name", "Stats")
    return RouteRegistration(area=area, path=path, component=widget, **kwargs)


@pytest.fixture
def recorder(registry):
    """Record every event name the registry emits."""
    events = []

    def watch(*names):
        for name in names:
            registry.on(name, lambda name=name: events.append(name))
        return events

    return watch


class TestSlots:
    """Tests for slot registration and ordering."""

    def test_default_order(self):
        """Slot registrations default to order 50."""
        assert slot().order == DEFAULT_SLOT_ORDER == 50

    def test_sorted_by_order(self, registry):
        """get_slot returns registrations ascending by order."""
        registry.register_slot(slot(extension_id="c", order=90))
        registry.register_slot(slot(extension_id="a", order=10))
        registry.register_slot(slot(extension_id="b"))

        assert [r.extension_id for r in registry.get_slot("dashboard.widgets")] == ["a", "b", "c"]

    def test_equal_orders_keep_registration_order(self, registry):
        """Ties keep the order they were registered in."""
        for ext_id in ("first", "second", "third"):
            registry.register_slot(slot(extension_id=ext_id, order=5))

        assert [r.extension_id for r in registry.get_slot("dashboard.widgets")] == [
            "first",
            "second",
            "third",
        ]

    def test_other_slots_untouched(self, registry):
        """Registrations are per slot."""
        registry.register_slot(slot("navbar"))

        assert registry.get_slot("dashboard.widgets") == []
        assert registry.slot_counts() == {"navbar": 1}

    def test_unknown_slot_still_registered(self, registry):
        """Unknown slot ids are accepted with a warning log."""
        registry.register_slot(slot("sidebar.custom"))

        assert len(registry.get_slot("sidebar.custom")) == 1

    def test_emits_slot_then_change(self, registry, recorder):
        """A slot registration notifies the slot and then change."""
        events = recorder("slot:navbar", "slot:dashboard.widgets", "change")

        registry.register_slot(slot("navbar"))

        assert events == ["slot:navbar", "change"]


class TestRoutes:
    """Tests for route registration."""

    def test_routes_per_area(self, registry):
        """get_routes filters by area in registration order."""
        registry.register_route(route("server", "/a"))
        registry.register_route(route("account", "/b"))
        registry.register_route(route("server", "/c"))

        assert [r.path for r in registry.get_routes("server")] == ["/a", "/c"]
        assert registry.route_counts() == {"server": 2, "account": 1}

    def test_duplicate_route_kept_with_warning(self, registry):
        """Duplicate (area, path) pairs are both kept and recorded as a warning."""
        registry.register_route(route(extension_id="acme/one"))
        registry.register_route(route(extension_id="acme/two"))

        assert [r.extension_id for r in registry.get_routes("server")] == ["acme/one", "acme/two"]
        [warning] = registry.warnings
        assert warning.path == "server:/stats"
        assert warning.severity == "warning"
        assert "already registered" in warning.message

    def test_same_path_other_area_is_not_duplicate(self, registry):
        """Duplicates are per area."""
        registry.register_route(route("server"))
        registry.register_route(route("account"))

        assert registry.warnings == []

    def test_emits_area_event(self, registry, recorder):
        """A route registration notifies its area."""
        events = recorder("route:server", "route:account", "change")

        registry.register_route(route("server"))

        assert events == ["route:server", "change"]


class TestTheme:
    """Tests for theme folding."""

    def test_higher_priority_wins(self, registry):
        """Priority 10 overrides priority 5 regardless of order."""
        registry.register_theme(ThemeRegistration({"--notur-primary": "blue"}, priority=10))
        registry.register_theme(ThemeRegistration({"--notur-primary": "red"}, priority=5))

        assert registry.get_theme_overrides() == {"--notur-primary": "blue"}

    def test_equal_priority_later_wins(self, registry):
        """Ties fold in registration order."""
        registry.register_theme(ThemeRegistration({"--notur-primary": "red"}))
        registry.register_theme(ThemeRegistration({"--notur-primary": "green"}))

        assert registry.get_theme_overrides() == {"--notur-primary": "green"}

    def test_disjoint_keys_merge(self, registry):
        """Different variables from different extensions all survive."""
        registry.register_theme(ThemeRegistration({"--notur-primary": "red"}))
        registry.register_theme(ThemeRegistration({"--notur-radius-sm": "2px"}, priority=3))

        assert registry.get_theme_overrides() == {
            "--notur-primary": "red",
            "--notur-radius-sm": "2px",
        }

    def test_emits_theme_changed(self, registry, recorder):
        """Theme registration notifies theme subscribers."""
        events = recorder("theme:changed")

        registry.register_theme(ThemeRegistration({"--notur-primary": "red"}))

        assert events == ["theme:changed"]


class TestExtensions:
    """Tests for whole-extension registration and teardown."""

    def make_extension(self):
        return ExtensionRegistration(
            id="acme/analytics",
            name="Analytics",
            version="1.0.0",
            slots=(slot("dashboard.widgets"), slot("navbar", order=1)),
            routes=(route("server", "/stats"),),
            theme=ThemeRegistration({"--notur-primary": "purple"}),
        )

    def test_register_stamps_extension_id(self, registry):
        """Every contribution is owned by the registering extension."""
        registry.register_extension(self.make_extension())

        assert registry.get_slot("navbar")[0].extension_id == "acme/analytics"
        assert registry.get_routes("server")[0].extension_id == "acme/analytics"
        assert registry.get_extension("acme/analytics").name == "Analytics"
        assert [e.id for e in registry.get_extensions()] == ["acme/analytics"]

    def test_register_event_order(self, registry, recorder):
        """Contribution events fire before extension:registered."""
        events = recorder("slot:navbar", "route:server", "theme:changed", "extension:registered")

        registry.register_extension(self.make_extension())

        assert events == ["slot:navbar", "route:server", "theme:changed", "extension:registered"]

    def test_unregister_removes_everything(self, registry):
        """Unregistering leaves no trace and runs the destroy callback once."""
        destroyed = []
        registry.register_extension(self.make_extension())
        registry.register_destroy_callback("acme/analytics", lambda: destroyed.append(True))

        registry.unregister_extension("acme/analytics")
        registry.unregister_extension("acme/analytics")

        assert destroyed == [True]
        assert registry.get_slot("navbar") == []
        assert registry.get_slot("dashboard.widgets") == []
        assert registry.get_routes("server") == []
        assert registry.get_theme_overrides() == {}
        assert registry.get_extension("acme/analytics") is None

    def test_unregister_keeps_other_extensions(self, registry):
        """Only the named extension's contributions are removed."""
        registry.register_extension(self.make_extension())
        registry.register_slot(slot("navbar", extension_id="zeta/other"))

        registry.unregister_extension("acme/analytics")

        assert [r.extension_id for r in registry.get_slot("navbar")] == ["zeta/other"]

    def test_unregister_notifies_affected_views(self, registry, recorder):
        """Affected slots, areas and theme hear about the removal."""
        registry.register_extension(self.make_extension())
        events = recorder(
            "slot:dashboard.widgets",
            "slot:navbar",
            "slot:account.header",
            "route:server",
            "theme:changed",
            "extension:unregistered",
        )

        registry.unregister_extension("acme/analytics")

        assert events == [
            "slot:dashboard.widgets",
            "slot:navbar",
            "route:server",
            "theme:changed",
            "extension:unregistered",
        ]

    def test_failing_destroy_callback_does_not_block(self, registry):
        """Every destroy callback runs even if one raises."""
        calls = []

        def broken():
            raise RuntimeError("cleanup failed")

        registry.register_extension(self.make_extension())
        registry.register_destroy_callback("acme/analytics", broken)
        registry.register_destroy_callback("acme/analytics", lambda: calls.append("second"))

        registry.unregister_extension("acme/analytics")

        assert calls == ["second"]
        assert registry.get_extension("acme/analytics") is None


class TestSubscriptions:
    """Tests for on() and emit delivery."""

    def test_unsubscribe_is_idempotent(self, registry):
        """Unsubscribing twice is harmless."""
        calls = []
        unsubscribe = registry.on("change", lambda: calls.append(1))

        unsubscribe()
        unsubscribe()
        registry.register_slot(slot())

        assert calls == []

    def test_unsubscribe_during_delivery(self, registry):
        """A listener removed by an earlier listener is not called."""
        calls = []
        unsubscribers = {}

        def first():
            calls.append("first")
            unsubscribers["second"]()

        registry.on("change", first)
        unsubscribers["second"] = registry.on("change", lambda: calls.append("second"))

        registry.register_slot(slot())

        assert calls == ["first"]

    def test_failing_listener_isolated(self, registry):
        """A raising listener does not stop the others."""
        calls = []

        def broken():
            raise RuntimeError("listener failed")

        registry.on("change", broken)
        registry.on("change", lambda: calls.append("ok"))

        registry.register_slot(slot())

        assert calls == ["ok"]

    def test_emit_event_delivers_data(self, registry):
        """emit_event passes its payload to on_event handlers."""
        received = []
        unsubscribe = registry.on_event("refresh", received.append)

        registry.emit_event("refresh", {"id": 1})
        unsubscribe()
        registry.emit_event("refresh", {"id": 2})

        assert received == [{"id": 1}]

    def test_emit_event_without_handlers(self, registry):
        """Emitting to nobody is a no-op."""
        registry.emit_event("nobody-listens")

    def test_emit_event_after_earlier_handler_unsubscribed(self, registry):
        """A handler removed before a later one subscribes never fires."""
        calls = []
        unsubscribe_a = registry.on_event("x", lambda data: calls.append("a"))
        unsubscribe_a()
        registry.on_event("x", lambda data: calls.append("b"))

        registry.emit_event("x")

        assert calls == ["b"]

    def test_emit_event_handler_removed_during_delivery(self, registry):
        """A handler unsubscribed by an earlier handler of the same event is skipped."""
        calls = []
        unsubscribers = {}

        def first(data):
            calls.append(("a", data))
            unsubscribers["b"]()

        registry.on_event("x", first)
        unsubscribers["b"] = registry.on_event("x", lambda data: calls.append(("b", data)))

        registry.emit_event("x", 1)
        registry.emit_event("x", 2)

        assert calls == [("a", 1), ("a", 2)]

    def test_listener_registering_during_notification(self, registry):
        """A change listener may register again while being notified."""
        notifications = []

        def listener():
            notifications.append(len(registry.get_slot("dashboard.widgets")))
            if len(notifications) == 1:
                registry.register_slot(slot(extension_id="acme/nested"))

        registry.on("change", listener)
        registry.register_slot(slot(extension_id="acme/outer"))

        assert [r.extension_id for r in registry.get_slot("dashboard.widgets")] == [
            "acme/outer",
            "acme/nested",
        ]
        assert notifications == [1, 2]
