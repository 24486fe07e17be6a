"""Client-side plugin registry.

The registry is the single source of truth for every UI contribution made by
extension bundles: slot components, area routes and theme overrides. Renderers
subscribe to its events instead of polling it.

Events:
    ``slot:<slot_id>``      a slot's registration list changed
    ``route:<area>``        an area's route list changed
    ``theme:changed``       theme overrides changed
    ``extension:registered`` / ``extension:unregistered``
    ``change``              fired after every mutation
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from notur_core.errors import create_error
from notur_core.logging import get_logger
from notur_core.types import ValidationIssue

from .slots import is_known_slot

DEFAULT_SLOT_ORDER = 50

Listener = Callable[[], None]
EventHandler = Callable[[Any], None]
Unsubscribe = Callable[[], None]


@dataclass(frozen=True)
class SlotRegistration:
    """A component contributed to a slot.

    ``when`` is False (never render), a predicate taking a RenderContext, or
    a mapping of declarative conditions (see
    ``notur_core.bridge.renderer.should_render``).
    """

    slot: str
    component: Callable[[dict[str, Any]], Any]
    extension_id: str = "unknown"
    order: int = DEFAULT_SLOT_ORDER
    priority: int = 0
    when: bool | Mapping[str, Any] | Callable[[Any], bool] | None = None
    props: Mapping[str, Any] = field(default_factory=dict)
    label: str | None = None
    icon: str | None = None
    permission: str | None = None
    scope_class: str | None = None


@dataclass(frozen=True)
class RouteRegistration:
    """A page contributed to a navigable area."""

    area: str
    path: str
    name: str
    component: Callable[[dict[str, Any]], Any]
    extension_id: str = "unknown"
    icon: str | None = None
    permission: str | None = None


@dataclass(frozen=True)
class ThemeRegistration:
    """CSS custom property overrides contributed by an extension."""

    variables: Mapping[str, str]
    extension_id: str = "unknown"
    priority: int = 0


@dataclass(frozen=True)
class ExtensionRegistration:
    """Everything one extension bundle contributes, registered in one call."""

    id: str
    name: str
    version: str
    slots: tuple[SlotRegistration, ...] = ()
    routes: tuple[RouteRegistration, ...] = ()
    theme: ThemeRegistration | None = None


class PluginRegistry:
    """Process-wide registry of slot, route and theme contributions."""

    def __init__(self) -> None:
        self._extensions: dict[str, ExtensionRegistration] = {}
        self._slots: list[SlotRegistration] = []
        self._routes: list[RouteRegistration] = []
        self._themes: list[ThemeRegistration] = []
        self._destroy_callbacks: dict[str, list[Callable[[], None]]] = {}
        self._listeners: dict[str, list[Listener]] = {}
        self._event_handlers: dict[str, list[EventHandler]] = {}
        self._logger = get_logger("registry")
        self.warnings: list[ValidationIssue] = []

    # ── Registration ─────────────────────────────────────────────

    def register_slot(self, registration: SlotRegistration) -> None:
        """Add a component to a slot and notify the slot's subscribers."""
        if not is_known_slot(registration.slot):
            self._logger.warning(
                "Component registered for unknown slot",
                slot_id=registration.slot,
                extension_id=registration.extension_id,
            )
        self._slots.append(registration)
        self._emit(f"slot:{registration.slot}")
        self._emit("change")

    def register_route(self, registration: RouteRegistration) -> None:
        """Add a page to an area.

        Registering the same (area, path) twice keeps both entries and
        records a warning; route matching returns the first one.
        """
        if any(
            r.area == registration.area and r.path == registration.path for r in self._routes
        ):
            error = create_error(
                "DUPLICATE_ROUTE",
                path=registration.path,
                area=registration.area,
                extension_id=registration.extension_id,
            )
            self.warnings.append(
                ValidationIssue.warning(
                    f"{registration.area}:{registration.path}", error.message
                )
            )
            self._logger.warning(
                error.message,
                code=error.code,
                extension_id=registration.extension_id,
            )
        self._routes.append(registration)
        self._emit(f"route:{registration.area}")
        self._emit("change")

    def register_theme(self, registration: ThemeRegistration) -> None:
        """Add theme overrides and notify theme subscribers."""
        self._themes.append(registration)
        self._emit("theme:changed")
        self._emit("change")

    def register_extension(self, registration: ExtensionRegistration) -> None:
        """Register an extension and every contribution it carries.

        Contributions are stamped with the extension id before they are
        stored.
        """
        self._extensions[registration.id] = registration
        for slot in registration.slots:
            self.register_slot(replace(slot, extension_id=registration.id))
        for route in registration.routes:
            self.register_route(replace(route, extension_id=registration.id))
        if registration.theme is not None:
            self.register_theme(replace(registration.theme, extension_id=registration.id))

        self._logger.info(
            "Extension registered",
            extension_id=registration.id,
            version=registration.version,
        )
        self._emit("extension:registered")
        self._emit("change")

    def register_destroy_callback(self, extension_id: str, callback: Callable[[], None]) -> None:
        """Run ``callback`` when ``extension_id`` is unregistered."""
        self._destroy_callbacks.setdefault(extension_id, []).append(callback)

    def unregister_extension(self, extension_id: str) -> None:
        """Tear down an extension.

        Every destroy callback runs even if an earlier one raises. Then every
        slot, route and theme registration owned by the extension is removed
        and subscribers are notified.
        """
        for callback in self._destroy_callbacks.pop(extension_id, []):
            try:
                callback()
            except Exception as e:
                self._logger.exception(
                    "Destroy callback failed", exc=e, extension_id=extension_id
                )

        removed_slots = {r.slot for r in self._slots if r.extension_id == extension_id}
        removed_areas = {r.area for r in self._routes if r.extension_id == extension_id}
        had_theme = any(t.extension_id == extension_id for t in self._themes)

        self._slots = [r for r in self._slots if r.extension_id != extension_id]
        self._routes = [r for r in self._routes if r.extension_id != extension_id]
        self._themes = [t for t in self._themes if t.extension_id != extension_id]
        self._extensions.pop(extension_id, None)

        for slot_id in sorted(removed_slots):
            self._emit(f"slot:{slot_id}")
        for area in sorted(removed_areas):
            self._emit(f"route:{area}")
        if had_theme:
            self._emit("theme:changed")

        self._logger.info("Extension unregistered", extension_id=extension_id)
        self._emit("extension:unregistered")
        self._emit("change")

    # ── Queries ──────────────────────────────────────────────────

    def get_slot(self, slot_id: str) -> list[SlotRegistration]:
        """Registrations for a slot, ascending by order.

        Equal orders keep registration order.
        """
        return sorted((r for r in self._slots if r.slot == slot_id), key=lambda r: r.order)

    def get_routes(self, area: str) -> list[RouteRegistration]:
        return [r for r in self._routes if r.area == area]

    def get_extensions(self) -> list[ExtensionRegistration]:
        return list(self._extensions.values())

    def get_extension(self, extension_id: str) -> ExtensionRegistration | None:
        return self._extensions.get(extension_id)

    def get_theme_overrides(self) -> dict[str, str]:
        """Fold theme registrations by ascending priority.

        Later entries win on key collision; equal priorities keep
        registration order.
        """
        merged: dict[str, str] = {}
        for theme in sorted(self._themes, key=lambda t: t.priority):
            merged.update(theme.variables)
        return merged

    def slot_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for r in self._slots:
            counts[r.slot] = counts.get(r.slot, 0) + 1
        return counts

    def route_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for r in self._routes:
            counts[r.area] = counts.get(r.area, 0) + 1
        return counts

    # ── Subscriptions ────────────────────────────────────────────

    def on(self, event: str, listener: Listener) -> Unsubscribe:
        """Subscribe to a registry event.

        Returns:
            A function that removes the listener. Calling it more than once
            is harmless.
        """
        listeners = self._listeners.setdefault(event, [])
        listeners.append(listener)

        def unsubscribe() -> None:
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: str) -> None:
        listeners = self._listeners.get(event)
        if not listeners:
            return
        for listener in _deliverable(listeners):
            try:
                listener()
            except Exception as e:
                self._logger.exception("Registry listener failed", exc=e, event=event)

    # ── Inter-extension events ───────────────────────────────────

    def emit_event(self, name: str, data: Any = None) -> None:
        """Publish an arbitrary event to handlers registered with ``on_event``."""
        handlers = self._event_handlers.get(name)
        if not handlers:
            return
        for handler in _deliverable(handlers):
            try:
                handler(data)
            except Exception as e:
                self._logger.exception("Event handler failed", exc=e, event=name)

    def on_event(self, name: str, handler: EventHandler) -> Unsubscribe:
        handlers = self._event_handlers.setdefault(name, [])
        handlers.append(handler)

        def unsubscribe() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe


def _deliverable(callbacks: list[Any]) -> Iterable[Any]:
    # Iterate a snapshot, skipping callbacks removed mid-delivery.
    for callback in list(callbacks):
        if callback in callbacks:
            yield callback
