"""Registry introspection for debugging a running bridge."""

from collections.abc import Callable
from typing import Any

from notur_core.logging import get_logger
from notur_core.types import RouteArea

from .registry import PluginRegistry
from .slots import SLOT_IDS

WATCHED_EVENTS = (
    "change",
    "extension:registered",
    "extension:unregistered",
    "theme:changed",
)


def _component_name(component: Any) -> str:
    return getattr(component, "__qualname__", None) or getattr(component, "__name__", "Anonymous")


class DevTools:
    """Summaries of registry contents, logged through the ``devtools`` logger."""

    def __init__(self, registry: PluginRegistry):
        self.registry = registry
        self._logger = get_logger("devtools")

    def extensions(self) -> list[dict[str, Any]]:
        return [
            {
                "id": ext.id,
                "version": ext.version,
                "slots": len(ext.slots),
                "routes": len(ext.routes),
            }
            for ext in self.registry.get_extensions()
        ]

    def slots(self) -> dict[str, list[dict[str, Any]]]:
        result: dict[str, list[dict[str, Any]]] = {}
        for slot_id in SLOT_IDS:
            registrations = self.registry.get_slot(slot_id)
            if registrations:
                result[slot_id] = [
                    {
                        "order": r.order,
                        "extension_id": r.extension_id,
                        "component": _component_name(r.component),
                    }
                    for r in registrations
                ]
        return result

    def routes(self) -> dict[str, list[dict[str, Any]]]:
        result: dict[str, list[dict[str, Any]]] = {}
        for area in RouteArea:
            routes = self.registry.get_routes(area.value)
            if routes:
                result[area.value] = [
                    {"path": r.path, "name": r.name, "extension_id": r.extension_id}
                    for r in routes
                ]
        return result

    def theme(self) -> dict[str, str]:
        return self.registry.get_theme_overrides()

    def summary(self) -> dict[str, Any]:
        """Collect and log everything the registry holds."""
        data = {
            "extensions": self.extensions(),
            "slots": self.slots(),
            "routes": self.routes(),
            "theme": self.theme(),
        }
        self._logger.info(
            "Registry summary",
            extension_count=len(data["extensions"]),
            slots=data["slots"],
            routes=data["routes"],
            theme=data["theme"],
        )
        return data

    def __call__(self) -> dict[str, Any]:
        return self.summary()

    def watch_events(self) -> Callable[[], None]:
        """Log every registry lifecycle event until the returned function is called."""
        unsubscribers = [
            self.registry.on(event, lambda event=event: self._logger.debug("Registry event", event=event))
            for event in WATCHED_EVENTS
        ]
        self._logger.info("Event logging enabled")

        def stop() -> None:
            for unsubscribe in unsubscribers:
                unsubscribe()
            self._logger.info("Event logging disabled")

        return stop
