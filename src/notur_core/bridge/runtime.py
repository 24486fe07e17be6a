"""The bridge runtime: everything extension bundles reach through one object."""

from collections.abc import Callable, Mapping
from typing import Any

from notur_core.logging import get_logger

from .devtools import DevTools
from .events import ScopedEventChannel
from .registry import PluginRegistry, RouteRegistration, ThemeRegistration
from .renderer import RouteRenderer, SlotRenderer
from .slots import SLOT_DEFINITIONS, SLOT_IDS, SlotDefinition
from .state import ExtensionStateStore
from .theme import ThemeResolver

BRIDGE_VERSION = "1.0.0"


class BridgeRuntime:
    """Owns one PluginRegistry and the views built on it.

    Typical use:
        runtime = BridgeRuntime()
        runtime.bootstrap(manager.frontend_payload())
        runtime.registry.register_extension(...)
        entries = runtime.slot_renderer("dashboard.widgets").render(context)
    """

    def __init__(
        self,
        version: str = BRIDGE_VERSION,
        registry: PluginRegistry | None = None,
        host_sampler: Callable[[], Mapping[str, str]] | None = None,
        theme_defaults: Mapping[str, str] | None = None,
        host_variable_map: Mapping[str, str] | None = None,
    ):
        self.version = version
        self.registry = registry or PluginRegistry()
        self.extensions: list[dict[str, Any]] = []
        self.slots: dict[str, dict[str, Any]] = {}
        self.theme = ThemeResolver(
            registry=self.registry,
            host_sampler=host_sampler,
            variable_map=host_variable_map,
            defaults=theme_defaults,
        )
        self.debug = DevTools(self.registry)
        self._slot_renderers: dict[str, SlotRenderer] = {}
        self._route_renderers: dict[str, RouteRenderer] = {}
        self._stores: dict[str, ExtensionStateStore] = {}
        self._logger = get_logger("bridge")

    @property
    def slot_ids(self) -> tuple[str, ...]:
        return SLOT_IDS

    @property
    def slot_definitions(self) -> tuple[SlotDefinition, ...]:
        return SLOT_DEFINITIONS

    @property
    def routes(self) -> list[RouteRegistration]:
        routes: list[RouteRegistration] = []
        for area in sorted(self.registry.route_counts()):
            routes.extend(self.registry.get_routes(area))
        return routes

    def bootstrap(self, payload: Mapping[str, Any]) -> None:
        """Consume the host's frontend payload.

        Records the enabled extensions and their slot bindings, registers
        each extension's manifest theme variables at priority 0, then runs
        the deferred host theme sampling pass.
        """
        self.extensions = [dict(ext) for ext in payload.get("extensions", [])]
        self.slots = {ext_id: dict(slots) for ext_id, slots in payload.get("slots", {}).items()}

        for ext_id, variables in payload.get("theme", {}).items():
            if variables:
                self.registry.register_theme(
                    ThemeRegistration(variables=dict(variables), extension_id=ext_id)
                )

        if not self.theme.sampled:
            self.theme.sample_host()

        self._logger.info(
            "Bridge bootstrapped",
            version=self.version,
            extension_count=len(self.extensions),
        )

    def slot_renderer(self, slot_id: str, **kwargs: Any) -> SlotRenderer:
        """Mounted renderer for ``slot_id``; one per slot."""
        renderer = self._slot_renderers.get(slot_id)
        if renderer is None:
            renderer = SlotRenderer(self.registry, slot_id, **kwargs)
            renderer.mount()
            self._slot_renderers[slot_id] = renderer
        return renderer

    def route_renderer(self, area: str, base_path: str = "") -> RouteRenderer:
        key = f"{area}:{base_path}"
        renderer = self._route_renderers.get(key)
        if renderer is None:
            renderer = RouteRenderer(self.registry, area, base_path)
            self._route_renderers[key] = renderer
        return renderer

    def state_store(
        self, extension_id: str, initial: Mapping[str, Any] | None = None
    ) -> ExtensionStateStore:
        """Shared store for ``extension_id``; ``initial`` only seeds a new store."""
        store = self._stores.get(extension_id)
        if store is None:
            store = ExtensionStateStore(initial)
            self._stores[extension_id] = store
        return store

    def events(self, extension_id: str) -> ScopedEventChannel:
        return ScopedEventChannel(self.registry, extension_id)

    def emit_event(self, name: str, data: Any = None) -> None:
        self.registry.emit_event(name, data)

    def on_event(self, name: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        return self.registry.on_event(name, callback)

    def unregister_extension(self, extension_id: str) -> None:
        self.registry.unregister_extension(extension_id)
        self._stores.pop(extension_id, None)

    def close(self) -> None:
        """Detach every renderer and the theme resolver from the registry."""
        for slot_renderer in self._slot_renderers.values():
            slot_renderer.unmount()
        for route_renderer in self._route_renderers.values():
            route_renderer.close()
        self.theme.close()
        self._slot_renderers.clear()
        self._route_renderers.clear()
