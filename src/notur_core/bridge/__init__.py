"""Notur bridge - client-side plugin registry and composition engine.

Extension bundles register slot components, area routes and theme overrides
with a PluginRegistry; renderers and the theme resolver recompute their views
whenever the registry signals a change.
"""

from .devtools import DevTools
from .events import ScopedEventChannel, create_scoped_event_channel
from .registry import (
    DEFAULT_SLOT_ORDER,
    ExtensionRegistration,
    PluginRegistry,
    RouteRegistration,
    SlotRegistration,
    ThemeRegistration,
)
from .renderer import (
    FALLBACK_TEMPLATE,
    RenderContext,
    RenderedEntry,
    RouteRenderer,
    SlotRenderer,
    matches_permission,
    render_isolated,
    should_render,
)
from .runtime import BRIDGE_VERSION, BridgeRuntime
from .slots import SLOT_DEFINITION_MAP, SLOT_DEFINITIONS, SLOT_IDS, SlotDefinition, is_known_slot
from .state import ExtensionStateStore
from .theme import DEFAULT_CSS_VARIABLES, HOST_VARIABLE_MAP, ThemeResolver, extract_host_variables

__all__ = [
    # Registry
    "PluginRegistry",
    "SlotRegistration",
    "RouteRegistration",
    "ThemeRegistration",
    "ExtensionRegistration",
    "DEFAULT_SLOT_ORDER",
    # Slots
    "SlotDefinition",
    "SLOT_DEFINITIONS",
    "SLOT_DEFINITION_MAP",
    "SLOT_IDS",
    "is_known_slot",
    # Rendering
    "RenderContext",
    "RenderedEntry",
    "SlotRenderer",
    "RouteRenderer",
    "FALLBACK_TEMPLATE",
    "should_render",
    "matches_permission",
    "render_isolated",
    # Theme
    "ThemeResolver",
    "DEFAULT_CSS_VARIABLES",
    "HOST_VARIABLE_MAP",
    "extract_host_variables",
    # Runtime surface
    "BridgeRuntime",
    "BRIDGE_VERSION",
    "ScopedEventChannel",
    "create_scoped_event_channel",
    "ExtensionStateStore",
    "DevTools",
]
