"""Namespaced inter-extension event channels."""

from collections.abc import Callable
from typing import Any

from .registry import PluginRegistry


class ScopedEventChannel:
    """Event channel whose names are prefixed with ``ext:<extension_id>:``.

    Scoping keeps two extensions that both emit ``refresh`` from hearing each
    other by accident. Listening to another extension's channel is allowed:
    build a channel for that extension id.
    """

    def __init__(self, registry: PluginRegistry, extension_id: str):
        self.registry = registry
        self.extension_id = extension_id

    def event_name(self, name: str) -> str:
        return f"ext:{self.extension_id}:{name}"

    def emit(self, name: str, data: Any = None) -> None:
        self.registry.emit_event(self.event_name(name), data)

    def on(self, name: str, callback: Callable[[Any], None]) -> Callable[[], None]:
        return self.registry.on_event(self.event_name(name), callback)


def create_scoped_event_channel(registry: PluginRegistry, extension_id: str) -> ScopedEventChannel:
    return ScopedEventChannel(registry, extension_id)
