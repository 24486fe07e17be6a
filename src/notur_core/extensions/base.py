"""Notur extension base class.

Server-side extension code subclasses NoturExtension and is named by the
manifest ``entrypoint``. Extensions with no entrypoint get a plain
NoturExtension, which is enough for manifest-only extensions (routes,
schedules, theme variables and frontend slots are all declarative).
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

from .manifest import ExtensionManifest


class NoturExtension:
    """Base class for Notur extensions.

    Lifecycle:
    1. register - runs for every extension before any extension boots
    2. boot - runs after all extensions have registered

    Attributes:
        manifest: Parsed manifest of this extension
        config: Host-supplied settings for this extension
    """

    def __init__(self, manifest: ExtensionManifest, config: dict[str, Any] | None = None):
        """Initialize the extension.

        Args:
            manifest: Parsed manifest
            config: Host-supplied settings
        """
        self.manifest = manifest
        self.config = config or {}

    @property
    def id(self) -> str:
        return self.manifest.id

    @property
    def name(self) -> str:
        return self.manifest.name

    @property
    def version(self) -> str:
        return self.manifest.version

    @property
    def base_path(self) -> Path | None:
        return self.manifest.base_path

    def register(self) -> None:
        """Register bindings, services or configuration.

        Override to add custom registration logic.
        """

    def boot(self) -> None:
        """Boot after all extensions have been registered.

        Override to add custom boot logic.
        """

    def get_route_files(self) -> dict[str, str]:
        """Route group -> route module path, relative to the extension root.

        Defaults to what the manifest declares.
        """
        return self.manifest.route_files

    def get_middleware(self) -> dict[str, list[Callable[..., Any]]]:
        """Route group -> extra FastAPI dependencies for that group.

        They run after the host's namespace check and group guards, e.g.
        ``{"api-client": [verify_signature]}``.
        """
        return {}

    def get_event_listeners(self) -> dict[str, list[Callable[[dict[str, Any]], None]]]:
        """Host event name -> handlers called with the event payload.

        Subscribed right after register(); see HOST_EVENTS for the names.
        """
        return {}

    def provides_health_checks(self) -> bool:
        return (
            type(self).get_health_checks is not NoturExtension.get_health_checks
            or bool(self.manifest.health_checks)
        )

    def get_health_checks(self) -> list[dict[str, Any]] | dict[str, dict[str, Any]]:
        """Return health check results.

        Each entry carries ``id``, ``status`` (ok|warning|error|unknown) and
        optionally ``message``, ``details`` and ``checked_at``. The default
        reports every check declared under ``health.checks`` as unknown.
        """
        return [
            {"id": check.get("id"), "status": "unknown", "message": check.get("label")}
            for check in self.manifest.health_checks
        ]

    def get_frontend_slots(self) -> dict[str, dict[str, Any]]:
        return self.manifest.frontend_slots

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id!r}, version={self.version!r})"
