"""Per-extension context handed to every feature."""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from notur_core.extensions.base import NoturExtension
    from notur_core.extensions.manager import ExtensionManager
    from notur_core.extensions.manifest import ExtensionManifest


@dataclass(frozen=True)
class ExtensionContext:
    """Immutable bundle built once per extension per activation pass.

    Attributes:
        id: Extension id (vendor/name)
        extension: Loaded extension instance
        manifest: Parsed manifest
        path: Extension root directory, None for in-memory manifests
        app: Host application (a FastAPI app, or None without an HTTP host)
        manager: Manager driving the activation
    """

    id: str
    extension: "NoturExtension"
    manifest: "ExtensionManifest"
    path: Path | None
    app: Any
    manager: "ExtensionManager"
