"""Notur extensions - manifests, lifecycle and permissions.

Submodules are imported leaves first; the manager comes last because it
depends on notur_core.features, which in turn uses the modules above it.
"""

from .capabilities import (
    Capabilities,
    CapabilitiesProvider,
    CapabilityMatcher,
    DefaultCapabilitiesProvider,
    matches,
)
from .manifest import ExtensionManifest
from .base import NoturExtension
from .loader import load_extension, load_extension_class
from .dependencies import DependencyResolver
from .health import normalize_health_results
from .permissions import PermissionBroker, scope_permission
from .store import (
    ExtensionStore,
    InMemoryExtensionStore,
    InstalledExtension,
    JSONExtensionStore,
)
from .manager import ActivationReport, ExtensionManager

__all__ = [
    # Capabilities
    "matches",
    "CapabilityMatcher",
    "Capabilities",
    "CapabilitiesProvider",
    "DefaultCapabilitiesProvider",
    # Manifest and extension classes
    "ExtensionManifest",
    "NoturExtension",
    "load_extension",
    "load_extension_class",
    # Ordering, health, permissions
    "DependencyResolver",
    "normalize_health_results",
    "PermissionBroker",
    "scope_permission",
    # Store
    "ExtensionStore",
    "InMemoryExtensionStore",
    "JSONExtensionStore",
    "InstalledExtension",
    # Manager
    "ExtensionManager",
    "ActivationReport",
]
