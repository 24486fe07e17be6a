"""Notur Core - extension host for a fixed host application.

Server side: manifest loading, capability-gated feature activation,
two-phase lifecycle and permission scoping. Client side: the plugin
registry, slot and route rendering and the theme cascade.
"""

# extensions first: the feature registry imports from it
from notur_core import extensions  # noqa: F401
from notur_core.application import NoturApplication

__version__ = "1.0.0"
__all__ = ["__version__", "NoturApplication"]
