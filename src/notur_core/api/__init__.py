"""Notur REST API module."""

from notur_core.api.app import create_app
from notur_core.api.dependencies import (
    check_permission,
    extension_namespace,
    require_permission,
    resolve_extension_id,
)

__all__ = [
    "create_app",
    "extension_namespace",
    "require_permission",
    "check_permission",
    "resolve_extension_id",
]
