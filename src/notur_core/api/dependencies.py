"""Request dependencies for extension route groups.

``extension_namespace`` is attached to every route group the routes feature
mounts, followed by the GROUP_GUARDS named in that group's middleware set.
``require_permission`` is used by extension route handlers.
"""

import re
from collections.abc import Callable, Mapping
from typing import Any

from fastapi import Request

from notur_core.errors import create_error
from notur_core.extensions.permissions import scope_permission

NAMESPACE_PATTERN = re.compile(r"notur/([a-z0-9\-]+/[a-z0-9\-]+)")


def get_manager(request: Request) -> Any:
    return request.app.state.manager


def resolve_extension_id(path: str) -> str | None:
    """Extension id embedded in a ``notur/<vendor>/<name>`` path, if any."""
    match = NAMESPACE_PATTERN.search(path)
    return match.group(1) if match else None


def extension_namespace(request: Request) -> str | None:
    """Bind the request to the extension that owns its path.

    Raises:
        NoturError: EXTENSION_NOT_ENABLED if the extension is unknown or
            disabled
    """
    extension_id = resolve_extension_id(request.url.path)
    if extension_id is None:
        return None

    manager = get_manager(request)
    if not manager.is_enabled(extension_id):
        raise create_error("EXTENSION_NOT_ENABLED", extension_id=extension_id)

    request.state.notur_extension_id = extension_id
    return extension_id


def _user_attr(user: Any, name: str, default: Any = None) -> Any:
    if isinstance(user, Mapping):
        return user.get(name, default)
    return getattr(user, name, default)


def require_user(request: Request) -> Any:
    """Route-group guard: the host must have attached an authenticated user.

    Raises:
        NoturError: AUTH_REQUIRED
    """
    user = getattr(request.state, "user", None)
    if user is None:
        raise create_error("AUTH_REQUIRED", extension_id=resolve_extension_id(request.url.path))
    return user


def require_root_admin(request: Request) -> Any:
    """Route-group guard for admin routes: only root admins pass.

    Raises:
        NoturError: AUTH_REQUIRED or ADMIN_REQUIRED
    """
    user = require_user(request)
    if not _user_attr(user, "root_admin", False):
        raise create_error("ADMIN_REQUIRED", extension_id=resolve_extension_id(request.url.path))
    return user


# Middleware names from the route group sets that the host enforces itself.
GROUP_GUARDS: dict[str, Callable[[Request], Any]] = {
    "client-api": require_user,
    "admin": require_root_admin,
}


def check_permission(
    manager: Any,
    extension_id: str | None,
    permission: str,
    user: Any,
) -> str:
    """Authorize ``user`` for an extension-local permission.

    Returns:
        The scoped permission that was checked

    Raises:
        NoturError: EXTENSION_CONTEXT_MISSING, PERMISSION_NOT_DECLARED,
            AUTH_REQUIRED or PERMISSION_DENIED
    """
    if not extension_id:
        raise create_error("EXTENSION_CONTEXT_MISSING")

    if not manager.permissions.extension_declares(extension_id, permission):
        raise create_error(
            "PERMISSION_NOT_DECLARED", permission=permission, extension_id=extension_id
        )

    if user is None:
        raise create_error("AUTH_REQUIRED", extension_id=extension_id)

    scoped = scope_permission(extension_id, permission)
    if _user_attr(user, "root_admin", False):
        return scoped

    granted = set(_user_attr(user, "permissions", None) or ())
    if "*" in granted or scoped in granted:
        return scoped

    raise create_error("PERMISSION_DENIED", scoped_permission=scoped, extension_id=extension_id)


def require_permission(permission: str) -> Callable[[Request], str]:
    """Dependency factory guarding a route with an extension-local permission.

    Usage in an extension route file:
        @router.get("/stats", dependencies=[Depends(require_permission("stats.view"))])
    """

    def dependency(request: Request) -> str:
        extension_id = getattr(request.state, "notur_extension_id", None) or resolve_extension_id(
            request.url.path
        )
        user = getattr(request.state, "user", None)
        return check_permission(get_manager(request), extension_id, permission, user)

    return dependency
