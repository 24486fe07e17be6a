"""Routes feature: mounts extension route files under namespaced prefixes.

A route file is a Python module exposing a module-level FastAPI ``router``.
Each route group gets a fixed prefix and middleware set; the host enforces
the ``client-api`` and ``admin`` entries as request guards and extensions
may append their own dependencies per group through ``get_middleware()``:

    api-client -> /api/client/notur/<vendor>/<name>
    admin      -> /admin/notur/<vendor>/<name>
    web        -> /notur/<vendor>/<name>
"""

import importlib.util
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends

from notur_core.errors import create_error
from notur_core.features.base import ExtensionFeature, FeatureKind
from notur_core.features.context import ExtensionContext
from notur_core.logging import get_logger
from notur_core.types import RouteGroup

ROUTE_PREFIXES: dict[str, str] = {
    RouteGroup.API_CLIENT.value: "api/client/notur/{id}",
    RouteGroup.ADMIN.value: "admin/notur/{id}",
    RouteGroup.WEB.value: "notur/{id}",
}

ROUTE_MIDDLEWARE: dict[str, tuple[str, ...]] = {
    RouteGroup.API_CLIENT.value: ("api", "client-api", "throttle:api.client"),
    RouteGroup.ADMIN.value: ("web", "admin"),
    RouteGroup.WEB.value: ("web",),
}

logger = get_logger("feature")


def route_prefix(group: str, extension_id: str) -> str:
    """URL prefix for a route group; unknown groups fall back to the web prefix."""
    template = ROUTE_PREFIXES.get(group, ROUTE_PREFIXES[RouteGroup.WEB.value])
    return template.format(id=extension_id)


def route_middleware(group: str) -> tuple[str, ...]:
    return ROUTE_MIDDLEWARE.get(group, ROUTE_MIDDLEWARE[RouteGroup.WEB.value])


@dataclass(frozen=True)
class MountedRouteGroup:
    """Record of one route file mounted for an extension."""

    extension_id: str
    group: str
    prefix: str
    middleware: tuple[str, ...]
    file: str
    route_count: int


class RoutesFeature(ExtensionFeature):
    """Mounts route files during the register phase.

    Args:
        group_dependencies: Optional factory mapping a route group name to
            the FastAPI dependencies applied to that group. Defaults to the
            extension namespace check plus the guards named in the group's
            middleware set. Extension middleware is appended either way.
    """

    name = "routes"
    kind = FeatureKind.ROUTES
    capability_id = "routes"
    capability_version = 1
    enabled_by_default = True

    def __init__(self, group_dependencies: Callable[[str], list[Any]] | None = None):
        self._group_dependencies = group_dependencies

    def supports(self, context: ExtensionContext) -> bool:
        return bool(context.extension.get_route_files())

    def register(self, context: ExtensionContext) -> None:
        if context.path is None:
            logger.debug("Extension has no base path, skipping route files", extension_id=context.id)
            return

        for group, file in context.extension.get_route_files().items():
            if not isinstance(file, str) or not file:
                continue

            file_path = context.path / file.lstrip("/")
            if not file_path.is_file():
                logger.warning("Route file not found", extension_id=context.id, file=str(file_path))
                continue

            router = self._load_router(context.id, group, file_path)
            prefix = route_prefix(group, context.id)
            extra = list(context.extension.get_middleware().get(group, ()))

            if context.app is not None:
                context.app.include_router(
                    router,
                    prefix="/" + prefix,
                    dependencies=self._dependencies_for(group) + [Depends(dep) for dep in extra],
                )

            context.manager.register_route_group(
                MountedRouteGroup(
                    extension_id=context.id,
                    group=group,
                    prefix=prefix,
                    middleware=route_middleware(group)
                    + tuple(getattr(dep, "__name__", repr(dep)) for dep in extra),
                    file=file,
                    route_count=len(router.routes),
                )
            )

    def _dependencies_for(self, group: str) -> list[Any]:
        if self._group_dependencies is not None:
            return self._group_dependencies(group)

        from notur_core.api.dependencies import GROUP_GUARDS, extension_namespace

        guards = [GROUP_GUARDS[name] for name in route_middleware(group) if name in GROUP_GUARDS]
        return [Depends(extension_namespace)] + [Depends(guard) for guard in guards]

    def _load_router(self, extension_id: str, group: str, file_path: Path) -> APIRouter:
        module_name = "notur_routes_{}_{}".format(
            extension_id.replace("/", "_").replace("-", "_"),
            group.replace("-", "_"),
        )
        spec = importlib.util.spec_from_file_location(module_name, file_path)
        if not spec or not spec.loader:
            raise create_error("ENTRYPOINT_INVALID", entrypoint=str(file_path))

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)

        router = getattr(module, "router", None)
        if not isinstance(router, APIRouter):
            raise create_error(
                "ENTRYPOINT_INVALID",
                entrypoint=str(file_path),
                detail="Route files must define a module-level APIRouter named 'router'",
            )
        return router
