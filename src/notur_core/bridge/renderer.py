"""Slot and route rendering with per-contribution failure isolation."""

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from notur_core.errors import NoturError, get_error_factory
from notur_core.logging import get_logger

from .registry import PluginRegistry, RouteRegistration, SlotRegistration

FALLBACK_TEMPLATE = '[Notur] Extension "{extension_id}" failed to render'

_SERVER_PATH = re.compile(r"/server/[a-f0-9-]+", re.IGNORECASE)
_AUTH_PREFIXES = ("/auth", "/login", "/register", "/password")

logger = get_logger("render")


@dataclass(frozen=True)
class RenderContext:
    """Where the user currently is, as seen by slot conditions.

    ``permissions`` is None when the host did not expose any, which makes
    every permission-gated contribution invisible.
    """

    path: str = ""
    area: str = "other"
    is_server: bool = False
    is_dashboard: bool = False
    is_account: bool = False
    is_admin: bool = False
    is_auth: bool = False
    permissions: frozenset[str] | None = None

    @classmethod
    def from_path(cls, path: str, permissions: Iterable[str] | None = None) -> "RenderContext":
        """Derive the area flags from a request path."""
        is_admin = path.startswith("/admin")
        is_server = bool(_SERVER_PATH.search(path))
        is_account = path.startswith("/account")
        is_auth = path.startswith(_AUTH_PREFIXES)
        is_dashboard = not (is_admin or is_server or is_account or is_auth)

        if is_admin:
            area = "admin"
        elif is_server:
            area = "server"
        elif is_account:
            area = "account"
        elif is_auth:
            area = "auth"
        else:
            area = "dashboard"

        return cls(
            path=path,
            area=area,
            is_server=is_server,
            is_dashboard=is_dashboard,
            is_account=is_account,
            is_admin=is_admin,
            is_auth=is_auth,
            permissions=frozenset(permissions) if permissions is not None else None,
        )


@dataclass
class RenderedEntry:
    """Output of one contribution, or its fallback if it raised."""

    extension_id: str
    output: Any
    error: NoturError | None = None
    props: dict[str, Any] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return self.error is not None


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def matches_permission(permissions: frozenset[str] | None, required: str | Iterable[str]) -> bool:
    """True if any required permission is held, or the user holds ``*``."""
    if not permissions:
        return False
    if "*" in permissions:
        return True
    return any(req in permissions for req in _as_list(required))


def _matches_regex(path: str, pattern: str | re.Pattern[str]) -> bool:
    try:
        return re.search(pattern, path) is not None
    except re.error:
        return False


def should_render(registration: SlotRegistration, context: RenderContext) -> bool:
    """Decide whether a slot contribution is visible in ``context``.

    Declarative ``when`` keys: area, areas, server, dashboard, account, admin,
    auth, path / pathStartsWith, pathIncludes, pathMatches and permission. A
    permission on the condition takes precedence over the registration's own.
    """
    condition = registration.when
    when: Mapping[str, Any] = {}

    if condition is False:
        return False

    if callable(condition):
        return bool(condition(context))

    if isinstance(condition, Mapping):
        when = condition

        if when.get("area") and when["area"] != context.area:
            return False

        areas = _as_list(when.get("areas"))
        if areas and context.area not in areas:
            return False

        flags = (
            ("server", context.is_server),
            ("dashboard", context.is_dashboard),
            ("account", context.is_account),
            ("admin", context.is_admin),
            ("auth", context.is_auth),
        )
        for key, actual in flags:
            expected = when.get(key)
            if isinstance(expected, bool) and expected != actual:
                return False

        starts = when.get("pathStartsWith")
        if starts is None:
            starts = when.get("path")
        starts_with = _as_list(starts)
        if starts_with and not any(context.path.startswith(v) for v in starts_with):
            return False

        includes = _as_list(when.get("pathIncludes"))
        if includes and not any(v in context.path for v in includes):
            return False

        pattern = when.get("pathMatches")
        if pattern and not _matches_regex(context.path, pattern):
            return False

    required = when.get("permission") or registration.permission
    if required:
        return matches_permission(context.permissions, required)
    return True


def render_isolated(
    extension_id: str,
    component: Callable[[dict[str, Any]], Any],
    props: dict[str, Any],
) -> RenderedEntry:
    """Invoke one component, replacing a raised exception with a fallback.

    The failure is logged and never propagates to the caller, so sibling
    contributions still render.
    """
    try:
        return RenderedEntry(extension_id=extension_id, output=component(props), props=props)
    except Exception as e:
        error = get_error_factory().from_exception(
            e, extension_id=extension_id, fallback_code="RENDER_FAILED"
        )
        logger.exception(
            "Extension component failed to render",
            exc=e,
            extension_id=extension_id,
            code=error.code,
        )
        return RenderedEntry(
            extension_id=extension_id,
            output=FALLBACK_TEMPLATE.format(extension_id=extension_id),
            error=error,
            props=props,
        )


class SlotRenderer:
    """Renders every visible contribution to one slot.

    The renderer follows ``slot:<id>`` events while mounted; each change
    re-renders against the last context and hands the entries to
    ``on_update``.
    """

    def __init__(
        self,
        registry: PluginRegistry,
        slot_id: str,
        component_props: Mapping[str, Any] | None = None,
        on_update: Callable[[list[RenderedEntry]], None] | None = None,
    ):
        self.registry = registry
        self.slot_id = slot_id
        self.component_props = dict(component_props or {})
        self.on_update = on_update
        self.context = RenderContext()
        self.entries: list[RenderedEntry] = []
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def mounted(self) -> bool:
        return self._unsubscribe is not None

    def mount(self, context: RenderContext | None = None) -> list[RenderedEntry]:
        if self._unsubscribe is None:
            self._unsubscribe = self.registry.on(f"slot:{self.slot_id}", self._on_change)
        return self.render(context)

    def unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def navigate(self, context: RenderContext) -> list[RenderedEntry]:
        """Re-render for a new location."""
        return self._rerender(context)

    def visible(self, context: RenderContext | None = None) -> list[SlotRegistration]:
        ctx = context or self.context
        return [r for r in self.registry.get_slot(self.slot_id) if should_render(r, ctx)]

    def render(self, context: RenderContext | None = None) -> list[RenderedEntry]:
        """Render visible contributions in slot order.

        Conditions are evaluated on every call, never cached.
        """
        if context is not None:
            self.context = context
        entries = []
        for registration in self.visible():
            props = {
                "extension_id": registration.extension_id,
                **self.component_props,
                **registration.props,
            }
            entries.append(render_isolated(registration.extension_id, registration.component, props))
        self.entries = entries
        return entries

    def _rerender(self, context: RenderContext | None = None) -> list[RenderedEntry]:
        entries = self.render(context)
        if self.on_update is not None:
            self.on_update(entries)
        return entries

    def _on_change(self) -> None:
        self._rerender()


class RouteRenderer:
    """Resolves the current path to an extension page within one area.

    Pages live under ``{base_path}/notur/{extension_id}{route.path}``.
    """

    def __init__(self, registry: PluginRegistry, area: str, base_path: str = ""):
        self.registry = registry
        self.area = area
        self.base_path = base_path.rstrip("/")
        self.routes = registry.get_routes(area)
        self._unsubscribers = [
            registry.on(f"route:{area}", self._refresh),
            registry.on("extension:registered", self._refresh),
            registry.on("extension:unregistered", self._refresh),
        ]

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _refresh(self) -> None:
        self.routes = self.registry.get_routes(self.area)

    def build_route_path(self, route: RouteRegistration) -> str:
        path = route.path if route.path.startswith("/") else f"/{route.path}"
        return f"{self.base_path}/notur/{route.extension_id}{path}"

    def match(self, current_path: str) -> RouteRegistration | None:
        """First route whose full path equals ``current_path`` or prefixes it."""
        for route in self.routes:
            full = self.build_route_path(route)
            if current_path == full or current_path.startswith(full + "/"):
                return route
        return None

    def render(
        self, current_path: str, props: Mapping[str, Any] | None = None
    ) -> RenderedEntry | None:
        route = self.match(current_path)
        if route is None:
            return None
        route_props = {"extension_id": route.extension_id, **(props or {})}
        return render_isolated(route.extension_id, route.component, route_props)

    def navigation(self) -> list[dict[str, Any]]:
        """Menu entries for the area, in registration order."""
        return [
            {
                "name": route.name,
                "path": self.build_route_path(route),
                "icon": route.icon,
                "extension_id": route.extension_id,
            }
            for route in self.routes
        ]
