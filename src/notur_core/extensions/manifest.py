"""Extension manifest loading and access.

A manifest is the read-only declarative description of one extension,
read from ``extension.yaml`` (or ``extension.yml``) at the extension root::

    id: acme/analytics
    name: Analytics
    version: 1.2.0
    entrypoint: acme_analytics.extension:AnalyticsExtension
    capabilities:
      routes: "^1"
    backend:
      permissions: [view-reports]
      routes:
        api-client: src/routes/api_client.py
    frontend:
      bundle: dist/extension.js
      slots:
        dashboard.widgets: {component: AnalyticsWidget, order: 10}
"""

import re
from pathlib import Path
from typing import Any

import yaml

from notur_core.errors import create_error
from notur_core.types import RouteGroup, ValidationIssue

MANIFEST_FILENAMES = ("extension.yaml", "extension.yml")
ID_PATTERN = re.compile(r"^[a-z0-9\-]+/[a-z0-9\-]+$")
REQUIRED_FIELDS = ("id", "name", "version")

DEFAULT_ROUTE_FILES: dict[str, str] = {
    RouteGroup.API_CLIENT.value: "src/routes/api_client.py",
    RouteGroup.ADMIN.value: "src/routes/admin.py",
    RouteGroup.WEB.value: "src/routes/web.py",
}

DEFAULT_BUNDLES = (
    "resources/frontend/dist/extension.js",
    "resources/frontend/dist/bundle.js",
    "dist/extension.js",
    "dist/bundle.js",
)

DEFAULT_STYLES = (
    "resources/frontend/dist/extension.css",
    "resources/frontend/dist/bundle.css",
    "dist/extension.css",
    "dist/bundle.css",
)

_MISSING = object()


class ExtensionManifest:
    """Validated, read-only view over a parsed manifest.

    Args:
        data: Parsed manifest mapping
        path: File the manifest was read from, if any
        base_path: Extension root used to resolve convention files

    Raises:
        NoturError: MANIFEST_INVALID if required fields are missing or malformed
    """

    def __init__(
        self,
        data: dict[str, Any],
        path: Path | None = None,
        base_path: Path | None = None,
    ):
        self._path = path
        self._base_path = base_path if base_path is not None else (path.parent if path else None)
        self._data = data
        self.warnings: list[ValidationIssue] = []
        self._validate()

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_path: str | Path | None = None) -> "ExtensionManifest":
        """Build a manifest from an in-memory mapping."""
        return cls(data, base_path=Path(base_path) if base_path else None)

    @classmethod
    def from_file(cls, path: str | Path) -> "ExtensionManifest":
        """Parse a manifest file.

        Raises:
            NoturError: MANIFEST_NOT_FOUND or MANIFEST_INVALID
        """
        path = Path(path)
        if not path.is_file():
            raise create_error("MANIFEST_NOT_FOUND", path=str(path))

        try:
            with path.open() as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise create_error("MANIFEST_INVALID", detail=f"Invalid YAML in {path}: {e}") from e

        return cls(data, path=path)

    @classmethod
    def load(cls, extension_path: str | Path) -> "ExtensionManifest":
        """Find and parse the manifest inside an extension directory."""
        extension_path = Path(extension_path)
        for filename in MANIFEST_FILENAMES:
            candidate = extension_path / filename
            if candidate.is_file():
                return cls.from_file(candidate)
        raise create_error("MANIFEST_NOT_FOUND", path=str(extension_path))

    def _validate(self) -> None:
        where = str(self._path) if self._path else "<memory>"

        if not isinstance(self._data, dict):
            raise create_error(
                "MANIFEST_INVALID",
                detail=f"Extension manifest at '{where}' must be a mapping",
            )

        for name in REQUIRED_FIELDS:
            if not self._data.get(name):
                raise create_error(
                    "MANIFEST_INVALID",
                    detail=f"Extension manifest at '{where}' is missing required field: {name}",
                )

        if "entrypoint" in self._data:
            entrypoint = self._data["entrypoint"]
            if not isinstance(entrypoint, str) or not entrypoint:
                raise create_error(
                    "MANIFEST_INVALID",
                    detail=(
                        f"Extension manifest at '{where}' has invalid entrypoint "
                        "(must be non-empty string)"
                    ),
                )

        ext_id = self._data["id"]
        if not isinstance(ext_id, str) or not ID_PATTERN.match(ext_id):
            raise create_error(
                "MANIFEST_INVALID",
                detail=(
                    f"Invalid extension ID '{ext_id}': must be 'vendor/name' with "
                    "lowercase alphanumeric characters and hyphens"
                ),
            )

        capabilities = self._data.get("capabilities")
        if capabilities is not None and not isinstance(capabilities, dict):
            raise create_error(
                "MANIFEST_INVALID",
                detail=f"Extension manifest at '{where}' has a non-mapping capabilities block",
            )

        permissions = self.get("backend.permissions", [])
        if not isinstance(permissions, list):
            self.warnings.append(
                ValidationIssue.warning(
                    "backend.permissions", "backend.permissions must be a list"
                )
            )

        dependencies = self._data.get("dependencies")
        if dependencies is not None and not isinstance(dependencies, (str, list, dict)):
            self.warnings.append(
                ValidationIssue.warning(
                    "dependencies", "dependencies must be a list, a mapping or an extension id"
                )
            )

    # Identity

    @property
    def id(self) -> str:
        return self._data["id"]

    @property
    def name(self) -> str:
        return str(self._data["name"])

    @property
    def version(self) -> str:
        return str(self._data["version"])

    @property
    def description(self) -> str:
        return self._data.get("description") or ""

    @property
    def entrypoint(self) -> str:
        return self._data.get("entrypoint") or ""

    @property
    def authors(self) -> list[Any]:
        return self._data.get("authors") or []

    @property
    def license(self) -> str:
        return self._data.get("license") or ""

    @property
    def dependencies(self) -> list[str]:
        """Ids this extension needs booted first.

        A mapping contributes its keys and a bare string is a single id.
        Any other shape is reported at load time and ignored here.
        """
        deps = self._data.get("dependencies") or []
        if isinstance(deps, str):
            return [deps]
        if isinstance(deps, dict):
            return [str(dep) for dep in deps]
        if not isinstance(deps, list):
            return []
        return [str(dep) for dep in deps]

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def base_path(self) -> Path | None:
        return self._base_path

    # Capabilities

    @property
    def has_capabilities_declared(self) -> bool:
        """Whether the manifest has a ``capabilities`` key at all.

        An absent block means a legacy extension; an empty block means
        "no capabilities".
        """
        return "capabilities" in self._data

    @property
    def capabilities(self) -> dict[str, str] | None:
        if not self.has_capabilities_declared:
            return None
        return {str(k): str(v) for k, v in (self._data["capabilities"] or {}).items()}

    # Backend

    @property
    def permissions(self) -> list[str]:
        permissions = self.get("backend.permissions", [])
        if not isinstance(permissions, list):
            return []
        return [p for p in permissions if isinstance(p, str)]

    @property
    def route_files(self) -> dict[str, str]:
        """Route group -> file path relative to the extension root.

        Falls back to the convention files that exist under the base path.
        """
        routes = self.get("backend.routes")
        if isinstance(routes, dict) and routes:
            return {str(group): str(path) for group, path in routes.items()}

        if self._base_path is None:
            return {}

        return {
            group: relative
            for group, relative in DEFAULT_ROUTE_FILES.items()
            if (self._base_path / relative).is_file()
        }

    @property
    def health_checks(self) -> list[dict[str, Any]]:
        checks = self.get("health.checks", [])
        return [c for c in checks if isinstance(c, dict)] if isinstance(checks, list) else []

    @property
    def schedule_tasks(self) -> list[Any]:
        tasks = self.get("schedules.tasks", [])
        return tasks if isinstance(tasks, list) else []

    # Frontend

    @property
    def frontend_slots(self) -> dict[str, dict[str, Any]]:
        slots = self.get("frontend.slots", {})
        return slots if isinstance(slots, dict) else {}

    @property
    def frontend_bundle(self) -> str:
        return self._frontend_file("bundle", DEFAULT_BUNDLES)

    @property
    def frontend_styles(self) -> str:
        return self._frontend_file("styles", DEFAULT_STYLES)

    @property
    def theme_variables(self) -> dict[str, str]:
        variables = self.get("theme.css_variables", {})
        if not isinstance(variables, dict):
            return {}
        return {str(k): str(v) for k, v in variables.items()}

    def _frontend_file(self, key: str, defaults: tuple[str, ...]) -> str:
        declared = self.get(f"frontend.{key}")
        if isinstance(declared, str) and declared:
            return declared
        if self._base_path is None:
            return ""
        for relative in defaults:
            if (self._base_path / relative).is_file():
                return relative
        return ""

    # Raw access

    def get(self, key: str, default: Any = None) -> Any:
        """Dotted lookup into the raw manifest, e.g. ``get("backend.routes")``."""
        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, dict):
                return default
            current = current.get(part, _MISSING)
            if current is _MISSING:
                return default
        return current

    @property
    def raw(self) -> dict[str, Any]:
        return dict(self._data)

    def summary(self) -> dict[str, Any]:
        """Serializable summary exposed to the client bundle loader."""
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "capabilities": self.capabilities,
            "permissions": self.permissions,
        }

    def __repr__(self) -> str:
        return f"ExtensionManifest(id={self.id!r}, version={self.version!r})"
