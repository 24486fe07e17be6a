"""Error templates keyed by code."""

from typing import Any

from .errors import ErrorCategory, ErrorTemplate, NoturError


def render_template(template: str | None, context: dict[str, Any]) -> str | None:
    """Fill ``{placeholders}`` from ``context``.

    A template whose placeholders are not all available is returned as-is,
    so an error created without its context still reads sensibly.
    """
    if template is None:
        return None
    try:
        return template.format(**context)
    except (KeyError, IndexError):
        return template


class ErrorRegistry:
    """Registry of error templates; turns a code plus context into a NoturError."""

    def __init__(self) -> None:
        self._templates: dict[str, ErrorTemplate] = {}
        self._load_builtin_templates()

    def get_template(self, code: str) -> ErrorTemplate | None:
        return self._templates.get(code)

    def register(self, template: ErrorTemplate) -> None:
        """Add a host-specific code, or replace a built-in one."""
        self._templates[template.code] = template

    def list_codes(self) -> list[str]:
        return list(self._templates)

    def create(
        self,
        code: str,
        context: dict[str, Any] | None = None,
        cause: NoturError | None = None,
    ) -> NoturError:
        """Build the error for ``code``.

        ``extension_id``, ``feature`` and ``phase`` in the context locate the
        error; a ``detail`` entry replaces the template detail.

        Raises:
            ValueError: Unknown code
        """
        template = self._templates.get(code)
        if template is None:
            raise ValueError(f"Unknown error code: {code}")

        context = dict(context or {})
        detail = context.get("detail")

        return NoturError(
            code=template.code,
            category=template.category,
            message=render_template(template.message_template, context) or f"Error {code}",
            detail=(
                str(detail)
                if detail is not None
                else render_template(template.detail_template, context)
            ),
            suggestion=render_template(template.suggestion_template, context),
            http_status=template.default_http_status,
            extension_id=context.get("extension_id"),
            feature=context.get("feature"),
            phase=context.get("phase"),
            cause=cause,
        )

    def _load_builtin_templates(self) -> None:
        """Load hardcoded built-in templates."""
        # MANIFEST Errors
        self._templates["MANIFEST_NOT_FOUND"] = ErrorTemplate(
            code="MANIFEST_NOT_FOUND",
            category=ErrorCategory.MANIFEST,
            message_template="No extension manifest found in '{path}'",
            detail_template="Expected an extension.yaml or extension.yml file",
            suggestion_template="Add an extension.yaml to the extension root",
            default_http_status=404,
        )

        self._templates["MANIFEST_INVALID"] = ErrorTemplate(
            code="MANIFEST_INVALID",
            category=ErrorCategory.MANIFEST,
            message_template="Extension manifest is invalid",
            detail_template="The manifest could not be parsed or is missing required fields",
            suggestion_template="Check the manifest fields: id, name and version are required",
            default_http_status=422,
        )

        self._templates["ENTRYPOINT_INVALID"] = ErrorTemplate(
            code="ENTRYPOINT_INVALID",
            category=ErrorCategory.MANIFEST,
            message_template="Extension entrypoint '{entrypoint}' could not be loaded",
            detail_template="The entrypoint must name a NoturExtension subclass",
            suggestion_template="Use 'module.path:ClassName' or 'relative/file.py:ClassName'",
            default_http_status=422,
        )

        # LIFECYCLE Errors
        self._templates["EXTENSION_NOT_INSTALLED"] = ErrorTemplate(
            code="EXTENSION_NOT_INSTALLED",
            category=ErrorCategory.LIFECYCLE,
            message_template="Extension '{extension_id}' is not installed",
            detail_template="No installed extension has this id",
            suggestion_template="Install the extension before enabling or disabling it",
            default_http_status=404,
        )

        self._templates["EXTENSION_ALREADY_INSTALLED"] = ErrorTemplate(
            code="EXTENSION_ALREADY_INSTALLED",
            category=ErrorCategory.LIFECYCLE,
            message_template="Extension '{extension_id}' is already installed",
            detail_template="Extension ids are unique among installed extensions",
            suggestion_template="Uninstall the existing extension first",
            default_http_status=409,
        )

        self._templates["LIFECYCLE_FAILED"] = ErrorTemplate(
            code="LIFECYCLE_FAILED",
            category=ErrorCategory.LIFECYCLE,
            message_template="Extension '{extension_id}' failed during {phase}",
            detail_template="An exception was raised by extension code",
            suggestion_template="Check the extension logs for the traceback",
            default_http_status=500,
        )

        self._templates["DEPENDENCY_CYCLE"] = ErrorTemplate(
            code="DEPENDENCY_CYCLE",
            category=ErrorCategory.LIFECYCLE,
            message_template="Circular dependency detected involving extension: {extension_id}",
            detail_template="Extensions in a dependency cycle cannot be ordered",
            suggestion_template="Remove one of the dependencies in the cycle",
            default_http_status=500,
        )

        # PERMISSION Errors
        self._templates["EXTENSION_CONTEXT_MISSING"] = ErrorTemplate(
            code="EXTENSION_CONTEXT_MISSING",
            category=ErrorCategory.PERMISSION,
            message_template="Extension context not available",
            detail_template="The request path does not belong to an extension namespace",
            default_http_status=403,
        )

        self._templates["EXTENSION_NOT_ENABLED"] = ErrorTemplate(
            code="EXTENSION_NOT_ENABLED",
            category=ErrorCategory.PERMISSION,
            message_template="Extension '{extension_id}' is not enabled",
            default_http_status=404,
        )

        self._templates["PERMISSION_NOT_DECLARED"] = ErrorTemplate(
            code="PERMISSION_NOT_DECLARED",
            category=ErrorCategory.PERMISSION,
            message_template=(
                "Permission '{permission}' is not declared by extension '{extension_id}'"
            ),
            suggestion_template="Declare the permission under backend.permissions",
            default_http_status=403,
        )

        self._templates["AUTH_REQUIRED"] = ErrorTemplate(
            code="AUTH_REQUIRED",
            category=ErrorCategory.PERMISSION,
            message_template="Authentication required",
            default_http_status=403,
        )

        self._templates["ADMIN_REQUIRED"] = ErrorTemplate(
            code="ADMIN_REQUIRED",
            category=ErrorCategory.PERMISSION,
            message_template="Administrator access required",
            default_http_status=403,
        )

        self._templates["PERMISSION_DENIED"] = ErrorTemplate(
            code="PERMISSION_DENIED",
            category=ErrorCategory.PERMISSION,
            message_template="You do not have permission to perform this action",
            detail_template="Missing permission '{scoped_permission}'",
            default_http_status=403,
        )

        # REGISTRY Errors
        self._templates["DUPLICATE_ROUTE"] = ErrorTemplate(
            code="DUPLICATE_ROUTE",
            category=ErrorCategory.REGISTRY,
            message_template="Route '{path}' in area '{area}' is already registered",
            detail_template="The first matching registration is rendered",
            default_http_status=409,
        )

        # RENDER Errors
        self._templates["RENDER_FAILED"] = ErrorTemplate(
            code="RENDER_FAILED",
            category=ErrorCategory.RENDER,
            message_template="Extension '{extension_id}' failed to render",
            default_http_status=500,
        )

        # CONFIG Errors
        self._templates["CONFIG_INVALID"] = ErrorTemplate(
            code="CONFIG_INVALID",
            category=ErrorCategory.CONFIG,
            message_template="Invalid configuration",
            detail_template="The Notur configuration is invalid",
            suggestion_template="Check the configuration file and fix errors",
            default_http_status=500,
        )

        # SYSTEM Errors
        self._templates["INTERNAL_ERROR"] = ErrorTemplate(
            code="INTERNAL_ERROR",
            category=ErrorCategory.SYSTEM,
            message_template="Internal error",
            detail_template="An unexpected {error_type} was raised",
            default_http_status=500,
        )
