"""Permission broker: declaration tracking and permission scoping."""

from notur_core.logging import get_logger
from notur_core.types import ValidationIssue

SCOPE_PREFIX = "notur"
SCOPE_SEPARATOR = "."


def scope_permission(extension_id: str, permission: str) -> str:
    """Build the globally unique permission key ``notur.<extension_id>.<permission>``.

    This is the only place the scoped format is produced.
    """
    return f"{SCOPE_PREFIX}{SCOPE_SEPARATOR}{extension_id}{SCOPE_SEPARATOR}{permission}"


class PermissionBroker:
    """Tracks permissions declared by each extension.

    An extension may only guard routes with permissions it declared in its
    manifest; the broker answers that question and scopes declared names
    into the host permission namespace.
    """

    def __init__(self) -> None:
        self._permissions: dict[str, list[str]] = {}
        self._logger = get_logger("permissions")

    def register(self, extension_id: str, permissions: list[str]) -> list[ValidationIssue]:
        """Record the permissions declared by an extension.

        Empty names and names that already look scoped are kept but reported.

        Args:
            extension_id: Owning extension
            permissions: Declared permission names

        Returns:
            Declaration warnings, one per suspicious name
        """
        warnings: list[ValidationIssue] = []
        for index, permission in enumerate(permissions):
            if not permission or permission.startswith(SCOPE_PREFIX + SCOPE_SEPARATOR):
                issue = ValidationIssue.warning(
                    f"backend.permissions[{index}]",
                    f"Permission '{permission}' of '{extension_id}' must be a non-empty "
                    f"name without the '{SCOPE_PREFIX}{SCOPE_SEPARATOR}' prefix"
                )
                warnings.append(issue)
                self._logger.warning(issue.message, extension_id=extension_id)

        self._permissions[extension_id] = list(permissions)
        return warnings

    def unregister(self, extension_id: str) -> None:
        self._permissions.pop(extension_id, None)

    def extension_declares(self, extension_id: str, permission: str) -> bool:
        """True only if the extension declared exactly this permission string."""
        return permission in self._permissions.get(extension_id, [])

    def get_extension_permissions(self, extension_id: str) -> list[str]:
        return list(self._permissions.get(extension_id, []))

    def get_all_permissions(self) -> dict[str, list[str]]:
        return {ext_id: list(perms) for ext_id, perms in self._permissions.items()}

    def scope_permission(self, extension_id: str, permission: str) -> str:
        return scope_permission(extension_id, permission)

    def is_owned_by(self, extension_id: str, scoped_permission: str) -> bool:
        """Check if a scoped permission belongs to the given extension."""
        return scoped_permission.startswith(scope_permission(extension_id, ""))
