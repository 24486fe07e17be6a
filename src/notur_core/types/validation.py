"""Declaration issues shared by the config loader, manifests and registries."""

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass
class ValidationIssue:
    """One problem found in a declaration.

    ``path`` locates it, e.g. ``backend.permissions[0]``,
    ``server.port`` or ``admin:/settings`` for a route.
    """

    path: str
    message: str
    severity: str = "error"  # "error" | "warning"

    @classmethod
    def warning(cls, path: str, message: str) -> "ValidationIssue":
        return cls(path=path, message=message, severity="warning")

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class ValidationResult:
    """Issues split by severity; invalid as soon as one error is present."""

    valid: bool = True
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.errors:
            self.valid = False

    @classmethod
    def from_issues(cls, issues: Iterable[ValidationIssue]) -> "ValidationResult":
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []
        for issue in issues:
            (errors if issue.is_error else warnings).append(issue)
        return cls(errors=errors, warnings=warnings)
