"""Notur error types.

Every failure the host reports, from a malformed manifest to a component
that raised while rendering, is a NoturError built from an ErrorTemplate.
"""

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Where in the host an error originates."""

    MANIFEST = "MANIFEST"  # declaration problems in extension.yaml
    LIFECYCLE = "LIFECYCLE"  # register/boot failures, install state
    PERMISSION = "PERMISSION"  # broker and route guard rejections
    REGISTRY = "REGISTRY"  # client registry declaration warnings
    RENDER = "RENDER"  # component failures inside a slot
    CONFIG = "CONFIG"
    SYSTEM = "SYSTEM"


# Fields that tie an error to a cell of the (extension, feature, phase) matrix.
LOCATION_FIELDS = ("extension_id", "feature", "phase")


@dataclass
class NoturError(Exception):
    """Structured error with its location in the activation matrix.

    Attributes:
        code: Registry code, e.g. ``EXTENSION_NOT_INSTALLED``
        category: Originating subsystem
        message: One-line summary
        detail: Extended explanation, often the wrapped exception's text
        suggestion: Actionable fix
        http_status: Status used when the error reaches the REST API
        extension_id: Extension the error belongs to
        feature: Feature that was running
        phase: ``register`` or ``boot``
        cause: Underlying NoturError, if any
    """

    code: str
    category: ErrorCategory
    message: str
    detail: str | None = None
    suggestion: str | None = None
    http_status: int = 500
    extension_id: str | None = None
    feature: str | None = None
    phase: str | None = None
    cause: "NoturError | None" = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        super().__init__(self.message)

    @property
    def location(self) -> dict[str, str]:
        """The set members of extension_id, feature and phase."""
        return {
            name: value for name in LOCATION_FIELDS if (value := getattr(self, name)) is not None
        }

    def to_dict(self) -> dict[str, Any]:
        """API representation; ``http_status`` is carried by the response instead."""
        data: dict[str, Any] = {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "detail": self.detail,
            "suggestion": self.suggestion,
        }
        data.update({name: getattr(self, name) for name in LOCATION_FIELDS})
        data["timestamp"] = self.timestamp.isoformat()
        data["cause"] = self.cause.to_dict() if self.cause else None
        return data

    def with_context(
        self,
        extension_id: str | None = None,
        feature: str | None = None,
        phase: str | None = None,
    ) -> "NoturError":
        """Copy with location fields filled in; fields already set are kept."""
        given = {"extension_id": extension_id, "feature": feature, "phase": phase}
        return dataclasses.replace(
            self,
            **{name: getattr(self, name) or value for name, value in given.items()},
        )


@dataclass
class ErrorTemplate:
    """Blueprint for one error code.

    Templates use ``str.format`` placeholders filled from the creation
    context, e.g. ``"Extension '{extension_id}' is not installed"``.
    """

    code: str
    category: ErrorCategory
    message_template: str
    detail_template: str | None = None
    suggestion_template: str | None = None
    default_http_status: int = 500
