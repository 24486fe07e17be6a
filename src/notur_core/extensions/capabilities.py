"""Capability negotiation for Notur.

Extensions opt into a capability's major revision by declaring a
constraint string in their manifest::

    capabilities:
      routes: "^1"
      health: "1"

Also provides the host capability report served by
GET /api/v1/capabilities.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Protocol

_CONSTRAINT_RE = re.compile(r"^(?:\^|~|>=)?\s*(\d+)(?:\.\d+)?$")


def matches(constraint: Any, version: int) -> bool:
    """Check a declared constraint against a capability version.

    Accepts ``N``, ``N.M`` and both forms prefixed with ``^``, ``~`` or
    ``>=``. The leading integer must equal ``version``; a major of 0 never
    matches. Never raises.

    The whole string must parse: full semver (``1.0.0``) and wildcards
    (``^1.x``) are rejected rather than matched on their first digit run,
    so an unsupported constraint disables the feature instead of enabling
    it by accident.

    Args:
        constraint: Declared constraint string
        version: Capability version the feature implements

    Returns:
        True if the constraint selects this version
    """
    if not isinstance(constraint, str) or isinstance(version, bool):
        return False

    match = _CONSTRAINT_RE.match(constraint.strip())
    if match is None:
        return False

    major = int(match.group(1))
    return major > 0 and major == version


class CapabilityMatcher:
    """Namespace wrapper so callers can inject an alternative matcher."""

    @staticmethod
    def matches(constraint: Any, version: int) -> bool:
        return matches(constraint, version)


@dataclass
class Capabilities:
    """
    Host capabilities response.

    Returned by GET /api/v1/capabilities endpoint.
    """

    version: str
    features: dict[str, int | None] = field(default_factory=dict)  # id -> version
    slots: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        return {
            "version": self.version,
            "features": self.features,
            "slots": self.slots,
        }


class CapabilitiesProvider(Protocol):
    """Anything able to describe what the host offers to extensions."""

    def get_capabilities(self) -> Capabilities:
        """Return host capabilities."""
        ...


class DefaultCapabilitiesProvider:
    """
    Describes the capabilities of a feature registry.

    Features without a capability id are always on and are reported with
    a ``None`` version.
    """

    def __init__(self, feature_registry: Any, version: str = "1.0.0") -> None:
        self._features = feature_registry
        self._version = version

    def get_capabilities(self) -> Capabilities:
        from notur_core.bridge.slots import SLOT_IDS

        features: dict[str, int | None] = {}
        for feature in self._features.all():
            key = feature.capability_id or feature.name
            features[key] = feature.capability_version if feature.capability_id else None

        return Capabilities(
            version=self._version,
            features=features,
            slots=list(SLOT_IDS),
        )
