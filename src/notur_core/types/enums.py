"""Shared enumerations for Notur."""

from enum import Enum


class LogLevel(str, Enum):
    """Log verbosity level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Log output format."""

    COLORED = "colored"
    JSON = "json"


class LifecyclePhase(str, Enum):
    """Extension activation phase."""

    REGISTER = "register"
    BOOT = "boot"


class RouteGroup(str, Enum):
    """Server route group an extension route file is mounted into."""

    API_CLIENT = "api-client"
    ADMIN = "admin"
    WEB = "web"


class RouteArea(str, Enum):
    """Navigable client area that extension pages can be mounted in."""

    SERVER = "server"
    DASHBOARD = "dashboard"
    ACCOUNT = "account"


class SlotType(str, Enum):
    """How the host mounts a slot."""

    PORTAL = "portal"
    NAV = "nav"
    ROUTE = "route"


class HealthState(str, Enum):
    """Normalized extension health check status."""

    OK = "ok"
    WARNING = "warning"
    ERROR = "error"
    UNKNOWN = "unknown"
