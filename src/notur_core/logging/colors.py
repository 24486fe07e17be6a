"""Terminal palette for the colored log format.

Component tags are colored by the host subsystem that logged them, so a
lifecycle failure and a render failure are told apart at a glance.
"""

import logging

RESET = "\033[0m"

# Levels
DEBUG_GREY = "\033[38;5;245m"
INFO_CYAN = "\033[38;5;51m"
WARN_YELLOW = "\033[38;5;226m"
ERROR_RED = "\033[38;5;196m"

# Subsystems
LIFECYCLE_MAGENTA = "\033[38;5;201m"
FEATURE_BLUE = "\033[38;5;75m"
REGISTRY_GREEN = "\033[38;5;82m"
RENDER_ORANGE = "\033[38;5;208m"
CONTEXT_BLUE = "\033[38;5;153m"

LEVEL_COLORS: dict[int, str] = {
    logging.DEBUG: DEBUG_GREY,
    logging.INFO: INFO_CYAN,
    logging.WARNING: WARN_YELLOW,
    logging.ERROR: ERROR_RED,
    logging.CRITICAL: ERROR_RED,
}

COMPONENT_COLORS: dict[str, str] = {
    "lifecycle": LIFECYCLE_MAGENTA,
    "feature": FEATURE_BLUE,
    "permissions": FEATURE_BLUE,
    "registry": REGISTRY_GREEN,
    "bridge": REGISTRY_GREEN,
    "theme": REGISTRY_GREEN,
    "render": RENDER_ORANGE,
    "api": CONTEXT_BLUE,
    "config": CONTEXT_BLUE,
    "devtools": RENDER_ORANGE,
}


def paint(text: str, color: str | None) -> str:
    """Wrap ``text`` in ``color``; no color leaves it untouched."""
    if not color:
        return text
    return f"{color}{text}{RESET}"


__all__ = [
    "RESET",
    "LEVEL_COLORS",
    "COMPONENT_COLORS",
    "CONTEXT_BLUE",
    "paint",
]
