"""Notur logging - structured, trace-aware component loggers."""

from .colors import COMPONENT_COLORS, LEVEL_COLORS, paint
from .logger import (
    ColoredLogFormatter,
    LogConfig,
    NoturLogger,
    StructuredLogFormatter,
    configure_logging,
    get_logger,
    reset_loggers,
)

__all__ = [
    # Logger classes
    "NoturLogger",
    "LogConfig",
    "StructuredLogFormatter",
    "ColoredLogFormatter",
    "get_logger",
    "configure_logging",
    "reset_loggers",
    # Colors
    "LEVEL_COLORS",
    "COMPONENT_COLORS",
    "paint",
]
