"""Notur logging - Structured logging with trace context.

Provides JSON (or colored) log lines with automatic OpenTelemetry trace
context injection, plus per-component logger caching.

Usage:
    from notur_core.logging import get_logger

    logger = get_logger("lifecycle")
    logger.info("Extension booted", extension_id="acme/analytics")
"""

import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, TextIO

from opentelemetry import trace

from notur_core.logging.colors import COMPONENT_COLORS, CONTEXT_BLUE, LEVEL_COLORS, paint
from notur_core.types import LogFormat, LogLevel

_RESERVED_ATTRS = frozenset(
    (
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "pathname", "process", "processName", "relativeCreated",
        "stack_info", "exc_info", "exc_text", "thread", "threadName",
        "message", "taskName",
    )
)

_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}


class StructuredLogFormatter(logging.Formatter):
    """JSON formatter with trace context injection.

    Formats log records as JSON with:
    - timestamp (ISO 8601)
    - level
    - component (logger name)
    - message
    - trace_id / span_id (if a span is recording)
    - Additional fields from extra
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            if ctx.is_valid:
                log_data["trace_id"] = format(ctx.trace_id, "032x")
                log_data["span_id"] = format(ctx.span_id, "016x")

        log_data.update(_extra_fields(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ColoredLogFormatter(logging.Formatter):
    """Human-readable formatter: ``[COMPONENT] message {context}``."""

    def __init__(self, truncate_at: int = 200):
        super().__init__()
        self.truncate_at = truncate_at

    def format(self, record: logging.LogRecord) -> str:
        component = record.name.rsplit(".", 1)[-1]
        tag = paint(f"[{component.upper()}]", COMPONENT_COLORS.get(component))
        output = f"{tag} {paint(record.getMessage(), LEVEL_COLORS.get(record.levelno))}"

        context = _extra_fields(record)
        if context:
            context_str = str(context)
            if len(context_str) > self.truncate_at:
                context_str = context_str[: self.truncate_at] + "..."
            output += " " + paint(context_str, CONTEXT_BLUE)

        if record.exc_info:
            output += "\n" + self.formatException(record.exc_info)

        return output


@dataclass
class LogConfig:
    """Logger configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    truncate_at: int = 200
    output: TextIO | None = None  # None = stderr


class NoturLogger:
    """Structured logger with trace context support.

    Wraps Python logging with:
    - Automatic trace context injection
    - Structured JSON or colored output
    - Keyword context fields instead of interpolated strings
    """

    def __init__(self, name: str, config: LogConfig | None = None):
        """Initialize logger.

        Args:
            name: Logger name (component name)
            config: Output configuration
        """
        self.config = config or LogConfig()
        self._logger = logging.getLogger(f"notur.{name}")
        self._configure_handler()

    def _configure_handler(self) -> None:
        self._logger.setLevel(_LEVELS.get(self.config.level, logging.INFO))
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)

        handler = logging.StreamHandler(self.config.output or sys.stderr)
        if self.config.format == LogFormat.JSON:
            handler.setFormatter(StructuredLogFormatter())
        else:
            handler.setFormatter(ColoredLogFormatter(self.config.truncate_at))
        self._logger.addHandler(handler)

    def configure(self, config: LogConfig) -> None:
        """Update configuration (for hot-reload)."""
        self.config = config
        self._configure_handler()

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        self._logger.log(level, message, extra=kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self._log(logging.ERROR, message, **kwargs)

    def exception(self, message: str, exc: BaseException | None = None, **kwargs: Any) -> None:
        """Log error with traceback.

        Args:
            message: Log message
            exc: Exception to attach; defaults to the one being handled
            **kwargs: Additional fields to include
        """
        exc_info: Any = (type(exc), exc, exc.__traceback__) if exc is not None else True
        self._logger.error(message, exc_info=exc_info, extra=kwargs)


# Logger cache
_loggers: dict[str, NoturLogger] = {}
_default_config: LogConfig | None = None


def get_logger(name: str) -> NoturLogger:
    """Get or create a structured logger.

    Args:
        name: Logger name (component name)

    Returns:
        NoturLogger instance
    """
    if name not in _loggers:
        _loggers[name] = NoturLogger(name, _default_config)
    return _loggers[name]


def configure_logging(config: LogConfig) -> None:
    """Apply a configuration to every cached and future logger."""
    global _default_config  # noqa: PLW0603
    _default_config = config
    for logger in _loggers.values():
        logger.configure(config)


def reset_loggers() -> None:
    """Reset logger cache (for testing)."""
    global _loggers, _default_config  # noqa: PLW0603
    _loggers = {}
    _default_config = None
