"""Notur configuration loader.

Reads ``notur.yaml``, substitutes ``${VAR}`` references from the
environment, validates every section against the dataclass models and
builds a NoturConfig.
"""

import dataclasses
import os
import re
import typing
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from notur_core.errors import create_error
from notur_core.logging import get_logger
from notur_core.types import LogFormat, LogLevel, ValidationIssue, ValidationResult

from .models import NoturConfig

# ${VAR}, ${VAR:-default}, ${VAR:?message}
_ENV_REF = re.compile(r"\$\{(?P<name>[^}:]+)(?::(?P<op>[?-])(?P<operand>[^}]*))?\}")

SECTION_TYPES: dict[str, Any] = {f.name: f.type for f in dataclasses.fields(NoturConfig)}


def resolve_env_vars(value: str) -> str:
    """Replace environment references in one string.

    ``${VAR}`` must be set, ``${VAR:-default}`` falls back to ``default``
    and ``${VAR:?message}`` fails with ``message``.

    Raises:
        NoturError: CONFIG_INVALID when a required variable is unset
    """

    def substitute(match: re.Match[str]) -> str:
        name = match.group("name")
        if name in os.environ:
            return os.environ[name]

        if match.group("op") == "-":
            return match.group("operand") or ""
        message = (match.group("op") == "?" and match.group("operand")) or (
            f"Required environment variable {name} not set"
        )
        raise create_error("CONFIG_INVALID", detail=message)

    return _ENV_REF.sub(substitute, value)


def substitute_env(data: Any) -> Any:
    """Apply resolve_env_vars to every string nested in ``data``."""
    if isinstance(data, str):
        return resolve_env_vars(data)
    if isinstance(data, dict):
        return {key: substitute_env(value) for key, value in data.items()}
    if isinstance(data, list):
        return [substitute_env(item) for item in data]
    return data


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; nested mappings merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        merged[key] = (
            deep_merge(current, value)
            if isinstance(current, dict) and isinstance(value, dict)
            else value
        )
    return merged


def _build(target: Any, value: Any) -> Any:
    """Coerce raw YAML data into ``target`` (dataclass, enum, list or dict hint)."""
    if value is None:
        return None

    origin = typing.get_origin(target)
    args = typing.get_args(target)

    if origin is list and isinstance(value, list):
        return [_build(args[0], item) for item in value] if args else value
    if origin is dict and isinstance(value, dict):
        return {k: _build(args[1], v) for k, v in value.items()} if len(args) == 2 else value
    if dataclasses.is_dataclass(target) and isinstance(value, dict):
        hints = typing.get_type_hints(target)
        return target(
            **{
                f.name: _build(hints[f.name], value[f.name])
                for f in dataclasses.fields(target)
                if f.name in value
            }
        )
    if isinstance(target, type) and issubclass(target, Enum) and isinstance(value, str):
        return target(value)
    return value


class ConfigLoader:
    """Load and validate Notur configuration.

    Without an explicit path the loader looks at ``NOTUR_CONFIG_PATH``,
    then ``./notur.yaml``, then ``~/.notur/config.yaml``.
    """

    def __init__(self) -> None:
        self._config: NoturConfig | None = None
        self._config_path: Path | None = None
        self._logger = get_logger("config")
        self._change_callbacks: list[Callable[[NoturConfig], None]] = []

    @property
    def config_path(self) -> Path | None:
        return self._config_path

    def load(self, path: str | Path | None = None, use_defaults: bool = True) -> NoturConfig:
        """Load configuration from a YAML file.

        Args:
            path: Config file; searched for when omitted
            use_defaults: Fall back to the default configuration when the
                file does not exist

        Raises:
            NoturError: CONFIG_INVALID for a missing file (strict mode),
                unreadable YAML or failed validation
        """
        config_path = Path(path) if path is not None else self._find_config_file()

        if not config_path.exists():
            if not use_defaults:
                raise create_error(
                    "CONFIG_INVALID", detail=f"Configuration file not found: {config_path}"
                )
            self._logger.info("No config file found, using default configuration")
            return self.load_defaults()

        try:
            data = yaml.safe_load(config_path.read_text()) or {}
        except yaml.YAMLError as e:
            raise create_error("CONFIG_INVALID", detail=f"Invalid YAML in config file: {e}") from e

        if not isinstance(data, dict):
            raise create_error("CONFIG_INVALID", detail="Configuration file must contain a mapping")

        return self.load_from_dict(substitute_env(data), config_path)

    def load_defaults(self) -> NoturConfig:
        return self.load_from_dict({})

    def load_from_dict(self, data: dict[str, Any], config_path: Path | None = None) -> NoturConfig:
        """Validate ``data`` and build a NoturConfig from it.

        Warnings are logged; any error aborts the load.

        Raises:
            NoturError: CONFIG_INVALID
        """
        result = self.validate(data)
        for issue in result.warnings:
            self._logger.warning(issue.message, path=issue.path)
        if not result.valid:
            raise create_error(
                "CONFIG_INVALID",
                detail="Configuration validation failed:\n"
                + "\n".join(f"- {issue}" for issue in result.errors),
            )

        try:
            config = _build(NoturConfig, data)
        except (TypeError, ValueError) as e:
            raise create_error("CONFIG_INVALID", detail=f"Failed to parse configuration: {e}") from e

        self._config = config
        self._config_path = config_path
        self._logger.debug("Configuration loaded", path=str(config_path) if config_path else None)
        return config

    def validate(self, data: dict[str, Any]) -> ValidationResult:
        """Check raw config data without building it.

        Unknown sections and unknown keys inside a section are warnings.
        Wrong shapes and out-of-range values are errors.
        """
        issues: list[ValidationIssue] = []

        for key, section in data.items():
            section_type = SECTION_TYPES.get(key)
            if section_type is None:
                issues.append(ValidationIssue.warning(key, f"Unknown configuration key: {key}"))
                continue
            if not isinstance(section, dict):
                issues.append(ValidationIssue(key, f"{key} must be a dictionary"))
                continue
            known = {f.name for f in dataclasses.fields(section_type)}
            for name in section:
                if name not in known:
                    issues.append(
                        ValidationIssue.warning(f"{key}.{name}", f"Unknown key in {key}: {name}")
                    )

        issues.extend(_check_sections(data))
        return ValidationResult.from_issues(issues)

    def get(self) -> NoturConfig:
        """Current configuration.

        Raises:
            NoturError: CONFIG_INVALID if nothing has been loaded
        """
        if self._config is None:
            raise create_error("CONFIG_INVALID", detail="Configuration not loaded")
        return self._config

    def reload(self) -> NoturConfig:
        """Reload the last loaded file and notify change callbacks.

        Raises:
            NoturError: CONFIG_INVALID without a previous file load
        """
        if self._config_path is None:
            raise create_error("CONFIG_INVALID", detail="No config path set, cannot reload")

        config = self.load(self._config_path, use_defaults=False)
        for callback in list(self._change_callbacks):
            try:
                callback(config)
            except Exception as e:
                self._logger.exception("Config change callback failed", exc=e)
        return config

    def on_change(self, callback: Callable[[NoturConfig], None]) -> None:
        self._change_callbacks.append(callback)

    def _find_config_file(self) -> Path:
        env_path = os.environ.get("NOTUR_CONFIG_PATH")
        if env_path:
            return Path(env_path)

        candidates = [Path("notur.yaml"), Path.home() / ".notur" / "config.yaml"]
        for candidate in candidates:
            if candidate.exists():
                return candidate
        return candidates[0]


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name)
    return value if isinstance(value, dict) else {}


def _check_sections(data: dict[str, Any]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    server = _section(data, "server")
    if "port" in server:
        port = server["port"]
        if not isinstance(port, int) or isinstance(port, bool) or not 0 < port < 65536:
            issues.append(ValidationIssue("server.port", "port must be an integer in 1-65535"))

    logging_section = _section(data, "logging")
    for key, enum in (("level", LogLevel), ("format", LogFormat)):
        allowed = sorted(member.value for member in enum)
        if key in logging_section and logging_section[key] not in allowed:
            issues.append(ValidationIssue(f"logging.{key}", f"{key} must be one of {allowed}"))

    extensions = _section(data, "extensions")
    public_path = extensions.get("public_path")
    if public_path is not None and not str(public_path).startswith("/"):
        issues.append(
            ValidationIssue("extensions.public_path", "public_path must start with '/'")
        )

    theme = _section(data, "theme")
    for key in ("defaults", "host_variable_map"):
        if key not in theme:
            continue
        if not isinstance(theme[key], dict):
            issues.append(ValidationIssue(f"theme.{key}", f"{key} must be a mapping"))
            continue
        for name in theme[key]:
            if not str(name).startswith("--"):
                issues.append(
                    ValidationIssue.warning(
                        f"theme.{key}.{name}", f"{name} is not a CSS custom property"
                    )
                )

    features = _section(data, "features")
    if "disabled" in features and not isinstance(features["disabled"], list):
        issues.append(ValidationIssue("features.disabled", "disabled must be a list"))

    return issues


_default_loader: ConfigLoader | None = None


def get_config_loader() -> ConfigLoader:
    """Process-wide loader."""
    global _default_loader  # noqa: PLW0603
    if _default_loader is None:
        _default_loader = ConfigLoader()
    return _default_loader


def load_config(path: str | Path | None = None) -> NoturConfig:
    return get_config_loader().load(path)
