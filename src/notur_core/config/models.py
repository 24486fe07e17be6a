"""Notur configuration data models."""

from dataclasses import dataclass, field

from notur_core.types import LogFormat, LogLevel


@dataclass
class ServerConfig:
    """HTTP server configuration."""

    host: str = "0.0.0.0"
    port: int = 8080
    prefix: str = "/api/v1"
    title: str = "Notur Extension Host"
    version: str = "1.0.0"
    docs_enabled: bool = True
    cors_enabled: bool = True
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class ExtensionsConfig:
    """Where extensions live and where install state is kept."""

    directory: str = "./notur/extensions"
    state_file: str = "./notur/extensions.json"  # "" = in-memory store
    public_path: str = "/notur/extensions"  # URL prefix for frontend bundles


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    truncate_at: int = 200


@dataclass
class ThemeConfig:
    """Host theme configuration.

    Attributes:
        defaults: Overrides merged over the built-in default variable set
        host_variable_map: Host variable name -> Notur variable name
    """

    defaults: dict[str, str] = field(default_factory=dict)
    host_variable_map: dict[str, str] = field(default_factory=dict)


@dataclass
class FeaturesConfig:
    """Feature registry configuration."""

    disabled: list[str] = field(default_factory=list)  # feature names to leave out


@dataclass
class NoturConfig:
    """Root configuration object."""

    server: ServerConfig = field(default_factory=ServerConfig)
    extensions: ExtensionsConfig = field(default_factory=ExtensionsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    theme: ThemeConfig = field(default_factory=ThemeConfig)
    features: FeaturesConfig = field(default_factory=FeaturesConfig)
