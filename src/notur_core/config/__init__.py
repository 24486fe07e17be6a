"""Notur configuration - config loading and models."""

from .loader import (
    ConfigLoader,
    deep_merge,
    get_config_loader,
    load_config,
    resolve_env_vars,
)
from .models import (
    ExtensionsConfig,
    FeaturesConfig,
    LoggingConfig,
    NoturConfig,
    ServerConfig,
    ThemeConfig,
)

__all__ = [
    # Loader
    "ConfigLoader",
    "deep_merge",
    "get_config_loader",
    "load_config",
    "resolve_env_vars",
    # Models
    "NoturConfig",
    "ServerConfig",
    "ExtensionsConfig",
    "LoggingConfig",
    "ThemeConfig",
    "FeaturesConfig",
]
