"""Notur Application - orchestrator for the extension host.

Wires configuration, logging, the installed-extension store, the feature
registry, the extension manager and the HTTP app together, then activates
every enabled extension.
"""

import sys
from collections.abc import Callable, Mapping
from typing import TextIO

from fastapi import FastAPI

from notur_core.api import create_app
from notur_core.bridge import DEFAULT_CSS_VARIABLES, BridgeRuntime
from notur_core.config import ConfigLoader, NoturConfig
from notur_core.extensions import (
    ActivationReport,
    ExtensionManager,
    ExtensionStore,
    InMemoryExtensionStore,
    JSONExtensionStore,
    PermissionBroker,
)
from notur_core.features import FeatureRegistry
from notur_core.logging import LogConfig, configure_logging, get_logger


class NoturApplication:
    """
    Notur Application orchestrator.

    Initialization sequence:

    1. Config loading
    2. Logger setup
    3. Installed-extension store
    4. Feature registry (built-ins minus ``features.disabled``)
    5. Extension manager
    6. HTTP app
    7. Extension discovery
    8. Activation (register, then boot)
    """

    def __init__(
        self,
        config_path: str | None = None,
        config: NoturConfig | None = None,
        log_output: TextIO | None = None,
    ):
        """Initialize application.

        Args:
            config_path: Path to config file (optional)
            config: Already-built configuration; skips file loading
            log_output: Output stream for logs (default: sys.stderr)
        """
        self._config_path = config_path
        self._log_output = log_output or sys.stderr
        self._initialized = False

        # Components (initialized in initialize())
        self.config_loader: ConfigLoader | None = None
        self.config: NoturConfig | None = config
        self.store: ExtensionStore | None = None
        self.features: FeatureRegistry | None = None
        self.permissions: PermissionBroker | None = None
        self.manager: ExtensionManager | None = None
        self.app: FastAPI | None = None
        self.report: ActivationReport | None = None
        self._logger = get_logger("lifecycle")

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Initialize all components and activate extensions.

        Activation failures are collected in ``self.report``; they never
        abort startup.
        """
        if self._initialized:
            return

        # 1. Config
        if self.config is None:
            self.config_loader = ConfigLoader()
            self.config = self.config_loader.load(self._config_path)
        config = self.config

        # 2. Logger
        configure_logging(
            LogConfig(
                level=config.logging.level,
                format=config.logging.format,
                truncate_at=config.logging.truncate_at,
                output=self._log_output,
            )
        )

        # 3. Store
        if config.extensions.state_file:
            self.store = JSONExtensionStore(config.extensions.state_file)
        else:
            self.store = InMemoryExtensionStore()

        # 4-5. Features and manager
        self.features = FeatureRegistry.defaults(config.features.disabled)
        self.permissions = PermissionBroker()
        self.manager = ExtensionManager(
            store=self.store,
            features=self.features,
            permissions=self.permissions,
            extension_settings={r.extension_id: r.settings for r in self.store.list()},
        )

        # 6. HTTP app; the manager mounts extension routes on it
        self.app = create_app(self.manager, config)

        # 7. Discovery
        discovered = self.manager.discover(config.extensions.directory)
        if discovered:
            self._logger.info(
                "Discovered extensions",
                extensions=[r.extension_id for r in discovered],
            )

        # 8. Activation
        self.report = self.manager.activate()
        self.app.state.activation_report = self.report

        self._initialized = True

    def create_bridge(
        self, host_sampler: Callable[[], Mapping[str, str]] | None = None
    ) -> BridgeRuntime:
        """Build a client bridge bootstrapped from the current frontend payload.

        ``theme.defaults`` is merged over the built-in variable set and
        ``theme.host_variable_map``, when set, replaces the default host map.
        """
        if self.config is None or self.manager is None:
            raise RuntimeError("Application not initialized")

        theme = self.config.theme
        runtime = BridgeRuntime(
            host_sampler=host_sampler,
            theme_defaults={**DEFAULT_CSS_VARIABLES, **theme.defaults},
            host_variable_map=theme.host_variable_map or None,
        )
        runtime.bootstrap(self.manager.frontend_payload(self.config.extensions.public_path))
        return runtime

    async def shutdown(self) -> None:
        """Shutdown all components."""
        if not self._initialized:
            return

        self._logger.info("Notur host shutting down")
        self._initialized = False

    async def start(self) -> None:
        """Serve the HTTP app with uvicorn.

        Initializes the application first if needed.
        """
        import uvicorn

        if not self._initialized:
            await self.initialize()

        if self.config is None or self.app is None:
            raise RuntimeError("Application not initialized")
        server_config = uvicorn.Config(
            self.app,
            host=self.config.server.host,
            port=self.config.server.port,
            log_level=self.config.logging.level.value.lower().replace("warn", "warning"),
        )
        server = uvicorn.Server(server_config)
        try:
            await server.serve()
        finally:
            await self.shutdown()
