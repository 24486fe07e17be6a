"""Extension manager: install state, two-phase activation and aggregation.

Activation runs every enabled extension through ``register`` (the
extension's own hook, then every eligible feature) and, once all of them
have registered, through ``boot``. Each (extension, feature, phase) cell is
isolated: a failure is logged and collected in the ActivationReport, and
activation carries on with the next cell.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from opentelemetry.trace import Status, StatusCode

from notur_core.errors import NoturError, create_error, get_error_factory
from notur_core.features import ExtensionContext, FeatureRegistry, PhaseResult
from notur_core.logging import get_logger
from notur_core.types import LifecyclePhase

from .base import NoturExtension
from .dependencies import DependencyResolver
from .health import normalize_health_results
from .instrumentation import instrument_phase
from .loader import load_extension
from .manifest import ExtensionManifest
from .permissions import PermissionBroker
from .store import ExtensionStore, InMemoryExtensionStore, InstalledExtension

HostListener = Callable[[str, dict[str, Any]], None]

HOST_EVENTS = (
    "extension.installed",
    "extension.uninstalled",
    "extension.enabled",
    "extension.disabled",
)


@dataclass
class ActivationReport:
    """Result of one activation pass.

    Attributes:
        order: Extension ids in the order they were activated
        registered: Extensions whose own register() completed
        booted: Extensions whose own boot() completed
        phases: Per-extension feature results, register and boot
        failures: Every error collected during the pass
    """

    order: list[str] = field(default_factory=list)
    registered: list[str] = field(default_factory=list)
    booted: list[str] = field(default_factory=list)
    phases: list[PhaseResult] = field(default_factory=list)
    failures: list[NoturError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def failures_for(self, extension_id: str) -> list[NoturError]:
        return [f for f in self.failures if f.extension_id == extension_id]


class ExtensionManager:
    """Top-level orchestrator for installed extensions.

    Args:
        store: Installed-extension records (defaults to in-memory)
        features: Feature registry (defaults to the built-in features)
        permissions: Permission broker shared with the HTTP layer
        resolver: Dependency resolver
        app: Host application handed to features (a FastAPI app or None)
        extension_settings: Per-extension settings passed to constructors
    """

    def __init__(
        self,
        store: ExtensionStore | None = None,
        features: FeatureRegistry | None = None,
        permissions: PermissionBroker | None = None,
        resolver: DependencyResolver | None = None,
        app: Any = None,
        extension_settings: dict[str, dict[str, Any]] | None = None,
    ):
        self.store = store or InMemoryExtensionStore()
        self.features = features or FeatureRegistry.defaults()
        self.permissions = permissions or PermissionBroker()
        self.resolver = resolver or DependencyResolver()
        self.app = app
        self._settings = extension_settings or {}

        self._manifests: dict[str, ExtensionManifest] = {}
        self._extensions: dict[str, NoturExtension] = {}
        self._frontend_slots: dict[str, dict[str, dict[str, Any]]] = {}
        self._health_providers: dict[str, NoturExtension] = {}
        self._schedules: dict[str, list[Any]] = {}
        self._route_groups: list[Any] = []
        self._listeners: list[HostListener] = []
        self._extension_unsubscribers: dict[str, list[Callable[[], None]]] = {}
        self._activated = False
        self._logger = get_logger("lifecycle")

    # Installation

    def install(
        self,
        source: ExtensionManifest | str | Path,
        enabled: bool = True,
    ) -> InstalledExtension:
        """Record an extension as installed.

        Args:
            source: A parsed manifest, or the extension root directory
            enabled: Initial enabled flag

        Raises:
            NoturError: MANIFEST_* if the manifest cannot be read,
                EXTENSION_ALREADY_INSTALLED if the id is taken
        """
        manifest = source if isinstance(source, ExtensionManifest) else ExtensionManifest.load(source)

        if self.store.get(manifest.id) is not None:
            raise create_error("EXTENSION_ALREADY_INSTALLED", extension_id=manifest.id)

        record = InstalledExtension(
            extension_id=manifest.id,
            version=manifest.version,
            path=str(manifest.base_path) if manifest.base_path else "",
            enabled=enabled,
        )
        self.store.save(record)
        self._manifests[manifest.id] = manifest

        self._logger.info("Extension installed", extension_id=manifest.id, version=manifest.version)
        self._emit("extension.installed", {"extension_id": manifest.id, "version": manifest.version})
        return record

    def uninstall(self, extension_id: str) -> None:
        """Remove an extension and everything it registered with the manager.

        Raises:
            NoturError: EXTENSION_NOT_INSTALLED
        """
        if not self.store.delete(extension_id):
            raise create_error("EXTENSION_NOT_INSTALLED", extension_id=extension_id)

        self._forget(extension_id)
        self._manifests.pop(extension_id, None)

        self._logger.info("Extension uninstalled", extension_id=extension_id)
        self._emit("extension.uninstalled", {"extension_id": extension_id})

    def discover(self, directory: str | Path) -> list[InstalledExtension]:
        """Install every extension found as ``<vendor>/<name>`` under a directory.

        Extensions that are already installed are skipped. Unreadable
        manifests are logged and skipped.
        """
        root = Path(directory)
        installed: list[InstalledExtension] = []
        if not root.is_dir():
            return installed

        for vendor_dir in sorted(p for p in root.iterdir() if p.is_dir()):
            for extension_dir in sorted(p for p in vendor_dir.iterdir() if p.is_dir()):
                try:
                    manifest = ExtensionManifest.load(extension_dir)
                except NoturError as e:
                    self._logger.warning(
                        f"Skipping {extension_dir}: {e.message}",
                        detail=e.detail,
                    )
                    continue
                if self.store.get(manifest.id) is not None:
                    self._manifests.setdefault(manifest.id, manifest)
                    continue
                installed.append(self.install(manifest))

        return installed

    # Enable / disable

    def enable(self, extension_id: str) -> None:
        """Mark an installed extension enabled.

        Does not re-run register or boot.

        Raises:
            NoturError: EXTENSION_NOT_INSTALLED
        """
        self._set_enabled(extension_id, True)

    def disable(self, extension_id: str) -> None:
        """Mark an installed extension disabled.

        Raises:
            NoturError: EXTENSION_NOT_INSTALLED
        """
        self._set_enabled(extension_id, False)

    def _set_enabled(self, extension_id: str, enabled: bool) -> None:
        record = self.store.get(extension_id)
        if record is None:
            raise create_error("EXTENSION_NOT_INSTALLED", extension_id=extension_id)

        if record.enabled != enabled:
            record.enabled = enabled
            self.store.save(record)

        event = "extension.enabled" if enabled else "extension.disabled"
        self._logger.info(event, extension_id=extension_id)
        self._emit(event, {"extension_id": extension_id})

    def is_installed(self, extension_id: str) -> bool:
        return self.store.get(extension_id) is not None

    def is_enabled(self, extension_id: str) -> bool:
        record = self.store.get(extension_id)
        return record is not None and record.enabled

    # Activation

    @property
    def activated(self) -> bool:
        return self._activated

    def activate(self) -> ActivationReport:
        """Run register then boot across every enabled extension.

        Calling activate() again is a no-op returning an empty report.
        """
        report = ActivationReport()
        if self._activated:
            return report

        manifests = self._load_enabled_manifests(report)
        graph = {ext_id: m.dependencies for ext_id, m in manifests.items()}

        for ext_id, missing in self.resolver.find_missing(graph).items():
            self._logger.warning(
                "Extension depends on extensions that are not installed",
                extension_id=ext_id,
                missing=missing,
            )

        while (cycle := self.resolver.find_cycle(graph)) is not None:
            for ext_id in cycle:
                error = create_error(
                    "DEPENDENCY_CYCLE",
                    extension_id=ext_id,
                    detail=" -> ".join(cycle + [cycle[0]]),
                )
                report.failures.append(error)
                self._logger.error(error.message, extension_id=ext_id, detail=error.detail)
                graph.pop(ext_id, None)

        report.order = self.resolver.resolve(graph)

        contexts: list[ExtensionContext] = []
        for ext_id in report.order:
            context = self._register_extension(manifests[ext_id], report)
            if context is not None:
                contexts.append(context)

        for context in contexts:
            self._boot_extension(context, report)

        self._activated = True
        self._logger.info(
            "Activation complete",
            registered=len(report.registered),
            booted=len(report.booted),
            failures=len(report.failures),
        )
        return report

    def _load_enabled_manifests(self, report: ActivationReport) -> dict[str, ExtensionManifest]:
        manifests: dict[str, ExtensionManifest] = {}
        for record in self.store.list():
            if not record.enabled:
                continue
            try:
                manifest = self._manifests.get(record.extension_id)
                if manifest is None:
                    manifest = ExtensionManifest.load(record.path)
                    self._manifests[record.extension_id] = manifest
            except NoturError as e:
                error = e.with_context(extension_id=record.extension_id)
                report.failures.append(error)
                self._logger.error(error.message, extension_id=record.extension_id, detail=error.detail)
                continue
            manifests[record.extension_id] = manifest
        return manifests

    def _register_extension(
        self, manifest: ExtensionManifest, report: ActivationReport
    ) -> ExtensionContext | None:
        ext_id = manifest.id
        phase = LifecyclePhase.REGISTER.value

        with instrument_phase(phase, ext_id) as span:
            try:
                extension = load_extension(manifest, self._settings.get(ext_id))
                extension.register()
            except Exception as e:
                self._record_failure(report, e, ext_id, phase)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                return None

            self._extensions[ext_id] = extension
            report.registered.append(ext_id)

            self.permissions.register(ext_id, manifest.permissions)

            context = ExtensionContext(
                id=ext_id,
                extension=extension,
                manifest=manifest,
                path=manifest.base_path,
                app=self.app,
                manager=self,
            )
            self._collect(report, self.features.register(context), span)

        try:
            self._frontend_slots[ext_id] = dict(extension.get_frontend_slots())
        except Exception as e:
            self._record_failure(report, e, ext_id, phase)

        try:
            self._subscribe_listeners(ext_id, extension.get_event_listeners())
        except Exception as e:
            self._record_failure(report, e, ext_id, phase)

        return context

    def _subscribe_listeners(
        self, ext_id: str, listeners: dict[str, list[Callable[[dict[str, Any]], None]]]
    ) -> None:
        for event, handlers in listeners.items():
            if event not in HOST_EVENTS:
                self._logger.warning("Unknown host event", extension_id=ext_id, event=event)
                continue
            for handler in handlers:
                self._extension_unsubscribers.setdefault(ext_id, []).append(
                    self.on(_bind_listener(event, handler))
                )

    def _boot_extension(self, context: ExtensionContext, report: ActivationReport) -> None:
        phase = LifecyclePhase.BOOT.value

        with instrument_phase(phase, context.id) as span:
            try:
                context.extension.boot()
                report.booted.append(context.id)
            except Exception as e:
                self._record_failure(report, e, context.id, phase)
                span.set_status(Status(StatusCode.ERROR, str(e)))

            self._collect(report, self.features.boot(context), span)

    def _collect(self, report: ActivationReport, result: PhaseResult, span: Any) -> None:
        report.phases.append(result)
        report.failures.extend(result.failed)
        if result.failed:
            span.set_status(Status(StatusCode.ERROR, f"{len(result.failed)} feature(s) failed"))

    def _record_failure(
        self, report: ActivationReport, error: Exception, extension_id: str, phase: str
    ) -> None:
        notur_error = get_error_factory().from_exception(
            error,
            extension_id=extension_id,
            phase=phase,
            fallback_code="LIFECYCLE_FAILED",
        )
        report.failures.append(notur_error)
        self._logger.exception(notur_error.message, exc=error, **notur_error.location)

    def _forget(self, extension_id: str) -> None:
        self._extensions.pop(extension_id, None)
        self._frontend_slots.pop(extension_id, None)
        self._health_providers.pop(extension_id, None)
        self._schedules.pop(extension_id, None)
        self._route_groups = [g for g in self._route_groups if g.extension_id != extension_id]
        self.permissions.unregister(extension_id)
        for unsubscribe in self._extension_unsubscribers.pop(extension_id, []):
            unsubscribe()

    # Feature callbacks

    def register_health_check_provider(self, extension_id: str, provider: NoturExtension) -> None:
        self._health_providers[extension_id] = provider

    def register_schedules(self, extension_id: str, tasks: list[Any]) -> None:
        self._schedules[extension_id] = list(tasks)

    def register_route_group(self, mounted: Any) -> None:
        self._route_groups.append(mounted)

    # Accessors

    def get(self, extension_id: str) -> NoturExtension | None:
        """Loaded extension instance, if it registered successfully."""
        return self._extensions.get(extension_id)

    def all(self) -> dict[str, NoturExtension]:
        return dict(self._extensions)

    def get_manifest(self, extension_id: str) -> ExtensionManifest | None:
        return self._manifests.get(extension_id)

    def list_installed(self) -> list[InstalledExtension]:
        return self.store.list()

    def get_frontend_slots(self) -> dict[str, dict[str, dict[str, Any]]]:
        """Slot bindings of every enabled, registered extension, keyed by id."""
        return {
            ext_id: dict(slots)
            for ext_id, slots in self._frontend_slots.items()
            if self.is_enabled(ext_id)
        }

    def get_schedules(self) -> list[Any]:
        """Scheduled tasks of enabled extensions, in activation order."""
        return [
            task
            for ext_id, tasks in self._schedules.items()
            if self.is_enabled(ext_id)
            for task in tasks
        ]

    def get_route_groups(self, extension_id: str | None = None) -> list[Any]:
        if extension_id is None:
            return list(self._route_groups)
        return [g for g in self._route_groups if g.extension_id == extension_id]

    def get_theme_overrides(self) -> dict[str, dict[str, str]]:
        """Manifest ``theme.css_variables`` of enabled, registered extensions."""
        overrides: dict[str, dict[str, str]] = {}
        for ext_id in self._extensions:
            if not self.is_enabled(ext_id):
                continue
            variables = self._manifests[ext_id].theme_variables
            if variables:
                overrides[ext_id] = variables
        return overrides

    def has_health_checks(self, extension_id: str) -> bool:
        return extension_id in self._health_providers

    def get_health(self, extension_id: str) -> list[dict[str, Any]]:
        """Normalized health results of one extension.

        A provider that raises yields a single ``error`` entry.

        Raises:
            NoturError: EXTENSION_NOT_INSTALLED
        """
        if not self.is_installed(extension_id):
            raise create_error("EXTENSION_NOT_INSTALLED", extension_id=extension_id)

        provider = self._health_providers.get(extension_id)
        if provider is None:
            return []

        try:
            return normalize_health_results(provider.get_health_checks())
        except Exception as e:
            self._logger.exception("Health check provider failed", exc=e, extension_id=extension_id)
            return [
                {
                    "id": "provider",
                    "status": "error",
                    "message": str(e),
                    "details": None,
                    "checked_at": None,
                }
            ]

    def frontend_payload(self, public_path: str = "/notur/extensions") -> dict[str, Any]:
        """Bootstrap payload for the client bundle loader.

        Only enabled, registered extensions are included.
        """
        extensions: list[dict[str, Any]] = []
        for ext_id in self._extensions:
            if not self.is_enabled(ext_id):
                continue
            manifest = self._manifests[ext_id]
            summary = manifest.summary()
            bundle = manifest.frontend_bundle
            styles = manifest.frontend_styles
            summary["bundle"] = f"{public_path.rstrip('/')}/{ext_id}/{bundle}" if bundle else None
            summary["styles"] = f"{public_path.rstrip('/')}/{ext_id}/{styles}" if styles else None
            summary["slots"] = self._frontend_slots.get(ext_id, {})
            extensions.append(summary)

        return {
            "extensions": extensions,
            "slots": self.get_frontend_slots(),
            "theme": self.get_theme_overrides(),
        }

    # Host events

    def on(self, callback: HostListener) -> Callable[[], None]:
        """Subscribe to host events; returns an unsubscribe function."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, event: str, payload: dict[str, Any]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, payload)
            except Exception as e:
                self._logger.exception(f"Host event listener failed for {event}", exc=e)


def _bind_listener(event: str, handler: Callable[[dict[str, Any]], None]) -> HostListener:
    """Adapt a payload-only extension handler to a host listener for one event."""

    def listener(name: str, payload: dict[str, Any]) -> None:
        if name == event:
            handler(payload)

    return listener
