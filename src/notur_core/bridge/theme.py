"""Theme variable cascade.

Resolution order, later layers win per variable:

1. Notur defaults (``DEFAULT_CSS_VARIABLES``)
2. Variables sampled from the live host application
3. Extension theme registrations from the PluginRegistry
4. Inline overrides supplied by the caller
"""

from collections.abc import Callable, Mapping

from notur_core.logging import get_logger

from .registry import PluginRegistry

DEFAULT_CSS_VARIABLES: dict[str, str] = {
    # Brand colors
    "--notur-primary": "#0967d2",
    "--notur-primary-light": "#47a3f3",
    "--notur-primary-dark": "#03449e",
    "--notur-secondary": "#616e7c",
    # Status colors
    "--notur-success": "#27ab83",
    "--notur-danger": "#e12d39",
    "--notur-warning": "#f7c948",
    "--notur-info": "#2bb0ed",
    # Surfaces
    "--notur-bg-primary": "#1f2933",
    "--notur-bg-secondary": "#323f4b",
    "--notur-bg-tertiary": "#3e4c59",
    # Text
    "--notur-text-primary": "#f5f7fa",
    "--notur-text-secondary": "#cbd2d9",
    "--notur-text-muted": "#9aa5b1",
    "--notur-border": "#3e4c59",
    "--notur-radius-sm": "4px",
    "--notur-radius-md": "8px",
    "--notur-radius-lg": "12px",
    "--notur-font-sans": '-apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif',
    "--notur-font-mono": '"Fira Code", "JetBrains Mono", monospace',
}

# Host panel variable names translated into the Notur namespace.
HOST_VARIABLE_MAP: dict[str, str] = {
    "--ptero-primary": "--notur-primary",
    "--ptero-primary-light": "--notur-primary-light",
    "--ptero-primary-dark": "--notur-primary-dark",
    "--ptero-success": "--notur-success",
    "--ptero-danger": "--notur-danger",
    "--ptero-warning": "--notur-warning",
    "--ptero-info": "--notur-info",
}

_EMPTY_VALUES = frozenset(("", "transparent", "rgba(0, 0, 0, 0)"))

logger = get_logger("theme")


def extract_host_variables(
    raw: Mapping[str, str], variable_map: Mapping[str, str] | None = None
) -> dict[str, str]:
    """Translate sampled host variables into Notur variable names.

    Mapped names are translated, names already in the ``--notur-`` namespace
    pass through, everything else is ignored. Empty and transparent values
    are dropped. A mapped value wins over a pass-through value for the same
    Notur variable.
    """
    mapping = HOST_VARIABLE_MAP if variable_map is None else variable_map
    extracted: dict[str, str] = {}
    passthrough: dict[str, str] = {}
    for name, value in raw.items():
        value = str(value).strip()
        if value in _EMPTY_VALUES:
            continue
        if name in mapping:
            extracted[mapping[name]] = value
        elif name.startswith("--notur-"):
            passthrough[name] = value
    return {**passthrough, **extracted}


class ThemeResolver:
    """Merges the four theme layers and reapplies on every layer change.

    ``on_apply`` receives the full merged map each time it changes; it stands
    in for writing the variables onto the document root.
    """

    def __init__(
        self,
        registry: PluginRegistry | None = None,
        overrides: Mapping[str, str] | None = None,
        host_sampler: Callable[[], Mapping[str, str]] | None = None,
        variable_map: Mapping[str, str] | None = None,
        defaults: Mapping[str, str] | None = None,
        on_apply: Callable[[dict[str, str]], None] | None = None,
    ):
        self.registry = registry
        self.host_sampler = host_sampler
        self.variable_map = dict(HOST_VARIABLE_MAP if variable_map is None else variable_map)
        self.on_apply = on_apply
        self._defaults = dict(DEFAULT_CSS_VARIABLES if defaults is None else defaults)
        self._host_variables: dict[str, str] = {}
        self._extension_overrides: dict[str, str] = (
            registry.get_theme_overrides() if registry is not None else {}
        )
        self._overrides = dict(overrides or {})
        self._variables: dict[str, str] = {}
        self._sampled = False
        self._subscribers: list[Callable[[dict[str, str]], None]] = []
        self._unsubscribe = (
            registry.on("theme:changed", self._on_theme_changed) if registry is not None else None
        )
        self._apply()

    @property
    def variables(self) -> dict[str, str]:
        return dict(self._variables)

    @property
    def extension_overrides(self) -> dict[str, str]:
        return dict(self._extension_overrides)

    @property
    def host_variables(self) -> dict[str, str]:
        return dict(self._host_variables)

    @property
    def sampled(self) -> bool:
        return self._sampled

    def resolve(self) -> dict[str, str]:
        """Current merged variable map."""
        return {
            **self._defaults,
            **self._host_variables,
            **self._extension_overrides,
            **self._overrides,
        }

    def sample_host(self) -> dict[str, str]:
        """Run the deferred host sampling pass and reapply the cascade.

        A sampler that raises leaves layer 2 empty.
        """
        self._sampled = True
        if self.host_sampler is None:
            return {}
        try:
            raw = self.host_sampler()
        except Exception as e:
            logger.exception("Host theme sampling failed", exc=e)
            return {}
        self._host_variables = extract_host_variables(raw or {}, self.variable_map)
        logger.debug("Host theme sampled", variable_count=len(self._host_variables))
        self._apply()
        return dict(self._host_variables)

    def set_overrides(self, overrides: Mapping[str, str] | None) -> None:
        self._overrides = dict(overrides or {})
        self._apply()

    def subscribe(self, callback: Callable[[dict[str, str]], None]) -> Callable[[], None]:
        """Call ``callback`` with the merged map after every change."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_theme_changed(self) -> None:
        if self.registry is None:
            return
        self._extension_overrides = self.registry.get_theme_overrides()
        self._apply()

    def _apply(self) -> None:
        variables = self.resolve()
        if variables == self._variables:
            return
        self._variables = variables
        if self.on_apply is not None:
            self.on_apply(dict(variables))
        for callback in list(self._subscribers):
            try:
                callback(dict(variables))
            except Exception as e:
                logger.exception("Theme subscriber failed", exc=e)
