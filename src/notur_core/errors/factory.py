"""Error factory: the one place NoturErrors are created."""

from typing import Any

from .errors import LOCATION_FIELDS, NoturError
from .matchers import ErrorMatcherChain
from .registry import ErrorRegistry


class ErrorFactory:
    """Creates NoturErrors from codes and from arbitrary exceptions.

    Args:
        registry: Template registry (defaults to the built-in templates)
        matcher_chain: Exception classifier (defaults to the built-in matchers)
    """

    def __init__(
        self,
        registry: ErrorRegistry | None = None,
        matcher_chain: ErrorMatcherChain | None = None,
    ):
        self.registry = registry or ErrorRegistry()
        self.matcher_chain = matcher_chain or ErrorMatcherChain()

    def from_exception(
        self,
        error: Exception,
        extension_id: str | None = None,
        feature: str | None = None,
        phase: str | None = None,
        fallback_code: str | None = None,
    ) -> NoturError:
        """Wrap whatever extension code raised.

        A NoturError keeps its code and only gains location. Anything else
        is classified by the matcher chain; ``fallback_code`` replaces the
        generic INTERNAL_ERROR classification, so a plain RuntimeError in a
        boot hook becomes LIFECYCLE_FAILED.
        """
        if isinstance(error, NoturError):
            return error.with_context(extension_id=extension_id, feature=feature, phase=phase)

        match = self.matcher_chain.match(error)
        code = fallback_code if fallback_code and match.code == "INTERNAL_ERROR" else match.code

        location = dict(zip(LOCATION_FIELDS, (extension_id, feature, phase)))
        context = {**match.context, **{k: v for k, v in location.items() if v}}
        return self.registry.create(code=code, context=context)

    def create(self, code: str, context: dict[str, Any] | None = None, **kwargs: Any) -> NoturError:
        return self.registry.create(code=code, context={**(context or {}), **kwargs})


_default_factory: ErrorFactory | None = None


def get_error_factory() -> ErrorFactory:
    """Process-wide factory."""
    global _default_factory  # noqa: PLW0603
    if _default_factory is None:
        _default_factory = ErrorFactory()
    return _default_factory


def create_error(code: str, **context: Any) -> NoturError:
    """Create a NoturError from a registered code.

    Usage:
        raise create_error("EXTENSION_NOT_INSTALLED", extension_id="acme/ghost")
    """
    return get_error_factory().create(code, context)
