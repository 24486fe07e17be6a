"""Exception matchers: classify what extension code raised.

The chain is consulted by ErrorFactory.from_exception. Matchers are tried
in order and the generic matcher always comes last.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import yaml


@dataclass
class MatchResult:
    """Error code plus the context used to fill its template."""

    code: str
    context: dict[str, Any]


class ErrorMatcher(ABC):
    """Base class for exception matchers."""

    @abstractmethod
    def matches(self, error: Exception) -> bool:
        """True if this matcher classifies ``error``."""

    @abstractmethod
    def extract(self, error: Exception) -> MatchResult:
        """Code and template context for ``error``."""


class ExceptionTypeMatcher(ErrorMatcher):
    """Maps exception types to one error code.

    Args:
        types: Exception classes this matcher handles
        code: Error code produced
        context: Builds extra template context from the exception
    """

    def __init__(
        self,
        types: tuple[type[BaseException], ...],
        code: str,
        context: Callable[[Exception], dict[str, Any]] | None = None,
    ):
        self.types = types
        self.code = code
        self._context = context

    def matches(self, error: Exception) -> bool:
        return isinstance(error, self.types)

    def extract(self, error: Exception) -> MatchResult:
        context: dict[str, Any] = {"detail": str(error)}
        if self._context is not None:
            context.update(self._context(error))
        return MatchResult(code=self.code, context=context)


class GenericErrorMatcher(ErrorMatcher):
    """Fallback: anything else is an INTERNAL_ERROR."""

    def matches(self, error: Exception) -> bool:
        return True

    def extract(self, error: Exception) -> MatchResult:
        return MatchResult(
            code="INTERNAL_ERROR",
            context={"detail": str(error), "error_type": type(error).__name__},
        )


def _entrypoint_context(error: Exception) -> dict[str, Any]:
    return {"entrypoint": getattr(error, "name", None) or "unknown"}


def default_matchers() -> list[ErrorMatcher]:
    """Built-in matchers, most specific first."""
    return [
        # A module that fails to import is a broken entrypoint.
        ExceptionTypeMatcher((ImportError,), "ENTRYPOINT_INVALID", _entrypoint_context),
        # Manifest files that vanished or do not parse.
        ExceptionTypeMatcher((FileNotFoundError, yaml.YAMLError), "MANIFEST_INVALID"),
        GenericErrorMatcher(),
    ]


class ErrorMatcherChain:
    """Ordered matchers; the first match wins."""

    def __init__(self, matchers: list[ErrorMatcher] | None = None):
        self.matchers: list[ErrorMatcher] = (
            list(matchers) if matchers is not None else default_matchers()
        )
        self._fallback = GenericErrorMatcher()

    def add(self, matcher: ErrorMatcher) -> None:
        """Register ``matcher`` ahead of the generic fallback."""
        index = next(
            (i for i, m in enumerate(self.matchers) if isinstance(m, GenericErrorMatcher)),
            len(self.matchers),
        )
        self.matchers.insert(index, matcher)

    def match(self, error: Exception) -> MatchResult:
        for matcher in self.matchers:
            if matcher.matches(error):
                return matcher.extract(error)
        return self._fallback.extract(error)
