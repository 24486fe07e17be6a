"""Notur error handling - structured errors located in the activation matrix."""

from .errors import LOCATION_FIELDS, ErrorCategory, ErrorTemplate, NoturError
from .factory import ErrorFactory, create_error, get_error_factory
from .matchers import (
    ErrorMatcher,
    ErrorMatcherChain,
    ExceptionTypeMatcher,
    GenericErrorMatcher,
    MatchResult,
)
from .registry import ErrorRegistry

__all__ = [
    # Core error types
    "NoturError",
    "ErrorCategory",
    "ErrorTemplate",
    "LOCATION_FIELDS",
    # Registry and factory
    "ErrorRegistry",
    "ErrorFactory",
    "get_error_factory",
    "create_error",
    # Matchers
    "ErrorMatcher",
    "ErrorMatcherChain",
    "ExceptionTypeMatcher",
    "GenericErrorMatcher",
    "MatchResult",
]
