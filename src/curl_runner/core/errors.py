"""
Structured error types for curl-runner.

Only caller-level mistakes are raised as exceptions. Everything that goes
wrong while a script runs (missing file, launch failure, HTTP error status)
is captured in an ``ExecutionResult`` instead, so one bad script never aborts
its siblings.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                    CurlRunnerError                        │
        │              (category, context, cause)                   │
        ├──────────────────────────────────────────────────────────┤
        │  InvalidInputError   DiscoveryError   ConfigError         │
        │  (VALIDATION)        (DISCOVERY)      (CONFIG)            │
        │                                                           │
        │  ReportError                                              │
        │  (STORAGE)                                                │
        └──────────────────────────────────────────────────────────┘

Examples:
    >>> error = InvalidInputError("jobs must be a list")
    >>> error.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>
    >>> error.with_context(plan="bounded").to_dict()["context"]
    {'plan': 'bounded'}

Tags:
    error-handling, exception-hierarchy, error-context, curl-runner

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and log routing."""

    VALIDATION = "VALIDATION"    # Bad arguments from the caller
    DISCOVERY = "DISCOVERY"      # Script directory could not be scanned
    CONFIG = "CONFIG"            # Invalid settings
    STORAGE = "STORAGE"          # Log / report file errors
    INTERNAL = "INTERNAL"        # Bugs, unexpected state


class CurlRunnerError(Exception):
    """
    Base exception for all curl-runner errors.

    Carries a category, free-form context for logging, and an optional
    chained cause.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> CurlRunnerError:
        """
        Add context to this error (fluent API).

        Usage:
            raise InvalidInputError("bad plan").with_context(plan="fixed")
        """
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class InvalidInputError(CurlRunnerError):
    """A usage error by the caller, e.g. a non-list job argument."""

    default_category = ErrorCategory.VALIDATION


class DiscoveryError(CurlRunnerError):
    """The script directory could not be enumerated."""

    default_category = ErrorCategory.DISCOVERY


class ConfigError(CurlRunnerError):
    """Settings failed validation."""

    default_category = ErrorCategory.CONFIG


class ReportError(CurlRunnerError):
    """A JSON report could not be written or read."""

    default_category = ErrorCategory.STORAGE


__all__ = [
    "ErrorCategory",
    "CurlRunnerError",
    "InvalidInputError",
    "DiscoveryError",
    "ConfigError",
    "ReportError",
]
