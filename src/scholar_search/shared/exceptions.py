"""
Unified Exception Hierarchy for Scholar Search.

Exception Hierarchy:
    ScholarSearchError (base)
    ├── InvalidInputError          request-boundary validation (400)
    ├── NotFoundError              lookup yielded no hit (404)
    ├── UpstreamError              a source adapter call failed
    │   ├── UpstreamTimeoutError   deadline exceeded (also a TimeoutError)
    │   └── BadUpstreamResponseError
    └── SynthesisError             text-generation backend failed (502)

Upstream errors are absorbed by the aggregator; only validation, not-found and
synthesis errors reach the caller. Nothing in this package retries: the
``retryable`` flag is guidance for callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    WARNING = auto()  # Recoverable, can continue
    ERROR = auto()  # Failed but caller may retry
    TRANSIENT = auto()  # Temporary upstream condition


class ErrorCategory(Enum):
    """Categories for error classification."""

    VALIDATION = "validation"
    DATA = "data"
    UPSTREAM = "upstream"
    SYNTHESIS = "synthesis"


@dataclass(frozen=True)
class ErrorContext:
    """Structured context attached to an error."""

    source: str | None = None
    operation: str | None = None
    input_value: Any = None
    suggestion: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class ScholarSearchError(Exception):
    """
    Base exception for all Scholar Search errors.

    Provides:
    - Structured error context
    - Severity / category classification
    - HTTP status mapping for the API layer
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        category: ErrorCategory = ErrorCategory.UPSTREAM,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.severity = severity
        self.category = category
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.context.source:
            result["source"] = self.context.source
        if self.context.suggestion:
            result["suggestion"] = self.context.suggestion
        return result


# =============================================================================
# Validation / Data Errors
# =============================================================================


class InvalidInputError(ScholarSearchError):
    """Raised when a required request field is missing or malformed."""

    status_code = 400

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        value: Any = None,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext(operation=field_name, input_value=value)
        super().__init__(
            message,
            context=ctx,
            severity=ErrorSeverity.WARNING,
            category=ErrorCategory.VALIDATION,
            retryable=False,
        )
        self.field_name = field_name


class NotFoundError(ScholarSearchError):
    """Raised when a lookup legitimately yields no record."""

    status_code = 404

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.WARNING,
            category=ErrorCategory.DATA,
            retryable=False,
        )


# =============================================================================
# Upstream Errors
# =============================================================================


class UpstreamError(ScholarSearchError):
    """Base class for failures of a single source adapter call."""

    status_code = 502

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
    ) -> None:
        ctx = context or ErrorContext(source=source)
        super().__init__(
            message,
            context=ctx,
            severity=severity,
            category=ErrorCategory.UPSTREAM,
            retryable=True,
        )
        self.source = source


class UpstreamTimeoutError(UpstreamError, TimeoutError):
    """Raised when a provider call exceeds its deadline."""

    status_code = 504

    def __init__(
        self,
        source: str,
        timeout: float,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            f"{source}: request timed out after {timeout:g}s",
            source=source,
            context=context,
            severity=ErrorSeverity.TRANSIENT,
        )
        self.timeout = timeout


class BadUpstreamResponseError(UpstreamError):
    """Raised on non-success status or an unparseable / HTML body."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        status: int | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message, source=source, context=context)
        self.status = status


# =============================================================================
# Synthesis Errors
# =============================================================================


class SynthesisError(ScholarSearchError):
    """Raised when the text-generation backend fails or returns malformed output."""

    status_code = 502

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.SYNTHESIS,
            retryable=status is None or status >= 500 or status == 429,
        )
        self.status = status
