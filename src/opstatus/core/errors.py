"""
Structured error types for the status engine.

Provides a small hierarchy of typed errors carrying the metadata the
publisher and evaluator need to decide how a failure is handled: a
category for routing log lines, a retryable flag, structured context
and a chained cause.

Manifesto:
    The status engine never exits on error. Every failure it meets is
    either expected (the status resource does not exist yet), transient
    (the store rejected a write) or a sign that a workload is still being
    rolled out. Each of those gets its own type so the caller can route
    it without inspecting messages.

    - **Typed Error Hierarchy:** NotFound vs transient vs workload errors
    - **Explicit Retry Semantics:** Each error knows if it's retryable
    - **Rich Context:** Errors carry resource names for logging
    - **Error Chaining:** Preserve the client library exception as cause

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                   OperatorStatusError                        │
        │  (category, retryable, context, cause)                       │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  StoreError              WorkloadFetchError    ConfigError   │
        │  (STORE)                 (WORKLOAD)            (CONFIG)      │
        │      │                                                       │
        │  NotFoundError   TransientStoreError                         │
        │  (create path)   (logged and dropped)                        │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = TransientStoreError("conflict writing status")
    >>> error.retryable
    True
    >>> error.with_context(resource="network").context.resource
    'network'

Tags:
    error-handling, exception-hierarchy, error-context, opstatus
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories used for log routing."""

    STORE = "STORE"  # Backing object store (get/create/update)
    WORKLOAD = "WORKLOAD"  # Workload inspection
    CONFIG = "CONFIG"  # Missing or invalid settings
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        resource: Name of the status resource being read or written
        namespace: Namespace of the workload, if any
        workload: ``namespace/name`` of the workload, if any
        kind: Workload or resource kind
        http_status: Status code returned by the API server, if any
        metadata: Additional key-value pairs
    """

    resource: str | None = None
    namespace: str | None = None
    workload: str | None = None
    kind: str | None = None
    http_status: int | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["resource", "namespace", "workload", "kind", "http_status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class OperatorStatusError(Exception):
    """
    Base exception for all status engine errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that
    callers only pass a message in the common case.

    Examples:
        >>> error = OperatorStatusError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["retryable"]
        False
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> OperatorStatusError:
        """
        Add context to this error (fluent API).

        Usage:
            raise NotFoundError("missing").with_context(resource="network")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# STORE ERRORS
# =============================================================================


class StoreError(OperatorStatusError):
    """Error raised by an ``ObjectStore`` implementation."""

    default_category = ErrorCategory.STORE


class NotFoundError(StoreError):
    """
    The requested resource does not exist.

    Expected on first publish; the publisher routes it to the create path.
    """

    pass


class TransientStoreError(StoreError):
    """
    Any store failure other than NotFound.

    The publisher logs and drops the status; the next enqueued status is
    the recovery path.
    """

    default_retryable = True


# =============================================================================
# WORKLOAD ERRORS
# =============================================================================


class WorkloadFetchError(OperatorStatusError):
    """A tracked workload could not be read; treated as still progressing."""

    default_category = ErrorCategory.WORKLOAD
    default_retryable = True


# =============================================================================
# CONFIG ERRORS
# =============================================================================


class ConfigError(OperatorStatusError):
    """Invalid configuration. Never retryable."""

    default_category = ErrorCategory.CONFIG


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "OperatorStatusError",
    "StoreError",
    "NotFoundError",
    "TransientStoreError",
    "WorkloadFetchError",
    "ConfigError",
]
