"""
Error taxonomy for the resolution layer.

Every component (breaker, retry executor, resolvers, health aggregator)
speaks in terms of these kinds. Store adapters raise the typed exceptions
below; foreign exceptions are classified with ``classify_error``.

Propagation policy:
- timeout / network_error / server_error(5xx): retried, then absorbed
- validation_error / not_found: never retried
- redirect_loop / redirect_chain_too_long: surfaced to the authoring caller
- configuration_error: fatal at startup
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Failure kinds shared by every component."""

    TIMEOUT = "timeout"
    NETWORK = "network_error"
    SERVER = "server_error"
    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    CIRCUIT_OPEN = "circuit_open"
    REDIRECT_LOOP = "redirect_loop"
    REDIRECT_CHAIN_TOO_LONG = "redirect_chain_too_long"
    CONFIGURATION = "configuration_error"
    UNKNOWN = "unknown"


RETRYABLE_KINDS = frozenset({ErrorKind.TIMEOUT, ErrorKind.NETWORK, ErrorKind.SERVER})

# Kinds that prove the store answered; they never count against the breaker.
STORE_ANSWERED_KINDS = frozenset({ErrorKind.VALIDATION, ErrorKind.NOT_FOUND})


class ResolutionError(Exception):
    """Base class for all taxonomy errors."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str = "",
        *,
        path: str | None = None,
        operation: str | None = None,
    ) -> None:
        self.message = message or self.kind.value
        self.path = path
        self.operation = operation
        super().__init__(self.message)

    @property
    def retryable(self) -> bool:
        return self.kind in RETRYABLE_KINDS

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "path": self.path,
            "operation": self.operation,
        }


class StoreTimeoutError(ResolutionError):
    """Store call exceeded its deadline."""

    kind = ErrorKind.TIMEOUT


class NetworkError(ResolutionError):
    """Store unreachable (connection refused, reset, DNS...)."""

    kind = ErrorKind.NETWORK


class ServerError(ResolutionError):
    """Store answered with an error status."""

    kind = ErrorKind.SERVER

    def __init__(self, message: str = "", *, status_code: int = 500, **kwargs: Any) -> None:
        self.status_code = status_code
        super().__init__(message or f"store returned status {status_code}", **kwargs)

    @property
    def retryable(self) -> bool:
        # 4xx-equivalents are client errors and are not worth retrying
        return self.status_code >= 500


class ValidationError(ResolutionError):
    """A record (stored or submitted) violates its constraints."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str = "", *, issues: list[Any] | None = None, **kwargs: Any) -> None:
        self.issues = list(issues or [])
        super().__init__(message, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["issues"] = [getattr(i, "__dict__", i) for i in self.issues]
        return data


class NotFoundError(ResolutionError):
    kind = ErrorKind.NOT_FOUND


class CircuitOpenError(ResolutionError):
    """Raised when the breaker rejects a call without attempting it."""

    kind = ErrorKind.CIRCUIT_OPEN

    def __init__(self, message: str = "Circuit breaker is open", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class RedirectLoopError(ResolutionError):
    kind = ErrorKind.REDIRECT_LOOP

    def __init__(self, message: str = "", *, chain: list[str] | None = None, **kwargs: Any) -> None:
        self.chain = list(chain or [])
        super().__init__(
            message or f"Redirect would create a loop: {' -> '.join(self.chain)}", **kwargs
        )


class RedirectChainTooLongError(ResolutionError):
    kind = ErrorKind.REDIRECT_CHAIN_TOO_LONG

    def __init__(
        self,
        message: str = "",
        *,
        chain: list[str] | None = None,
        max_depth: int = 0,
        **kwargs: Any,
    ) -> None:
        self.chain = list(chain or [])
        self.max_depth = max_depth
        super().__init__(
            message or f"Redirect chain too long (maximum {max_depth} redirects)", **kwargs
        )


class ConfigurationError(ResolutionError):
    """Fatal misconfiguration detected at startup."""

    kind = ErrorKind.CONFIGURATION


# --- Classification ---


def classify_error(exc: BaseException) -> ErrorKind:
    """Map any exception onto a taxonomy kind."""
    if isinstance(exc, ResolutionError):
        return exc.kind
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        return ErrorKind.TIMEOUT
    if isinstance(exc, (ConnectionError, OSError)):
        return ErrorKind.NETWORK
    return ErrorKind.UNKNOWN


def is_retryable(exc: BaseException) -> bool:
    """Whether a failure is worth another attempt."""
    if isinstance(exc, ResolutionError):
        return exc.retryable
    return classify_error(exc) in RETRYABLE_KINDS


_KIND_TO_CLASS: dict[ErrorKind, type[ResolutionError]] = {
    ErrorKind.TIMEOUT: StoreTimeoutError,
    ErrorKind.NETWORK: NetworkError,
}


def as_resolution_error(
    exc: BaseException,
    *,
    path: str | None = None,
    operation: str | None = None,
) -> ResolutionError:
    """Return ``exc`` as a taxonomy error, wrapping foreign exceptions."""
    if isinstance(exc, ResolutionError):
        if exc.path is None:
            exc.path = path
        if exc.operation is None:
            exc.operation = operation
        return exc
    cls = _KIND_TO_CLASS.get(classify_error(exc), ResolutionError)
    wrapped = cls(f"{type(exc).__name__}: {exc}", path=path, operation=operation)
    wrapped.__cause__ = exc
    return wrapped


def failure_extra(
    exc: BaseException | None,
    *,
    path: str,
    operation: str,
    timestamp: datetime,
) -> dict[str, Any]:
    """Structured `extra` for failure and fallback log records."""
    return {
        "path": path,
        "operation": operation,
        "error_kind": classify_error(exc).value if exc is not None else None,
        "timestamp": timestamp.isoformat(),
    }
