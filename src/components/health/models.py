"""
Health component models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from src.core.errors import ErrorKind


@dataclass(frozen=True)
class HealthConfig:
    """Health configuration from rules."""

    window_seconds: float = 3600.0
    unhealthy_error_rate: float = 0.1
    warning_error_rate: float = 0.05
    many_failures_threshold: int = 50
    max_events_per_key: int = 500
    max_keys: int = 10_000
    recent_failures_limit: int = 10
    top_failing_limit: int = 5


@dataclass(frozen=True)
class FailureEvent:
    """One recorded failure."""

    operation: str
    path: str
    error_kind: ErrorKind
    at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "path": self.path,
            "error_kind": self.error_kind.value,
            "at": self.at.isoformat(),
        }


@dataclass(frozen=True)
class FailingKey:
    """Failure count for one (operation, path) inside the window."""

    operation: str
    path: str
    failures: int
    total_failures: int
    last_error_kind: ErrorKind | None = None
    last_failure_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "path": self.path,
            "failures": self.failures,
            "total_failures": self.total_failures,
            "last_error_kind": self.last_error_kind.value if self.last_error_kind else None,
            "last_failure_at": self.last_failure_at.isoformat() if self.last_failure_at else None,
        }


@dataclass(frozen=True)
class ErrorRateHealth:
    """Error-rate verdict over a sliding window. Advisory only."""

    healthy: bool
    error_rate: float
    failures: int
    successes: int
    window_seconds: float
    recent_failures: list[FailureEvent] = field(default_factory=list)
    top_failing: list[FailingKey] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "healthy": self.healthy,
            "error_rate": round(self.error_rate, 4),
            "failures": self.failures,
            "successes": self.successes,
            "window_seconds": self.window_seconds,
            "recent_failures": [f.to_dict() for f in self.recent_failures],
            "top_failing": [k.to_dict() for k in self.top_failing],
            "recommendations": list(self.recommendations),
        }


class ComponentStatus(str, Enum):
    """Per-component and overall health status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass(frozen=True)
class ComponentHealth:
    """Status of one system component."""

    status: ComponentStatus
    details: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"status": self.status.value, **self.details}
        if self.error:
            result["error"] = self.error
        return result


@dataclass(frozen=True)
class SystemHealth:
    """Aggregated resolution-layer health."""

    overall: ComponentStatus
    components: dict[str, ComponentHealth]
    recommendations: list[str]
    checked_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall": self.overall.value,
            "components": {name: c.to_dict() for name, c in self.components.items()},
            "recommendations": list(self.recommendations),
            "checked_at": self.checked_at.isoformat(),
        }
