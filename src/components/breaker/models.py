"""
Circuit breaker models.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class BreakerState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # calls pass through
    OPEN = "open"  # calls rejected immediately
    HALF_OPEN = "half_open"  # one trial call allowed


@dataclass(frozen=True)
class BreakerConfig:
    """Breaker configuration from rules."""

    failure_threshold: int = 5
    recovery_timeout_seconds: float = 60.0


@dataclass(frozen=True)
class BreakerSnapshot:
    """Point-in-time view of breaker state."""

    state: BreakerState
    failures: int
    last_failure_at: datetime | None = None
    seconds_until_trial: float | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "state": self.state.value,
            "failures": self.failures,
            "last_failure_at": self.last_failure_at.isoformat() if self.last_failure_at else None,
            "seconds_until_trial": self.seconds_until_trial,
        }
