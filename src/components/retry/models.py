"""
Retry executor models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.core.errors import ErrorKind


@dataclass(frozen=True)
class RetryConfig:
    """Retry configuration from rules."""

    max_attempts: int = 2
    base_delay_seconds: float = 1.0
    max_jitter_seconds: float = 1.0


@dataclass
class AttemptRecord:
    """One failed attempt, kept for diagnostics."""

    attempt: int
    error_kind: ErrorKind
    message: str
    delay_seconds: float | None = None


@dataclass
class RetryStats:
    """Outcome of the last `execute` call."""

    attempts: int = 0
    failures: list[AttemptRecord] = field(default_factory=list)
    gave_up_early: bool = False
