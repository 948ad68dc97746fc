"""
CircuitBreaker - fail fast while the store is unhealthy.

States:
    closed: calls pass through
    open: calls rejected with CircuitOpenError
    half_open: exactly one trial call allowed

Transitions:
- success in any state -> closed, failures reset to 0
- failure -> failures += 1; at failure_threshold -> open, last_failure_at = now
- open and recovery_timeout elapsed since last failure -> half_open
- half_open failure -> open again with a refreshed last_failure_at
- half_open trial cancelled -> stays half_open, next caller gets the trial

Errors whose kind proves the store answered (validation_error, not_found)
are booked as successes and re-raised.

State is shared by every concurrent resolution. All reads and writes happen
under a lock, and nothing is awaited while the lock is held.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TypeVar

from src.core.errors import STORE_ANSWERED_KINDS, CircuitOpenError, classify_error
from src.core.ports.time import ClockPort

from .models import BreakerConfig, BreakerSnapshot, BreakerState

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CONFIG = BreakerConfig()


class CircuitBreaker:
    """Consecutive-failure circuit breaker around async operations."""

    def __init__(
        self,
        clock: ClockPort,
        config: BreakerConfig | None = None,
        name: str = "store",
    ) -> None:
        self._clock = clock
        self._config = config or DEFAULT_CONFIG
        self.name = name

        self._lock = threading.Lock()
        self._state = BreakerState.CLOSED
        self._failures = 0
        self._last_failure_mono: float | None = None
        self._last_failure_at: datetime | None = None
        self._trial_in_flight = False

    @property
    def config(self) -> BreakerConfig:
        return self._config

    # --- Public API ---

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run `operation` if the breaker admits it.

        Raises CircuitOpenError without calling `operation` when open.
        Any error raised by `operation` propagates after being booked.
        """
        is_trial = self._admit()

        try:
            result = await operation()
        except Exception as exc:
            if classify_error(exc) in STORE_ANSWERED_KINDS:
                self._on_success(is_trial)
            else:
                self._on_failure(is_trial)
            raise
        except BaseException:
            # Cancelled: no verdict on the store, but the trial slot is freed
            self._release_trial(is_trial)
            raise

        self._on_success(is_trial)
        return result

    def current_state(self) -> BreakerSnapshot:
        """Get the current state without mutating it."""
        with self._lock:
            remaining = None
            if self._state == BreakerState.OPEN and self._last_failure_mono is not None:
                elapsed = self._clock.monotonic() - self._last_failure_mono
                remaining = max(0.0, self._config.recovery_timeout_seconds - elapsed)
            return BreakerSnapshot(
                state=self._state,
                failures=self._failures,
                last_failure_at=self._last_failure_at,
                seconds_until_trial=remaining,
            )

    def reset(self) -> None:
        """Force the breaker closed (operator action)."""
        with self._lock:
            self._transition(BreakerState.CLOSED)
            self._failures = 0
            self._trial_in_flight = False

    # --- Internals ---

    def _admit(self) -> bool:
        """Decide whether a call may proceed. Returns True for a half-open trial."""
        with self._lock:
            if self._state == BreakerState.CLOSED:
                return False

            if self._state == BreakerState.OPEN:
                if not self._recovery_elapsed():
                    raise CircuitOpenError(f"Circuit breaker '{self.name}' is open")
                self._transition(BreakerState.HALF_OPEN)

            # half_open: only one trial at a time
            if self._trial_in_flight:
                raise CircuitOpenError(f"Circuit breaker '{self.name}' is half-open, trial in flight")
            self._trial_in_flight = True
            return True

    def _recovery_elapsed(self) -> bool:
        if self._last_failure_mono is None:
            return True
        elapsed = self._clock.monotonic() - self._last_failure_mono
        return elapsed >= self._config.recovery_timeout_seconds

    def _release_trial(self, is_trial: bool) -> None:
        if not is_trial:
            return
        with self._lock:
            self._trial_in_flight = False

    def _on_success(self, is_trial: bool) -> None:
        with self._lock:
            if is_trial:
                self._trial_in_flight = False
            self._failures = 0
            if self._state != BreakerState.CLOSED:
                self._transition(BreakerState.CLOSED)

    def _on_failure(self, is_trial: bool) -> None:
        with self._lock:
            if is_trial:
                self._trial_in_flight = False
            self._failures += 1
            self._last_failure_mono = self._clock.monotonic()
            self._last_failure_at = self._clock.now_utc()

            if self._state == BreakerState.HALF_OPEN:
                self._transition(BreakerState.OPEN)
            elif (
                self._state == BreakerState.CLOSED
                and self._failures >= self._config.failure_threshold
            ):
                self._transition(BreakerState.OPEN)

    def _transition(self, new_state: BreakerState) -> None:
        old_state = self._state
        if old_state == new_state:
            return
        self._state = new_state
        log = logger.warning if new_state == BreakerState.OPEN else logger.info
        log(
            "Circuit breaker %s: %s -> %s (failures=%d)",
            self.name,
            old_state.value,
            new_state.value,
            self._failures,
            extra={"breaker": self.name, "from_state": old_state.value, "to_state": new_state.value},
        )
