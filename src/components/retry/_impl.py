"""
RetryExecutor - bounded retries with exponential backoff and jitter.

Key behaviors:
- Attempt the operation up to max_attempts times
- Before retry n+1, sleep base_delay * 2^(n-1) + uniform(0, max_jitter)
- Only timeout / network_error / server_error(5xx) are retried; anything
  else propagates after the first attempt
- The last error always propagates unchanged
- Sleeping is a suspension point (asyncio.sleep), never a blocking sleep

Built on tenacity's AsyncRetrying; the jitter draws from an injectable
random source so backoff is reproducible under test.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from src.core.errors import ErrorKind, classify_error, is_retryable

from .models import AttemptRecord, RetryConfig, RetryStats

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]

DEFAULT_CONFIG = RetryConfig()


class wait_jitter(wait_base):
    """Uniform jitter in [0, max_jitter] from a given random source."""

    def __init__(self, max_jitter: float, rng: random.Random | None = None) -> None:
        self.max_jitter = max_jitter
        self.rng = rng

    def __call__(self, retry_state: RetryCallState) -> float:
        if self.max_jitter <= 0:
            return 0.0
        source = self.rng or random
        return source.uniform(0.0, self.max_jitter)


def backoff_wait(config: RetryConfig, rng: random.Random | None = None) -> wait_base:
    """Tenacity wait strategy for `config`."""
    return wait_exponential(multiplier=config.base_delay_seconds, exp_base=2) + wait_jitter(
        config.max_jitter_seconds, rng
    )


def compute_backoff(
    attempt: int,
    config: RetryConfig = DEFAULT_CONFIG,
    rng: random.Random | None = None,
) -> float:
    """
    Delay before the retry that follows failed attempt number `attempt` (1-based).
    """
    state = RetryCallState(retry_object=None, fn=None, args=(), kwargs={})
    state.attempt_number = max(1, attempt)
    return float(backoff_wait(config, rng)(state))


class RetryExecutor:
    """Wraps a single async operation with bounded retries."""

    def __init__(
        self,
        config: RetryConfig | None = None,
        sleep: SleepFn | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config or DEFAULT_CONFIG
        self._sleep = sleep or asyncio.sleep
        self._rng = rng or random.Random()

    @property
    def config(self) -> RetryConfig:
        return self._config

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        stats: RetryStats | None = None,
    ) -> T:
        """
        Run `operation`, retrying retryable failures.

        Args:
            operation: Zero-argument coroutine factory (called once per attempt).
            stats: Optional collector filled with per-attempt diagnostics.

        Raises:
            The last error raised by `operation`.
        """
        max_attempts = max(1, self._config.max_attempts)

        def before(retry_state: RetryCallState) -> None:
            if stats is not None:
                stats.attempts = retry_state.attempt_number

        def after(retry_state: RetryCallState) -> None:
            # Called for retryable failures only
            if stats is not None:
                stats.failures.append(_attempt_record(retry_state))

        def before_sleep(retry_state: RetryCallState) -> None:
            delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
            if stats is not None and stats.failures:
                stats.failures[-1].delay_seconds = delay
            logger.debug(
                "Attempt %d/%d failed (%s), retrying in %.2fs",
                retry_state.attempt_number,
                max_attempts,
                _error_kind(retry_state),
                delay,
            )

        retrying = AsyncRetrying(
            retry=retry_if_exception(is_retryable),
            stop=stop_after_attempt(max_attempts),
            wait=backoff_wait(self._config, self._rng),
            sleep=self._sleep,
            before=before,
            after=after,
            before_sleep=before_sleep,
            reraise=True,
        )

        try:
            return await retrying(operation)
        except Exception as exc:
            if stats is not None and not is_retryable(exc):
                attempt = stats.attempts or 1
                stats.failures.append(
                    AttemptRecord(attempt=attempt, error_kind=classify_error(exc), message=str(exc))
                )
                stats.gave_up_early = attempt < max_attempts
            raise


def _failure(retry_state: RetryCallState) -> BaseException | None:
    if retry_state.outcome is None or not retry_state.outcome.failed:
        return None
    return retry_state.outcome.exception()


def _error_kind(retry_state: RetryCallState) -> str:
    exc = _failure(retry_state)
    return classify_error(exc).value if exc is not None else ErrorKind.UNKNOWN.value


def _attempt_record(retry_state: RetryCallState) -> AttemptRecord:
    exc = _failure(retry_state)
    return AttemptRecord(
        attempt=retry_state.attempt_number,
        error_kind=classify_error(exc) if exc is not None else ErrorKind.UNKNOWN,
        message=str(exc) if exc is not None else "",
    )
