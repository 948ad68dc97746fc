"""
Tests for RetryExecutor.
"""

from __future__ import annotations

import random

import pytest
from tenacity.wait import wait_base

from src.components.retry import (
    RetryConfig,
    RetryExecutor,
    RetryStats,
    backoff_wait,
    compute_backoff,
)
from src.core.errors import ErrorKind, NetworkError, ServerError, StoreTimeoutError, ValidationError
from tests.fakes import RecordingSleep


class Flaky:
    """Operation failing with the given errors before succeeding."""

    def __init__(self, *errors: BaseException) -> None:
        self.errors = list(errors)
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return "ok"


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


def _executor(sleep: RecordingSleep, **overrides: float) -> RetryExecutor:
    config = RetryConfig(**{"max_attempts": 2, **overrides})
    return RetryExecutor(config, sleep=sleep, rng=random.Random(1))


class TestComputeBackoff:
    def test_exponential_without_jitter(self) -> None:
        config = RetryConfig(base_delay_seconds=1.0, max_jitter_seconds=0)
        assert [compute_backoff(n, config) for n in (1, 2, 3, 4)] == [1.0, 2.0, 4.0, 8.0]

    def test_jitter_bounded(self) -> None:
        config = RetryConfig(base_delay_seconds=1.0, max_jitter_seconds=1.0)
        rng = random.Random(3)
        for attempt in (1, 2, 3):
            delay = compute_backoff(attempt, config, rng)
            base = 2 ** (attempt - 1)
            assert base <= delay <= base + 1.0

    def test_same_seed_same_delays(self) -> None:
        config = RetryConfig(base_delay_seconds=0.5, max_jitter_seconds=0.5)
        first = [compute_backoff(n, config, random.Random(11)) for n in (1, 2, 3)]
        second = [compute_backoff(n, config, random.Random(11)) for n in (1, 2, 3)]
        assert first == second

    def test_strategy_is_a_tenacity_wait(self) -> None:
        assert isinstance(backoff_wait(RetryConfig()), wait_base)


class TestExecute:
    @pytest.mark.asyncio
    async def test_success_first_try(self, sleep: RecordingSleep) -> None:
        op = Flaky()
        assert await _executor(sleep).execute(op) == "ok"
        assert op.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_retries_transient_failure(self, sleep: RecordingSleep) -> None:
        op = Flaky(StoreTimeoutError())
        assert await _executor(sleep).execute(op) == "ok"
        assert op.calls == 2
        assert len(sleep.delays) == 1
        assert 1.0 <= sleep.delays[0] <= 2.0

    @pytest.mark.asyncio
    async def test_final_failure_propagates_last_error(self, sleep: RecordingSleep) -> None:
        first, last = NetworkError("first"), NetworkError("last")
        op = Flaky(first, last)

        with pytest.raises(NetworkError) as exc_info:
            await _executor(sleep).execute(op)

        assert exc_info.value is last
        assert op.calls == 2
        assert len(sleep.delays) == 1

    @pytest.mark.asyncio
    async def test_validation_error_single_attempt(self, sleep: RecordingSleep) -> None:
        op = Flaky(ValidationError("bad"))
        stats = RetryStats()

        with pytest.raises(ValidationError):
            await _executor(sleep, max_attempts=5).execute(op, stats)

        assert op.calls == 1
        assert sleep.delays == []
        assert stats.gave_up_early is True

    @pytest.mark.asyncio
    async def test_client_server_error_not_retried(self, sleep: RecordingSleep) -> None:
        op = Flaky(ServerError(status_code=400))
        with pytest.raises(ServerError):
            await _executor(sleep, max_attempts=3).execute(op)
        assert op.calls == 1

    @pytest.mark.asyncio
    async def test_foreign_connection_error_retried(self, sleep: RecordingSleep) -> None:
        op = Flaky(ConnectionResetError())
        assert await _executor(sleep).execute(op) == "ok"
        assert op.calls == 2

    @pytest.mark.asyncio
    async def test_backoff_doubles(self, sleep: RecordingSleep) -> None:
        op = Flaky(NetworkError(), NetworkError(), NetworkError())
        executor = _executor(sleep, max_attempts=4, max_jitter_seconds=0)

        assert await executor.execute(op) == "ok"
        assert sleep.delays == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_stats_record_attempts(self, sleep: RecordingSleep) -> None:
        op = Flaky(StoreTimeoutError(), StoreTimeoutError())
        stats = RetryStats()

        with pytest.raises(StoreTimeoutError):
            await _executor(sleep).execute(op, stats)

        assert stats.attempts == 2
        assert [f.error_kind for f in stats.failures] == [ErrorKind.TIMEOUT, ErrorKind.TIMEOUT]
        assert stats.failures[0].delay_seconds is not None
        assert stats.failures[1].delay_seconds is None

    @pytest.mark.asyncio
    async def test_seeded_delays_reproducible(self) -> None:
        delays: list[list[float]] = []
        for _ in range(2):
            sleep = RecordingSleep()
            config = RetryConfig(max_attempts=3, base_delay_seconds=1.0, max_jitter_seconds=1.0)
            executor = RetryExecutor(config, sleep=sleep, rng=random.Random(5))
            await executor.execute(Flaky(NetworkError(), NetworkError()))
            delays.append(list(sleep.delays))

        assert delays[0] == delays[1]
        assert 1.0 <= delays[0][0] <= 2.0
        assert 2.0 <= delays[0][1] <= 3.0

    @pytest.mark.asyncio
    async def test_permanent_error_after_transient(self, sleep: RecordingSleep) -> None:
        op = Flaky(NetworkError(), ValidationError("bad path"))
        stats = RetryStats()

        with pytest.raises(ValidationError):
            await _executor(sleep, max_attempts=5).execute(op, stats)

        assert op.calls == 2
        assert stats.attempts == 2
        assert [f.error_kind for f in stats.failures] == [ErrorKind.NETWORK, ErrorKind.VALIDATION]
        assert stats.gave_up_early is True
        assert len(sleep.delays) == 1
