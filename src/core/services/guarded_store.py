"""
GuardedStore - the store port wrapped in retry, breaker and health reporting.

Call shape:

    breaker.execute(lambda: retry.execute(store_call))

so one breaker failure is booked per exhausted retry sequence, and calls are
rejected outright while the breaker is open. Every outcome is reported to
the health aggregator; failures are logged and re-raised as taxonomy errors
for the resolvers to absorb.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from src.components.breaker import CircuitBreaker
from src.components.health import HealthAggregator
from src.components.retry import RetryExecutor
from src.core.entities import MetadataRecord, RedirectRecord
from src.core.errors import as_resolution_error, failure_extra
from src.core.ports.store import SeoStorePort
from src.core.ports.time import ClockPort

logger = logging.getLogger(__name__)

T = TypeVar("T")

OPERATION_FIND_REDIRECT = "find_redirect"
OPERATION_FIND_METADATA = "find_metadata"


class GuardedStore:
    """SeoStorePort implementation guarding another store."""

    def __init__(
        self,
        store: SeoStorePort,
        breaker: CircuitBreaker,
        retry: RetryExecutor,
        aggregator: HealthAggregator,
        clock: ClockPort,
    ) -> None:
        self._store = store
        self._breaker = breaker
        self._retry = retry
        self._aggregator = aggregator
        self._clock = clock

    @property
    def inner(self) -> SeoStorePort:
        return self._store

    async def find_redirect(self, site_id: str, path: str) -> RedirectRecord | None:
        return await self._call(
            OPERATION_FIND_REDIRECT,
            path,
            lambda: self._store.find_redirect(site_id, path),
        )

    async def find_metadata(self, site_id: str, path: str) -> MetadataRecord | None:
        return await self._call(
            OPERATION_FIND_METADATA,
            path,
            lambda: self._store.find_metadata(site_id, path),
        )

    async def ping(self) -> None:
        # Health checks go straight to the store
        await self._store.ping()

    async def _call(
        self,
        operation: str,
        path: str,
        fn: Callable[[], Awaitable[T]],
    ) -> T:
        try:
            result = await self._breaker.execute(lambda: self._retry.execute(fn))
        except Exception as exc:
            err = as_resolution_error(exc, path=path, operation=operation)
            self._aggregator.record_failure(operation, path, err.kind)
            logger.warning(
                "Store %s failed for %s: %s",
                operation,
                path,
                err.message,
                extra=failure_extra(
                    err, path=path, operation=operation, timestamp=self._clock.now_utc()
                ),
            )
            if err is exc:
                raise
            raise err from exc

        self._aggregator.record_success(operation, path)
        return result
