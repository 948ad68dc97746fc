"""
ResolutionService - composition root for page resolution.

Owns the long-lived instances shared by every request:
- one CircuitBreaker and one RetryExecutor guarding the store
- one FallbackProvider (process-lifetime memo map)
- one HealthAggregator

Routing calls resolve_redirect first and, on NoRedirect, resolve_metadata.
Neither raises: redirects fail open and metadata always has a value.
"""

from __future__ import annotations

import random
from collections.abc import Iterable
from dataclasses import dataclass

from src.adapters.clock import SystemClock
from src.components.breaker import BreakerConfig, CircuitBreaker
from src.components.fallback import FallbackProvider, build_fallback_config
from src.components.health import (
    ErrorRateHealth,
    HealthAggregator,
    SystemHealth,
    build_health_config,
    check_system_health,
)
from src.components.metadata import MetadataResolver
from src.components.redirects import RedirectResolver, build_redirect_config
from src.components.retry import RetryConfig, RetryExecutor, SleepFn
from src.core.entities import RedirectRecord
from src.core.outcomes import RedirectOutcome, ResolvedMetadata
from src.core.ports.store import SeoStorePort
from src.core.ports.time import ClockPort
from src.core.services.guarded_store import GuardedStore
from src.rules.models import Rules


@dataclass
class ResolutionService:
    """The operations exposed to routing, authoring and operators."""

    rules: Rules
    clock: ClockPort
    store: SeoStorePort
    guarded_store: GuardedStore
    breaker: CircuitBreaker
    retry: RetryExecutor
    fallback: FallbackProvider
    health: HealthAggregator
    redirects: RedirectResolver
    metadata: MetadataResolver

    @property
    def default_site_id(self) -> str:
        return self.rules.project.site_id

    # --- Request path ---

    async def resolve_redirect(self, path: str, site_id: str | None = None) -> RedirectOutcome:
        return await self.redirects.resolve(path, site_id or self.default_site_id)

    async def resolve_metadata(self, path: str, site_id: str | None = None) -> ResolvedMetadata:
        return await self.metadata.resolve(path, site_id or self.default_site_id)

    async def batch_resolve_redirects(
        self, paths: Iterable[str], site_id: str | None = None
    ) -> dict[str, RedirectOutcome]:
        return await self.redirects.batch_resolve(paths, site_id or self.default_site_id)

    # --- Authoring ---

    async def validate_redirect(self, record: RedirectRecord) -> list[str]:
        """Raise if `record` must not be written; return its forward chain otherwise."""
        return await self.redirects.validate_redirect(record)

    # --- Operations ---

    async def get_system_health(self) -> SystemHealth:
        return await check_system_health(
            store=self.store,
            breaker=self.breaker,
            aggregator=self.health,
            fallback=self.fallback,
            clock=self.clock,
            ping_timeout_seconds=self.rules.health.store_ping_timeout_seconds,
        )

    def get_error_rate(self, window_seconds: float | None = None) -> ErrorRateHealth:
        return self.health.get_health(window_seconds)

    def preload_fallbacks(self, paths: Iterable[str]) -> int:
        return self.fallback.preload(paths)

    def clear_fallback_cache(self) -> None:
        self.fallback.clear()

    def clear_health(self) -> None:
        self.health.clear()


def create_resolution_service(
    rules: Rules,
    store: SeoStorePort,
    clock: ClockPort | None = None,
    sleep: SleepFn | None = None,
    rng: random.Random | None = None,
) -> ResolutionService:
    """Wire the resolution layer from rules and a store adapter."""
    clock = clock or SystemClock()

    breaker = CircuitBreaker(
        clock,
        BreakerConfig(
            failure_threshold=rules.breaker.failure_threshold,
            recovery_timeout_seconds=rules.breaker.recovery_timeout_seconds,
        ),
    )
    retry = RetryExecutor(
        RetryConfig(
            max_attempts=rules.retry.max_attempts,
            base_delay_seconds=rules.retry.base_delay_seconds,
            max_jitter_seconds=rules.retry.max_jitter_seconds,
        ),
        sleep=sleep,
        rng=rng,
    )
    health = HealthAggregator(clock, build_health_config(rules.health))
    fallback = FallbackProvider(build_fallback_config(rules.fallback))
    guarded = GuardedStore(store, breaker, retry, health, clock)

    return ResolutionService(
        rules=rules,
        clock=clock,
        store=store,
        guarded_store=guarded,
        breaker=breaker,
        retry=retry,
        fallback=fallback,
        health=health,
        redirects=RedirectResolver(guarded, clock, build_redirect_config(rules.redirects)),
        metadata=MetadataResolver(guarded, fallback, clock),
    )
