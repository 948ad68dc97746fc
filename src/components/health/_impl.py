"""
Health aggregation - sliding-window error rates and the system verdict.

HealthAggregator keeps bounded, timestamped success/failure events per
(operation, path) and derives an error rate over a window:

    error_rate = failures / (failures + successes)
    healthy    = error_rate < unhealthy_error_rate

check_system_health combines the store ping, breaker state, error rate and
a fallback probe into healthy / degraded / unhealthy. Both are advisory:
nothing here changes how requests are resolved.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import OrderedDict, deque
from dataclasses import dataclass, field
from datetime import datetime

from src.components.breaker import BreakerState, CircuitBreaker
from src.components.fallback import FallbackProvider
from src.core.errors import ErrorKind
from src.core.ports.store import SeoStorePort
from src.core.ports.time import ClockPort
from src.rules.models import HealthRules

from .models import (
    ComponentHealth,
    ComponentStatus,
    ErrorRateHealth,
    FailingKey,
    FailureEvent,
    HealthConfig,
    SystemHealth,
)

logger = logging.getLogger(__name__)

HIGH_ERROR_RATE = "High error rate detected - check store connectivity"
MANY_FAILURES = "Many recent failures - verify the circuit breaker is protecting callers"
BREAKER_OPEN = "Circuit breaker is not closed - store calls are short-circuited and fallbacks served"
STORE_DOWN = "Store unreachable - check the store URL and availability"

FALLBACK_PROBE_PATH = "/health-check"


def build_health_config(rules: HealthRules | None = None) -> HealthConfig:
    """Build health config from rules."""
    if rules is None:
        return HealthConfig()
    return HealthConfig(
        window_seconds=rules.window_seconds,
        unhealthy_error_rate=rules.unhealthy_error_rate,
        warning_error_rate=rules.warning_error_rate,
        many_failures_threshold=rules.many_failures_threshold,
        max_events_per_key=rules.max_events_per_key,
        max_keys=rules.max_keys,
    )


@dataclass
class _Event:
    mono: float
    ok: bool
    at: datetime
    error_kind: ErrorKind | None = None


@dataclass
class _KeyStats:
    events: deque[_Event]
    total_failures: int = 0
    total_successes: int = 0
    last_failure_at: datetime | None = None
    last_error_kind: ErrorKind | None = None


@dataclass
class _WindowCounts:
    failures: int = 0
    successes: int = 0
    recent: list[FailureEvent] = field(default_factory=list)
    per_key: list[FailingKey] = field(default_factory=list)


class HealthAggregator:
    """
    Per-(operation, path) success/failure counters over a sliding window.

    Keys are created per distinct request path. At most `max_keys` are kept;
    recording for a new key beyond that evicts the least recently updated one.
    """

    def __init__(self, clock: ClockPort, config: HealthConfig | None = None) -> None:
        self._clock = clock
        self._config = config or HealthConfig()
        self._lock = threading.Lock()
        self._stats: OrderedDict[tuple[str, str], _KeyStats] = OrderedDict()

    @property
    def config(self) -> HealthConfig:
        return self._config

    def record_failure(self, operation: str, path: str, error_kind: ErrorKind) -> None:
        event = _Event(
            mono=self._clock.monotonic(),
            ok=False,
            at=self._clock.now_utc(),
            error_kind=error_kind,
        )
        with self._lock:
            stats = self._stats_for(operation, path)
            stats.events.append(event)
            stats.total_failures += 1
            stats.last_failure_at = event.at
            stats.last_error_kind = error_kind

    def record_success(self, operation: str, path: str) -> None:
        event = _Event(mono=self._clock.monotonic(), ok=True, at=self._clock.now_utc())
        with self._lock:
            stats = self._stats_for(operation, path)
            stats.events.append(event)
            stats.total_successes += 1

    def get_health(self, window_seconds: float | None = None) -> ErrorRateHealth:
        """Error-rate verdict over the last `window_seconds` (config default)."""
        window = window_seconds if window_seconds is not None else self._config.window_seconds
        cutoff = self._clock.monotonic() - window

        with self._lock:
            counts = self._count_since(cutoff)

        total = counts.failures + counts.successes
        error_rate = counts.failures / total if total else 0.0

        recommendations: list[str] = []
        if error_rate > self._config.warning_error_rate:
            recommendations.append(HIGH_ERROR_RATE)
        if counts.failures > self._config.many_failures_threshold:
            recommendations.append(MANY_FAILURES)

        recent = sorted(counts.recent, key=lambda f: f.at, reverse=True)
        top = sorted(counts.per_key, key=lambda k: (-k.failures, k.operation, k.path))

        return ErrorRateHealth(
            healthy=error_rate < self._config.unhealthy_error_rate,
            error_rate=error_rate,
            failures=counts.failures,
            successes=counts.successes,
            window_seconds=window,
            recent_failures=recent[: self._config.recent_failures_limit],
            top_failing=top[: self._config.top_failing_limit],
            recommendations=recommendations,
        )

    def clear(self) -> None:
        with self._lock:
            self._stats.clear()

    # --- Internal (lock held) ---

    def _stats_for(self, operation: str, path: str) -> _KeyStats:
        key = (operation, path)
        stats = self._stats.get(key)
        if stats is not None:
            self._stats.move_to_end(key)
            return stats
        while len(self._stats) >= self._config.max_keys:
            self._stats.popitem(last=False)
        stats = _KeyStats(events=deque(maxlen=self._config.max_events_per_key))
        self._stats[key] = stats
        return stats

    def _count_since(self, cutoff: float) -> _WindowCounts:
        counts = _WindowCounts()
        for (operation, path), stats in self._stats.items():
            key_failures = 0
            for event in stats.events:
                if event.mono < cutoff:
                    continue
                if event.ok:
                    counts.successes += 1
                    continue
                key_failures += 1
                counts.recent.append(
                    FailureEvent(
                        operation=operation,
                        path=path,
                        error_kind=event.error_kind or ErrorKind.UNKNOWN,
                        at=event.at,
                    )
                )
            counts.failures += key_failures
            if key_failures:
                counts.per_key.append(
                    FailingKey(
                        operation=operation,
                        path=path,
                        failures=key_failures,
                        total_failures=stats.total_failures,
                        last_error_kind=stats.last_error_kind,
                        last_failure_at=stats.last_failure_at,
                    )
                )
        return counts


# --- System Health ---


async def _check_store(store: SeoStorePort, timeout: float) -> ComponentHealth:
    try:
        await asyncio.wait_for(store.ping(), timeout=timeout)
    except Exception as exc:
        logger.warning("Store health check failed: %s", exc)
        return ComponentHealth(
            status=ComponentStatus.UNHEALTHY,
            error=str(exc) or type(exc).__name__,
        )
    return ComponentHealth(status=ComponentStatus.HEALTHY)


def _check_breaker(breaker: CircuitBreaker) -> ComponentHealth:
    snapshot = breaker.current_state()
    status = (
        ComponentStatus.HEALTHY
        if snapshot.state == BreakerState.CLOSED
        else ComponentStatus.DEGRADED
    )
    return ComponentHealth(status=status, details=snapshot.to_dict())


def _check_error_rate(error_rate: ErrorRateHealth) -> ComponentHealth:
    return ComponentHealth(
        status=ComponentStatus.HEALTHY if error_rate.healthy else ComponentStatus.DEGRADED,
        details={
            "error_rate": round(error_rate.error_rate, 4),
            "failures": error_rate.failures,
            "successes": error_rate.successes,
        },
    )


def _check_fallback(fallback: FallbackProvider) -> ComponentHealth:
    try:
        probe = fallback.get_metadata(FALLBACK_PROBE_PATH)
    except Exception as exc:
        logger.warning("Fallback probe failed: %s", exc)
        return ComponentHealth(status=ComponentStatus.DEGRADED, error=str(exc))
    if not (probe.title and probe.description):
        return ComponentHealth(status=ComponentStatus.DEGRADED, error="empty fallback metadata")
    return ComponentHealth(
        status=ComponentStatus.HEALTHY,
        details={"cached_paths": fallback.cache_size},
    )


def overall_status(components: dict[str, ComponentHealth]) -> ComponentStatus:
    """Any unhealthy -> unhealthy; any degraded -> degraded; else healthy."""
    statuses = {c.status for c in components.values()}
    if ComponentStatus.UNHEALTHY in statuses:
        return ComponentStatus.UNHEALTHY
    if ComponentStatus.DEGRADED in statuses:
        return ComponentStatus.DEGRADED
    return ComponentStatus.HEALTHY


async def check_system_health(
    *,
    store: SeoStorePort,
    breaker: CircuitBreaker,
    aggregator: HealthAggregator,
    fallback: FallbackProvider,
    clock: ClockPort,
    ping_timeout_seconds: float = 2.0,
) -> SystemHealth:
    """
    Build the system health report.

    The store is pinged directly, bypassing the breaker, so a health check
    never counts as a store failure.
    """
    error_rate = aggregator.get_health()

    components = {
        "store": await _check_store(store, ping_timeout_seconds),
        "circuit_breaker": _check_breaker(breaker),
        "error_rate": _check_error_rate(error_rate),
        "fallback": _check_fallback(fallback),
    }

    recommendations = list(error_rate.recommendations)
    if components["circuit_breaker"].status != ComponentStatus.HEALTHY:
        recommendations.append(BREAKER_OPEN)
    if components["store"].status == ComponentStatus.UNHEALTHY:
        recommendations.append(STORE_DOWN)

    return SystemHealth(
        overall=overall_status(components),
        components=components,
        recommendations=recommendations,
        checked_at=clock.now_utc(),
    )
