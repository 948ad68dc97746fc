"""
Health component - error-rate aggregation and system health.
"""

from ._impl import (
    BREAKER_OPEN,
    HIGH_ERROR_RATE,
    MANY_FAILURES,
    STORE_DOWN,
    HealthAggregator,
    build_health_config,
    check_system_health,
    overall_status,
)
from .models import (
    ComponentHealth,
    ComponentStatus,
    ErrorRateHealth,
    FailingKey,
    FailureEvent,
    HealthConfig,
    SystemHealth,
)

__all__ = [
    "BREAKER_OPEN",
    "HIGH_ERROR_RATE",
    "MANY_FAILURES",
    "STORE_DOWN",
    "ComponentHealth",
    "ComponentStatus",
    "ErrorRateHealth",
    "FailingKey",
    "FailureEvent",
    "HealthAggregator",
    "HealthConfig",
    "SystemHealth",
    "build_health_config",
    "check_system_health",
    "overall_status",
]
