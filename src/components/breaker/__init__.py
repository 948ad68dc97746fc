"""
Breaker component - circuit breaker guarding the store.
"""

from ._impl import CircuitBreaker
from .models import BreakerConfig, BreakerSnapshot, BreakerState

__all__ = [
    "BreakerConfig",
    "BreakerSnapshot",
    "BreakerState",
    "CircuitBreaker",
]
