"""
Retry component - exponential backoff around a single store call.
"""

from ._impl import RetryExecutor, SleepFn, backoff_wait, compute_backoff
from .models import AttemptRecord, RetryConfig, RetryStats

__all__ = [
    "AttemptRecord",
    "RetryConfig",
    "RetryExecutor",
    "RetryStats",
    "SleepFn",
    "backoff_wait",
    "compute_backoff",
]
