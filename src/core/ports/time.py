"""
Clock Port.

Two clocks are needed:
- now_utc(): wall-clock timestamps for logs and health reports
- monotonic(): elapsed-time arithmetic (breaker recovery, sliding windows),
  immune to wall-clock adjustments
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class ClockPort(Protocol):
    """Time source interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...

    def monotonic(self) -> float:
        """Get a monotonic reading in seconds."""
        ...
