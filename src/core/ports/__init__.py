# Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.store import SeoStorePort
from src.core.ports.time import ClockPort

__all__ = [
    "ClockPort",
    "SeoStorePort",
]
