"""
Redirects component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from src.core.entities import RedirectRecord


class RedirectLookupPort(Protocol):
    """Lookup of the redirect whose source equals a path exactly."""

    async def find_redirect(self, site_id: str, path: str) -> RedirectRecord | None:
        """Find redirect by source path."""
        ...
