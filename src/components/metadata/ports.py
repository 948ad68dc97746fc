"""
Metadata component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from src.core.entities import MetadataRecord


class MetadataLookupPort(Protocol):
    """Lookup of the custom metadata record for a path."""

    async def find_metadata(self, site_id: str, path: str) -> MetadataRecord | None:
        """Find metadata by page path."""
        ...
