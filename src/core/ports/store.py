"""
SEO Store Port.

Protocol for the external document store holding redirect and metadata
records. The store is slow and may be unavailable; implementations must
raise taxonomy errors (src.core.errors) rather than client-library ones:

- StoreTimeoutError: deadline exceeded
- NetworkError: store unreachable
- ServerError: store answered with an error status
- ValidationError: a stored document does not deserialize into a record

A missing record is not an error: lookups return None.
"""

from __future__ import annotations

from typing import Protocol

from src.core.entities import MetadataRecord, RedirectRecord


class SeoStorePort(Protocol):
    """Read-only access to redirect and metadata records."""

    async def find_redirect(self, site_id: str, path: str) -> RedirectRecord | None:
        """Find the redirect whose source equals `path` exactly."""
        ...

    async def find_metadata(self, site_id: str, path: str) -> MetadataRecord | None:
        """Find the custom metadata record for `path`."""
        ...

    async def ping(self) -> None:
        """Raise if the store cannot be reached."""
        ...
