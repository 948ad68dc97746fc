"""
MetadataResolver - display metadata that never fails.

Resolution order:
1. custom: the store's MetadataRecord for the exact path, with social fields
   inheriting title/description when absent
2. pattern / generic: FallbackProvider defaults

Not found and every failure (breaker open, retries exhausted, malformed
record) land on the fallback; the activation is logged with path,
operation, error kind and timestamp. Custom records are never cached.
"""

from __future__ import annotations

import logging

from src.components.fallback import FallbackProvider
from src.core.entities import MetadataRecord
from src.core.errors import as_resolution_error, failure_extra
from src.core.outcomes import MetadataTier, ResolvedMetadata, SocialPreview
from src.core.ports.time import ClockPort

from .ports import MetadataLookupPort

logger = logging.getLogger(__name__)

OPERATION_LOOKUP = "metadata_lookup"


def merge_record(record: MetadataRecord) -> ResolvedMetadata:
    """Resolve a custom record, filling social fields from the page fields."""
    social = record.social
    return ResolvedMetadata(
        title=record.title,
        description=record.description,
        robots=record.robots,
        social=SocialPreview(
            title=social.title or record.title,
            description=social.description or record.description,
            image=social.image or None,
        ),
        tier=MetadataTier.CUSTOM,
    )


class MetadataResolver:
    """Resolves metadata for a path through the custom/pattern/generic tiers."""

    def __init__(
        self,
        store: MetadataLookupPort,
        fallback: FallbackProvider,
        clock: ClockPort,
    ) -> None:
        self._store = store
        self._fallback = fallback
        self._clock = clock

    @property
    def fallback(self) -> FallbackProvider:
        return self._fallback

    async def resolve(self, path: str, site_id: str) -> ResolvedMetadata:
        metadata, _ = await self.resolve_with_reason(path, site_id)
        return metadata

    async def resolve_with_reason(
        self, path: str, site_id: str
    ) -> tuple[ResolvedMetadata, str | None]:
        """Resolve and report why the custom tier was skipped (None if it was used)."""
        try:
            record = await self._store.find_metadata(site_id, path)
        except Exception as exc:
            err = as_resolution_error(exc, path=path, operation=OPERATION_LOOKUP)
            logger.info(
                "Metadata fallback activated for %s (%s)",
                path,
                err.kind.value,
                extra=failure_extra(
                    err, path=path, operation=OPERATION_LOOKUP, timestamp=self._clock.now_utc()
                ),
            )
            return self._fallback.get_metadata(path), err.kind.value

        if record is None:
            logger.debug("No custom metadata for %s, using defaults", path)
            return self._fallback.get_metadata(path), "not_found"

        return merge_record(record), None
