"""
Metadata component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.core.outcomes import ResolvedMetadata


@dataclass(frozen=True)
class ResolveMetadataInput:
    """Input for resolving display metadata of a page."""

    path: str
    site_id: str = "default"


@dataclass
class ResolveMetadataOutput:
    """
    Output for metadata resolution.

    `metadata` is always populated. `fallback_reason` names why the custom
    tier was skipped (not_found or an error kind), None for custom records.
    """

    metadata: ResolvedMetadata
    fallback_reason: str | None = None
    success: bool = True
