"""
Public Metadata Routes.

Display metadata for page rendering. Always answers 200 with a complete
set of fields: store problems degrade to pattern/generic defaults.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from src.api.deps import get_resolution_service, get_site_id
from src.services.resolution import ResolutionService

router = APIRouter()


@router.get("/meta")
async def get_page_meta(
    path: str,
    site_id: str = Depends(get_site_id),
    service: ResolutionService = Depends(get_resolution_service),
) -> dict[str, Any]:
    """Resolved metadata plus ready-to-render meta tags."""
    metadata = await service.resolve_metadata(path, site_id)
    return {
        "path": path,
        "site_id": site_id,
        **metadata.to_dict(),
        "meta_tags": [
            {k: v for k, v in vars(tag).items() if v is not None}
            for tag in metadata.to_meta_tags()
        ],
    }
