import os
from functools import lru_cache
from pathlib import Path

from fastapi import HTTPException, Request, status

from src.rules.loader import default_rules_path
from src.services.resolution import ResolutionService


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.rules_path = default_rules_path(self.base_dir)
        self.site_id = os.environ.get("SEO_SITE_ID")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Services ---
def get_resolution_service(request: Request) -> ResolutionService:
    service: ResolutionService | None = getattr(request.app.state, "resolution", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Resolution service not initialised",
        )
    return service


def resolve_site_id(site_id: str | None, service: ResolutionService) -> str:
    """Explicit site id, else SEO_SITE_ID, else the rules default."""
    if site_id:
        return site_id
    settings = get_settings()
    if settings.site_id:
        return settings.site_id
    return service.default_site_id


def get_site_id(request: Request, site_id: str | None = None) -> str:
    return resolve_site_id(site_id, get_resolution_service(request))
