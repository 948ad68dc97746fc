"""
Public Redirects Routes.

Public routing integration for stored redirects.

Key behaviors:
- Middleware-style redirect resolution before any page handler runs
- Preserves query parameters (especially UTM)
- Returns the stored status code (301/302/303/307/308)
- Store trouble never blocks a request: resolution fails open
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import parse_qs, quote, urlencode, urlparse

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from src.api.deps import get_resolution_service, get_site_id, resolve_site_id
from src.core.outcomes import Redirect
from src.services.resolution import ResolutionService

logger = logging.getLogger(__name__)

router = APIRouter()

REDIRECT_SOURCE = "seo-system"

UTM_PARAMS = frozenset(
    {
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "utm_content",
        "utm_term",
    }
)


# --- Helper Functions ---


def preserve_query_params(
    original_url: str,
    target_path: str,
    preserve_utm: bool = True,
) -> str:
    """
    Preserve query parameters from original URL to target.

    Merges UTM params from original into target URL.
    Target params take precedence if duplicated.
    """
    original_parsed = urlparse(original_url)
    original_params = parse_qs(original_parsed.query, keep_blank_values=True)

    target_parsed = urlparse(target_path)
    target_params = parse_qs(target_parsed.query, keep_blank_values=True)

    merged: dict[str, Any] = {}

    # Add original params (UTM only if preserve_utm)
    for key, values in original_params.items():
        if preserve_utm and key.lower() in UTM_PARAMS:
            merged[key] = values[0] if len(values) == 1 else values
        elif not preserve_utm:
            merged[key] = values[0] if len(values) == 1 else values

    # Target params override
    for key, values in target_params.items():
        merged[key] = values[0] if len(values) == 1 else values

    if merged:
        query_string = urlencode(merged, doseq=True)
        base = target_path.split("?", 1)[0]
        return f"{base}?{query_string}"

    return target_path


def header_safe(value: str) -> str:
    """Percent-encode a path for a latin-1 header value."""
    return quote(value, safe="/:?=&%")


def redirect_response(
    path: str,
    query_string: str,
    outcome: Redirect,
    preserve_utm: bool = True,
) -> RedirectResponse:
    """Build the HTTP redirect for a resolved Redirect, with tracing headers."""
    original_url = f"{path}?{query_string}" if query_string else path
    target = preserve_query_params(original_url, outcome.to, preserve_utm)

    response = RedirectResponse(url=target, status_code=outcome.status_code)
    response.headers["X-Redirect-From"] = header_safe(path)
    response.headers["X-Redirect-To"] = header_safe(outcome.to)
    response.headers["X-Redirect-Status"] = str(outcome.status_code)
    response.headers["X-Redirect-Source"] = REDIRECT_SOURCE
    return response


# --- Middleware-style checker for use in app ---


async def redirect_middleware_check(
    request: Request,
    service: ResolutionService,
) -> RedirectResponse | None:
    """
    Check for redirect (for use in HTTP middleware).

    Returns the redirect response, or None to let the request through.
    """
    if request.method not in ("GET", "HEAD"):
        return None

    path = request.url.path
    site_id = resolve_site_id(request.query_params.get("site_id"), service)
    outcome = await service.resolve_redirect(path, site_id)
    if not isinstance(outcome, Redirect):
        return None

    logger.info(
        "Redirecting %s -> %s (%d)",
        path,
        outcome.to,
        outcome.status_code,
        extra={"path": path, "operation": "redirect_applied"},
    )
    return redirect_response(
        path,
        request.url.query,
        outcome,
        preserve_utm=service.redirects.config.preserve_utm_params,
    )


# --- Routes ---


@router.get("/redirect")
async def check_redirect(
    path: str,
    site_id: str = Depends(get_site_id),
    service: ResolutionService = Depends(get_resolution_service),
) -> dict[str, Any]:
    """
    Report the redirect decision for a path without applying it.
    """
    outcome = await service.resolve_redirect(path, site_id)
    return {"path": path, "site_id": site_id, **outcome.to_dict()}
