"""
Redirects component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.core.entities import RedirectRecord
from src.core.outcomes import NoRedirect, RedirectOutcome

# --- Configuration ---


@dataclass(frozen=True)
class RedirectConfig:
    """Redirect configuration from rules."""

    max_chain_depth: int = 5
    default_status_code: int = 301
    allowed_status_codes: tuple[int, ...] = (301, 302, 303, 307, 308)
    skip_prefixes: tuple[str, ...] = (
        "/api/",
        "/admin/",
        "/_next/",
        "/favicon.ico",
        "/robots.txt",
        "/sitemap.xml",
        "/manifest.json",
        "/sw.js",
        "/.well-known/",
        "/public/",
        "/uploads/",
        "/health",
        "/docs",
        "/openapi.json",
    )
    protected_target_prefixes: tuple[str, ...] = ("/admin/", "/api/")
    allowed_external_domains: tuple[str, ...] = ()
    follow_chains: bool = False
    preserve_utm_params: bool = True


# --- Validation Error ---


@dataclass(frozen=True)
class RedirectValidationError:
    """Redirect validation error."""

    code: str
    message: str
    field: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class ResolveRedirectInput:
    """Input for resolving a request path."""

    path: str
    site_id: str = "default"


@dataclass(frozen=True)
class BatchResolveInput:
    """Input for resolving many paths at once (sitemap generation)."""

    paths: tuple[str, ...]
    site_id: str = "default"


@dataclass(frozen=True)
class ValidateRedirectInput:
    """Input for checking a redirect before it is written."""

    record: RedirectRecord


# --- Output Models ---


@dataclass
class ResolveOutput:
    """Output for a single resolution."""

    outcome: RedirectOutcome = field(default_factory=NoRedirect)
    errors: list[RedirectValidationError] = field(default_factory=list)
    success: bool = True


@dataclass
class BatchResolveOutput:
    """Output for a batch resolution, keyed by path."""

    outcomes: dict[str, RedirectOutcome] = field(default_factory=dict)
    errors: list[RedirectValidationError] = field(default_factory=list)
    success: bool = True


@dataclass
class ValidateOutput:
    """Output for a pre-write redirect check."""

    record: RedirectRecord | None = None
    chain: list[str] = field(default_factory=list)
    errors: list[RedirectValidationError] = field(default_factory=list)
    error_kind: str | None = None
    success: bool = True
