"""
Domain records read by the resolution layer.

Records are written by the authoring layer and are read-only here:
- RedirectRecord: one hop of a redirect chain
- MetadataRecord: hand-authored display metadata for a page path

Constraints mirror the store schema so a malformed stored document fails
validation on read instead of leaking into a response.
"""

from __future__ import annotations

import re
from typing import Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

REDIRECT_STATUS_CODES = (301, 302, 303, 307, 308)

ROBOTS_DIRECTIVES = frozenset(
    {
        "index",
        "noindex",
        "follow",
        "nofollow",
        "archive",
        "noarchive",
        "snippet",
        "nosnippet",
    }
)

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
SITE_ID_PATTERN = r"^[a-zA-Z0-9_-]+$"

TITLE_MAX_LENGTH = 60
DESCRIPTION_MAX_LENGTH = 160
PATH_MAX_LENGTH = 500

RedirectStatusCode = Literal[301, 302, 303, 307, 308]


def parse_robots(value: str) -> list[str]:
    """Split a robots directive list into normalized directives."""
    return [d.strip().lower() for d in value.split(",") if d.strip()]


# --- Redirects ---


class RedirectRecord(BaseModel):
    """
    A single redirect `from_path -> to_path`.

    Invariants:
    - from_path != to_path (no self-redirect)
    - status_code is a redirect status
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    site_id: str = Field(pattern=SITE_ID_PATTERN)
    from_path: str = Field(alias="from", min_length=1, max_length=PATH_MAX_LENGTH)
    to_path: str = Field(alias="to", min_length=1, max_length=PATH_MAX_LENGTH)
    status_code: RedirectStatusCode = 301

    @field_validator("from_path", "to_path")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @model_validator(mode="after")
    def _no_self_redirect(self) -> RedirectRecord:
        if self.from_path == self.to_path:
            raise ValueError("Redirect cannot point to itself")
        return self


# --- Metadata ---


class SocialFields(BaseModel):
    """Social-preview (OpenGraph / Twitter) overrides."""

    model_config = ConfigDict(frozen=True)

    title: str | None = Field(default=None, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    image: str | None = None

    @field_validator("image")
    @classmethod
    def _image_is_url(cls, value: str | None) -> str | None:
        if not value:
            return None
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Social image must be an absolute http(s) URL")
        return value


class MetadataRecord(BaseModel):
    """Hand-authored metadata for one page path."""

    model_config = ConfigDict(frozen=True)

    site_id: str = Field(pattern=SITE_ID_PATTERN)
    path: str = Field(min_length=1, max_length=PATH_MAX_LENGTH)
    slug: str
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    robots: str = "index,follow"
    social: SocialFields = Field(default_factory=SocialFields)

    @field_validator("path")
    @classmethod
    def _path_shape(cls, value: str) -> str:
        if not (value.startswith("/") or value == "home"):
            raise ValueError('Path must start with / or be "home" for root page')
        return value

    @field_validator("slug")
    @classmethod
    def _slug_is_url_safe(cls, value: str) -> str:
        if not SLUG_PATTERN.match(value):
            raise ValueError(
                "Slug must be URL-friendly (lowercase letters, numbers, and hyphens only)"
            )
        return value

    @field_validator("robots")
    @classmethod
    def _robots_vocabulary(cls, value: str) -> str:
        directives = parse_robots(value)
        if not directives:
            raise ValueError("Robots directive cannot be empty")
        unknown = [d for d in directives if d not in ROBOTS_DIRECTIVES]
        if unknown:
            raise ValueError(f"Invalid robots directive: {', '.join(unknown)}")
        return ",".join(directives)
