"""
Resolution outcomes.

Produced per call, never persisted:
- NoRedirect | Redirect for the redirect check
- ResolvedMetadata for the metadata lookup, always fully populated
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# --- Redirect Outcome ---


@dataclass(frozen=True)
class NoRedirect:
    """Proceed without redirecting. `reason` is diagnostic only."""

    reason: str = field(default="not_found", compare=False)

    @property
    def should_redirect(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {"redirect": False, "reason": self.reason}


@dataclass(frozen=True)
class Redirect:
    """Redirect the request to `to` with `status_code`."""

    to: str
    status_code: int
    matched_from: str = ""
    hops: int = 1

    @property
    def should_redirect(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "redirect": True,
            "to": self.to,
            "status_code": self.status_code,
            "matched_from": self.matched_from,
            "hops": self.hops,
        }


RedirectOutcome = NoRedirect | Redirect


# --- Metadata Outcome ---


class MetadataTier(str, Enum):
    """Which fallback tier produced a metadata value."""

    CUSTOM = "custom"
    PATTERN = "pattern"
    GENERIC = "generic"


@dataclass(frozen=True)
class MetaTag:
    """HTML meta tag representation."""

    name: str | None = None
    property: str | None = None  # For OG tags
    content: str = ""


@dataclass(frozen=True)
class SocialPreview:
    """Resolved social-preview fields. Only `image` may be absent."""

    title: str
    description: str
    image: str | None = None


@dataclass(frozen=True)
class ResolvedMetadata:
    """Display metadata attached to a page response."""

    title: str
    description: str
    robots: str
    social: SocialPreview
    tier: MetadataTier = MetadataTier.CUSTOM

    def to_meta_tags(self, twitter_card: str = "summary_large_image") -> list[MetaTag]:
        """Convert to list of MetaTag objects for rendering."""
        tags = [
            MetaTag(name="description", content=self.description),
            MetaTag(name="robots", content=self.robots),
            MetaTag(property="og:title", content=self.social.title),
            MetaTag(property="og:description", content=self.social.description),
        ]
        if self.social.image:
            tags.append(MetaTag(property="og:image", content=self.social.image))

        tags.extend(
            [
                MetaTag(name="twitter:card", content=twitter_card),
                MetaTag(name="twitter:title", content=self.social.title),
                MetaTag(name="twitter:description", content=self.social.description),
            ]
        )
        if self.social.image:
            tags.append(MetaTag(name="twitter:image", content=self.social.image))
        return tags

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "robots": self.robots,
            "social": {
                "title": self.social.title,
                "description": self.social.description,
                "image": self.social.image,
            },
            "tier": self.tier.value,
        }
