"""
Fallback provider models.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FallbackVariant:
    """Keyword-matched refinement of a section (e.g. services/ai-*)."""

    keywords: tuple[str, ...]
    title: str
    description: str


@dataclass(frozen=True)
class FallbackSection:
    """A known site section with canned metadata."""

    key: str
    match: tuple[str, ...] = ()
    title: str = ""
    description: str = ""
    social_title: str | None = None
    social_description: str | None = None
    social_image: str | None = None
    variants: tuple[FallbackVariant, ...] = ()


@dataclass(frozen=True)
class FallbackConfig:
    """Fallback configuration from rules."""

    brand_name: str = "Example Studio"
    robots: str = "index,follow"
    generic_title_template: str = "{title} | {brand}"
    generic_description_template: str = (
        "Discover {title_lower} from {brand}. Read more about our work and services."
    )
    home_aliases: tuple[str, ...] = ("", "/", "home")
    sections: tuple[FallbackSection, ...] = field(default_factory=tuple)
