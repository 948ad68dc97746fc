"""
FallbackProvider - last-resort metadata and redirect defaults.

Pure and deterministic: the result depends only on the path string and the
configuration, so results are memoized for the process lifetime and only an
explicit clear() resets the map.

Tiers:
a. pattern: home aliases, then the first path segment against known sections
   (with optional keyword variants on the remaining segments)
b. generic: last segment kebab-case -> Title Case, composed with the brand
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any
from urllib.parse import unquote

from src.core.entities import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH
from src.core.outcomes import MetadataTier, NoRedirect, ResolvedMetadata, SocialPreview
from src.rules.models import FallbackRules

from .models import FallbackConfig, FallbackSection, FallbackVariant

# --- Configuration ---


def build_fallback_config(rules: FallbackRules | None = None) -> FallbackConfig:
    """Build fallback config from rules."""
    rules = rules or FallbackRules()
    return FallbackConfig(
        brand_name=rules.brand_name,
        robots=rules.robots,
        generic_title_template=rules.generic_title_template,
        generic_description_template=rules.generic_description_template,
        home_aliases=tuple(rules.home_aliases),
        sections=tuple(
            FallbackSection(
                key=s.key,
                match=tuple(m.lower() for m in s.match),
                title=s.title,
                description=s.description,
                social_title=s.social_title,
                social_description=s.social_description,
                social_image=s.social_image,
                variants=tuple(
                    FallbackVariant(
                        keywords=tuple(k.lower() for k in v.keywords),
                        title=v.title,
                        description=v.description,
                    )
                    for v in s.variants
                ),
            )
            for s in rules.sections
        ),
    )


# --- Text Helpers ---


class _Values(dict[str, Any]):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def render_template(template: str, **values: Any) -> str:
    """Fill `{name}` placeholders, leaving unknown ones untouched."""
    return template.format_map(_Values(values))


def truncate_text(text: str, max_length: int) -> str:
    """
    Truncate text to max_length characters, ellipsis included.

    Breaks at word boundary if possible.
    """
    if len(text) <= max_length:
        return text

    truncated = text[: max_length - 3]
    last_space = truncated.rfind(" ")

    if last_space > max_length * 0.6:  # At least 60% of the text
        truncated = truncated[:last_space]

    return truncated.rstrip() + "..."


def path_segments(path: str) -> list[str]:
    """Lowercased, decoded, non-empty path segments (query and fragment dropped)."""
    bare = path.split("?", 1)[0].split("#", 1)[0]
    return [unquote(s).strip().lower() for s in bare.split("/") if s.strip()]


def title_from_segment(segment: str) -> str:
    """kebab-case -> Title Case."""
    words = [w for w in segment.replace("_", "-").split("-") if w]
    return " ".join(w[0].upper() + w[1:] for w in words) or "Page"


def _tokens(segments: Iterable[str]) -> set[str]:
    found: set[str] = set()
    for segment in segments:
        found.update(t for t in segment.replace("_", "-").split("-") if t)
    return found


# --- Provider ---


class FallbackProvider:
    """Produces default metadata for any path; never fails."""

    def __init__(self, config: FallbackConfig | None = None) -> None:
        self._config = config or build_fallback_config()
        self._cache: dict[tuple[str, ...], ResolvedMetadata] = {}
        self._home = next((s for s in self._config.sections if s.key == "home"), None)

    @property
    def config(self) -> FallbackConfig:
        return self._config

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def get_metadata(self, path: str) -> ResolvedMetadata:
        """Fallback metadata for `path`, memoized."""
        key = self._cache_key(path)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        metadata = self._generate(path)
        self._cache[key] = metadata
        return metadata

    def no_redirect(self) -> NoRedirect:
        """The default redirect decision: do not redirect."""
        return NoRedirect(reason="fallback")

    def preload(self, paths: Iterable[str]) -> int:
        """Warm the memo map. Returns how many entries were added."""
        added = 0
        for path in paths:
            key = self._cache_key(path)
            if key not in self._cache:
                self._cache[key] = self._generate(path)
                added += 1
        return added

    def clear(self) -> None:
        """Drop every memoized value."""
        self._cache.clear()

    # --- Matching ---

    def match_section(self, path: str) -> tuple[FallbackSection, FallbackVariant | None] | None:
        """Find the section (and variant) a path belongs to, if any."""
        segments = path_segments(path)
        joined = "/".join(segments)

        if self._home is not None and (
            not segments
            or joined in self._config.home_aliases
            or "/" + joined in self._config.home_aliases
        ):
            return self._home, None

        if not segments:
            return None

        first = segments[0]
        for section in self._config.sections:
            if section.key == "home" or first not in section.match:
                continue
            tokens = _tokens(segments[1:])
            for variant in section.variants:
                if any(k in tokens for k in variant.keywords):
                    return section, variant
            return section, None

        return None

    # --- Generation ---

    def _cache_key(self, path: str) -> tuple[str, ...]:
        # Decoded segments, never re-joined: "/a%2Fb" and "/a/b" differ
        return tuple(path_segments(path))

    def _generate(self, path: str) -> ResolvedMetadata:
        match = self.match_section(path)
        if match is not None:
            return self._from_section(*match)
        return self._generic(path)

    def _fill(self, template: str, max_length: int) -> str:
        return truncate_text(render_template(template, brand=self._config.brand_name), max_length)

    def _from_section(
        self, section: FallbackSection, variant: FallbackVariant | None
    ) -> ResolvedMetadata:
        source_title = variant.title if variant else section.title
        source_description = variant.description if variant else section.description

        title = self._fill(source_title, TITLE_MAX_LENGTH)
        description = self._fill(source_description, DESCRIPTION_MAX_LENGTH)

        social_title = title
        social_description = description
        if variant is None:
            if section.social_title:
                social_title = self._fill(section.social_title, TITLE_MAX_LENGTH)
            if section.social_description:
                social_description = self._fill(section.social_description, DESCRIPTION_MAX_LENGTH)

        image = None
        if section.social_image:
            image = render_template(section.social_image, brand=self._config.brand_name)

        return ResolvedMetadata(
            title=title,
            description=description,
            robots=self._config.robots,
            social=SocialPreview(title=social_title, description=social_description, image=image),
            tier=MetadataTier.PATTERN,
        )

    def _generic(self, path: str) -> ResolvedMetadata:
        segments = path_segments(path)
        segment_title = title_from_segment(segments[-1] if segments else "page")

        title = truncate_text(
            render_template(
                self._config.generic_title_template,
                title=segment_title,
                brand=self._config.brand_name,
            ),
            TITLE_MAX_LENGTH,
        )
        description = truncate_text(
            render_template(
                self._config.generic_description_template,
                title=segment_title,
                title_lower=segment_title.lower(),
                brand=self._config.brand_name,
            ),
            DESCRIPTION_MAX_LENGTH,
        )

        return ResolvedMetadata(
            title=title,
            description=description,
            robots=self._config.robots,
            social=SocialPreview(title=title, description=description, image=None),
            tier=MetadataTier.GENERIC,
        )
