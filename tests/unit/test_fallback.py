"""
Tests for FallbackProvider.

Invariants:
- Every path gets non-empty title, description and robots
- Titles <= 60 chars, descriptions <= 160 chars
- Same path -> same value (memoized until clear())
"""

from __future__ import annotations

import pytest

from src.components.fallback import (
    FallbackConfig,
    FallbackProvider,
    build_fallback_config,
    path_segments,
    render_template,
    title_from_segment,
    truncate_text,
)
from src.core.outcomes import MetadataTier, NoRedirect
from src.rules.models import FallbackRules


@pytest.fixture
def provider() -> FallbackProvider:
    return FallbackProvider(build_fallback_config(FallbackRules()))


class TestHelpers:
    def test_title_from_segment(self) -> None:
        assert title_from_segment("my-cool-page") == "My Cool Page"
        assert title_from_segment("snake_case_path") == "Snake Case Path"
        assert title_from_segment("---") == "Page"

    def test_path_segments(self) -> None:
        assert path_segments("/Services/AI-Tools/?utm_source=x#top") == ["services", "ai-tools"]
        assert path_segments("/") == []
        assert path_segments("/caf%C3%A9") == ["café"]

    def test_render_template_keeps_unknown_placeholders(self) -> None:
        assert render_template("{title} | {brand} {other}", title="A", brand="B") == "A | B {other}"

    def test_truncate_short_text_untouched(self) -> None:
        assert truncate_text("short", 60) == "short"

    def test_truncate_at_word_boundary(self) -> None:
        text = "word " * 30
        result = truncate_text(text, 60)
        assert len(result) <= 60
        assert result.endswith("...")
        assert not result[:-3].endswith(" ")

    def test_truncate_without_spaces(self) -> None:
        result = truncate_text("a" * 70, 60)
        assert result == "a" * 57 + "..."


class TestPatternTier:
    @pytest.mark.parametrize("path", ["/", "", "home", "/home"])
    def test_home_aliases(self, provider: FallbackProvider, path: str) -> None:
        meta = provider.get_metadata(path)
        assert meta.tier == MetadataTier.PATTERN
        assert meta.title == "Example Studio - Digital Products & Engineering"

    def test_about(self, provider: FallbackProvider) -> None:
        meta = provider.get_metadata("/about")
        assert meta.tier == MetadataTier.PATTERN
        assert meta.title == "About Example Studio"
        assert meta.robots == "index,follow"

    def test_about_us_nested(self, provider: FallbackProvider) -> None:
        assert provider.get_metadata("/about-us/team").title == "About Example Studio"

    @pytest.mark.parametrize(
        ("path", "title"),
        [
            ("/services", "Professional Services | Example Studio"),
            ("/services/ai-automation", "AI & ML Services | Example Studio"),
            ("/services/ml", "AI & ML Services | Example Studio"),
            ("/services/web3-dapps", "Web3 & Blockchain Development | Example Studio"),
            ("/services/blockchain", "Web3 & Blockchain Development | Example Studio"),
            ("/services/mobile-apps", "Mobile App Development | Example Studio"),
            ("/services/web-development", "Web Development Services | Example Studio"),
            ("/services/consulting", "Professional Services | Example Studio"),
        ],
    )
    def test_service_variants(self, provider: FallbackProvider, path: str, title: str) -> None:
        assert provider.get_metadata(path).title == title

    def test_keyword_is_whole_token(self, provider: FallbackProvider) -> None:
        """'email' must not match the 'ai' keyword."""
        assert provider.get_metadata("/services/email").title == (
            "Professional Services | Example Studio"
        )

    def test_social_inherits_page_fields(self, provider: FallbackProvider) -> None:
        meta = provider.get_metadata("/contact")
        assert meta.social.title == meta.title
        assert meta.social.description == meta.description
        assert meta.social.image is None

    def test_case_insensitive(self, provider: FallbackProvider) -> None:
        assert provider.get_metadata("/ABOUT").title == "About Example Studio"


class TestGenericTier:
    def test_last_segment_title(self, provider: FallbackProvider) -> None:
        meta = provider.get_metadata("/some/deep/my-cool-page")
        assert meta.tier == MetadataTier.GENERIC
        assert meta.title == "My Cool Page | Example Studio"
        assert meta.description == (
            "Discover my cool page from Example Studio. Read more about our work and services."
        )
        assert meta.social.title == meta.title

    def test_no_segments_without_home_section(self) -> None:
        provider = FallbackProvider(FallbackConfig(sections=()))
        meta = provider.get_metadata("/")
        assert meta.tier == MetadataTier.GENERIC
        assert meta.title == "Page | Example Studio"

    def test_long_segment_truncated(self, provider: FallbackProvider) -> None:
        meta = provider.get_metadata("/" + "-".join(["extraordinarily"] * 12))
        assert 0 < len(meta.title) <= 60
        assert 0 < len(meta.description) <= 160

    def test_custom_brand(self) -> None:
        provider = FallbackProvider(build_fallback_config(FallbackRules(brand_name="Acme")))
        assert provider.get_metadata("/pricing").title == "Pricing | Acme"
        assert provider.get_metadata("/about").title == "About Acme"


class TestMemoization:
    def test_same_object_returned(self, provider: FallbackProvider) -> None:
        first = provider.get_metadata("/x")
        assert provider.get_metadata("/x") is first
        assert provider.get_metadata("/x/") is first
        assert provider.cache_size == 1

    def test_clear(self, provider: FallbackProvider) -> None:
        provider.get_metadata("/x")
        provider.clear()
        assert provider.cache_size == 0

    def test_encoded_slash_is_its_own_entry(self, provider: FallbackProvider) -> None:
        encoded = provider.get_metadata("/blog%2Fpost")
        nested = provider.get_metadata("/blog/post")
        assert encoded.tier == MetadataTier.GENERIC
        assert nested.tier == MetadataTier.PATTERN
        assert nested.title == "Blog | Example Studio"
        assert provider.cache_size == 2

    def test_encoded_slash_first_lookup_order(self, provider: FallbackProvider) -> None:
        assert provider.get_metadata("/blog/post").title == "Blog | Example Studio"
        assert provider.get_metadata("/blog%2Fpost").tier == MetadataTier.GENERIC

    def test_preload(self, provider: FallbackProvider) -> None:
        assert provider.preload(["/a", "/b", "/a"]) == 2
        assert provider.cache_size == 2

    def test_no_redirect(self, provider: FallbackProvider) -> None:
        outcome = provider.no_redirect()
        assert outcome == NoRedirect()
        assert outcome.should_redirect is False
