"""
Tests for MetadataResolver.

Invariants:
- I1: Resolution never raises and always returns every field
- I2: Social title/description inherit the page title/description
"""

from __future__ import annotations

import logging

import pytest

from src.components.fallback import FallbackProvider
from src.components.metadata import (
    MetadataResolver,
    ResolveMetadataInput,
    merge_record,
    run_resolve,
)
from src.core.errors import CircuitOpenError, StoreTimeoutError
from src.core.outcomes import MetadataTier
from tests.fakes import SITE, FakeClock, FlakyStore, make_metadata


@pytest.fixture
def fallback() -> FallbackProvider:
    return FallbackProvider()


@pytest.fixture
def resolver(store: FlakyStore, fallback: FallbackProvider, clock: FakeClock) -> MetadataResolver:
    return MetadataResolver(store, fallback, clock)


class TestMergeRecord:
    def test_social_inherits(self) -> None:
        meta = merge_record(make_metadata("/promo", title="Promo", description="Promo desc"))
        assert meta.tier == MetadataTier.CUSTOM
        assert meta.social.title == "Promo"
        assert meta.social.description == "Promo desc"
        assert meta.social.image is None

    def test_social_overrides_kept(self) -> None:
        record = make_metadata(
            "/promo",
            social={
                "title": "Share me",
                "description": "Share text",
                "image": "https://cdn.example.com/promo.png",
            },
        )
        meta = merge_record(record)
        assert meta.social.title == "Share me"
        assert meta.social.description == "Share text"
        assert meta.social.image == "https://cdn.example.com/promo.png"

    def test_robots_normalized(self) -> None:
        meta = merge_record(make_metadata("/x", robots="NoIndex, Follow"))
        assert meta.robots == "noindex,follow"


class TestResolve:
    @pytest.mark.asyncio
    async def test_custom_record(self, resolver: MetadataResolver, store: FlakyStore) -> None:
        store.add_metadata(make_metadata("/promo", title="Promo"))
        meta = await resolver.resolve("/promo", SITE)
        assert meta.tier == MetadataTier.CUSTOM
        assert meta.title == "Promo"

    @pytest.mark.asyncio
    async def test_not_found_uses_pattern(self, resolver: MetadataResolver) -> None:
        meta, reason = await resolver.resolve_with_reason("/about", SITE)
        assert meta.tier == MetadataTier.PATTERN
        assert reason == "not_found"

    @pytest.mark.asyncio
    async def test_failure_uses_fallback(
        self,
        resolver: MetadataResolver,
        store: FlakyStore,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        store.add_metadata(make_metadata("/about"))
        store.fail_with = StoreTimeoutError("slow")

        with caplog.at_level(logging.INFO, logger="src.components.metadata._impl"):
            meta, reason = await resolver.resolve_with_reason("/about", SITE)

        assert meta.title == "About Example Studio"
        assert reason == "timeout"

        record = next(r for r in caplog.records if "fallback" in r.getMessage())
        assert record.path == "/about"
        assert record.operation == "metadata_lookup"
        assert record.error_kind == "timeout"
        assert record.timestamp

    @pytest.mark.asyncio
    async def test_breaker_open_uses_fallback(
        self, resolver: MetadataResolver, store: FlakyStore
    ) -> None:
        store.fail_with = CircuitOpenError()
        meta = await resolver.resolve("/blog/some-post", SITE)
        assert meta.tier == MetadataTier.PATTERN
        assert meta.title == "Blog | Example Studio"

    @pytest.mark.asyncio
    async def test_malformed_record_uses_fallback(
        self, resolver: MetadataResolver, store: FlakyStore
    ) -> None:
        store.add_metadata(
            {"site_id": SITE, "path": "/x", "slug": "Bad Slug", "title": "T", "description": "D"}
        )
        meta, reason = await resolver.resolve_with_reason("/x", SITE)
        assert meta.tier == MetadataTier.GENERIC
        assert reason == "validation_error"

    @pytest.mark.asyncio
    async def test_unexpected_error_absorbed(
        self, resolver: MetadataResolver, store: FlakyStore
    ) -> None:
        store.fail_with = RuntimeError("driver bug")
        meta = await resolver.resolve("/pricing", SITE)
        assert meta.title == "Pricing | Example Studio"

    @pytest.mark.asyncio
    async def test_custom_records_not_cached(
        self, resolver: MetadataResolver, store: FlakyStore, fallback: FallbackProvider
    ) -> None:
        store.add_metadata(make_metadata("/promo", title="First"))
        await resolver.resolve("/promo", SITE)
        store.add_metadata(make_metadata("/promo", title="Second"))

        assert (await resolver.resolve("/promo", SITE)).title == "Second"
        assert fallback.cache_size == 0


class TestRunResolve:
    @pytest.mark.asyncio
    async def test_output(self, store: FlakyStore, clock: FakeClock) -> None:
        out = await run_resolve(ResolveMetadataInput(path="/contact"), store=store, clock=clock)
        assert out.success is True
        assert out.fallback_reason == "not_found"
        assert out.metadata.title.startswith("Contact Example Studio")
