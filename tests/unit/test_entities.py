"""
Tests for the stored record models.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from src.core.entities import MetadataRecord, RedirectRecord, parse_robots
from tests.fakes import SITE, make_metadata


class TestRedirectRecord:
    def test_aliases(self) -> None:
        record = RedirectRecord.model_validate(
            {"site_id": SITE, "from": "/old", "to": "/new", "status_code": 302}
        )
        assert record.from_path == "/old"
        assert record.to_path == "/new"
        assert record.status_code == 302

    def test_default_status(self) -> None:
        record = RedirectRecord(site_id=SITE, from_path="/a", to_path="/b")
        assert record.status_code == 301

    def test_paths_stripped(self) -> None:
        record = RedirectRecord(site_id=SITE, from_path=" /a ", to_path="/b ")
        assert record.from_path == "/a"
        assert record.to_path == "/b"

    def test_self_redirect_rejected(self) -> None:
        with pytest.raises(ValidationError, match="itself"):
            RedirectRecord(site_id=SITE, from_path="/a", to_path="/a")

    def test_non_redirect_status_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RedirectRecord(site_id=SITE, from_path="/a", to_path="/b", status_code=200)

    def test_site_id_pattern(self) -> None:
        with pytest.raises(ValidationError):
            RedirectRecord(site_id="bad site", from_path="/a", to_path="/b")


class TestMetadataRecord:
    def test_valid(self) -> None:
        record = make_metadata("/promo")
        assert record.robots == "index,follow"
        assert record.social.title is None

    def test_home_path_allowed(self) -> None:
        assert make_metadata("home").path == "home"

    def test_relative_path_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Path must start"):
            make_metadata("promo")

    def test_slug_must_be_url_safe(self) -> None:
        with pytest.raises(ValidationError, match="URL-friendly"):
            make_metadata("/promo", slug="Promo Page")

    def test_title_length(self) -> None:
        with pytest.raises(ValidationError):
            make_metadata("/promo", title="x" * 61)

    def test_description_length(self) -> None:
        with pytest.raises(ValidationError):
            make_metadata("/promo", description="x" * 161)

    def test_robots_unknown_directive(self) -> None:
        with pytest.raises(ValidationError, match="Invalid robots directive"):
            make_metadata("/promo", robots="index,sometimes")

    def test_social_image_must_be_absolute(self) -> None:
        with pytest.raises(ValidationError, match="absolute"):
            make_metadata("/promo", social={"image": "/img/promo.png"})

    def test_empty_social_image_dropped(self) -> None:
        record = make_metadata("/promo", social={"image": ""})
        assert record.social.image is None

    def test_frozen(self) -> None:
        record = make_metadata("/promo")
        with pytest.raises(ValidationError):
            record.title = "Changed"  # type: ignore[misc]

    def test_from_raw_document(self) -> None:
        record = MetadataRecord.model_validate(
            {
                "site_id": SITE,
                "path": "/x",
                "slug": "x",
                "title": "X",
                "description": "About x.",
                "robots": "NOINDEX , nofollow",
            }
        )
        assert record.robots == "noindex,nofollow"


def test_parse_robots() -> None:
    assert parse_robots(" Index, ,FOLLOW ") == ["index", "follow"]
