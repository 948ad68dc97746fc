"""Test doubles and record factories shared by the test suite."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from src.adapters.memory_store import InMemorySeoStore
from src.core.entities import MetadataRecord, RedirectRecord

SITE = "default"


# --- Fakes ---


class FakeClock:
    """Manually advanced clock; wall and monotonic time move together."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
        self._mono = 1000.0

    def now_utc(self) -> datetime:
        return self._now

    def monotonic(self) -> float:
        return self._mono

    def advance(self, seconds: float) -> None:
        self._now += timedelta(seconds=seconds)
        self._mono += seconds


class RecordingSleep:
    """Async sleep replacement: records delays and advances the clock."""

    def __init__(self, clock: FakeClock | None = None) -> None:
        self.delays: list[float] = []
        self._clock = clock

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self._clock is not None:
            self._clock.advance(delay)


class FlakyStore(InMemorySeoStore):
    """In-memory store that can be told to fail every call."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_with: BaseException | None = None
        self.calls: list[tuple[str, str]] = []
        self.ping_error: BaseException | None = None

    async def find_redirect(self, site_id: str, path: str) -> RedirectRecord | None:
        self.calls.append(("find_redirect", path))
        if self.fail_with is not None:
            raise self.fail_with
        return await super().find_redirect(site_id, path)

    async def find_metadata(self, site_id: str, path: str) -> MetadataRecord | None:
        self.calls.append(("find_metadata", path))
        if self.fail_with is not None:
            raise self.fail_with
        return await super().find_metadata(site_id, path)

    async def ping(self) -> None:
        if self.ping_error is not None:
            raise self.ping_error


def make_redirect(from_path: str, to_path: str, status_code: int = 301) -> RedirectRecord:
    return RedirectRecord(site_id=SITE, from_path=from_path, to_path=to_path, status_code=status_code)


def make_metadata(path: str, **overrides: object) -> MetadataRecord:
    data: dict[str, object] = {
        "site_id": SITE,
        "path": path,
        "slug": path.strip("/").replace("/", "-") or "home",
        "title": "Custom Title",
        "description": "Custom description for this page.",
    }
    data.update(overrides)
    return MetadataRecord.model_validate(data)
