"""
In-memory store adapter.

Holds records keyed by (site_id, path). Documents may be stored raw (as
dicts, the way a document store returns them) and are validated on read,
so a malformed document surfaces as a ValidationError exactly like it
would from a real store.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.core.entities import MetadataRecord, RedirectRecord
from src.core.errors import ValidationError


class InMemorySeoStore:
    def __init__(self) -> None:
        self._redirects: dict[tuple[str, str], RedirectRecord | dict[str, Any]] = {}
        self._metadata: dict[tuple[str, str], MetadataRecord | dict[str, Any]] = {}

    def add_redirect(self, record: RedirectRecord | dict[str, Any]) -> None:
        key = (_field(record, "site_id"), _field(record, "from_path", "from"))
        self._redirects[key] = record

    def add_metadata(self, record: MetadataRecord | dict[str, Any]) -> None:
        key = (_field(record, "site_id"), _field(record, "path"))
        self._metadata[key] = record

    def clear(self) -> None:
        self._redirects.clear()
        self._metadata.clear()

    async def find_redirect(self, site_id: str, path: str) -> RedirectRecord | None:
        doc = self._redirects.get((site_id, path))
        if doc is None or isinstance(doc, RedirectRecord):
            return doc
        return _validate(RedirectRecord, doc, path)

    async def find_metadata(self, site_id: str, path: str) -> MetadataRecord | None:
        doc = self._metadata.get((site_id, path))
        if doc is None or isinstance(doc, MetadataRecord):
            return doc
        return _validate(MetadataRecord, doc, path)

    async def ping(self) -> None:
        return None


def _field(record: Any, name: str, alias: str | None = None) -> str:
    if isinstance(record, dict):
        value = record.get(name)
        if value is None and alias is not None:
            value = record.get(alias)
        return str(value or "")
    return str(getattr(record, name))


def _validate(model: Any, doc: dict[str, Any], path: str) -> Any:
    try:
        return model.model_validate(doc)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Malformed {model.__name__} document",
            issues=e.errors(include_url=False, include_context=False),
            path=path,
        ) from e
