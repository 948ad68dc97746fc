import asyncio
import json
import sqlite3
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.core.entities import MetadataRecord, RedirectRecord
from src.core.errors import NetworkError, ServerError, ValidationError

SCHEMA = """
CREATE TABLE IF NOT EXISTS seo_redirects (
    site_id TEXT NOT NULL,
    from_path TEXT NOT NULL,
    to_path TEXT NOT NULL,
    status_code INTEGER NOT NULL DEFAULT 301,
    PRIMARY KEY (site_id, from_path)
);

CREATE TABLE IF NOT EXISTS seo_metadata (
    site_id TEXT NOT NULL,
    path TEXT NOT NULL,
    slug TEXT NOT NULL,
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    robots TEXT NOT NULL DEFAULT 'index,follow',
    social_json TEXT,
    PRIMARY KEY (site_id, path)
);
"""


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


class SQLiteSeoStore:
    """
    Store adapter over a SQLite file.

    sqlite3 is blocking, so every query runs in a worker thread. Driver
    errors are mapped onto the error taxonomy:
    - OperationalError (locked, unreadable file): NetworkError, retryable
    - other DatabaseError: ServerError(500), retryable
    - rows that fail record validation: ValidationError
    """

    def __init__(self, db_path: str, timeout_seconds: float = 5.0):
        self.db_path = db_path
        self.timeout_seconds = timeout_seconds

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.timeout_seconds)
        conn.row_factory = dict_factory
        return conn

    def init_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.executescript(SCHEMA)
            conn.commit()
        finally:
            conn.close()

    # --- Seeding (authoring happens elsewhere) ---

    def save_redirect(self, record: RedirectRecord) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO seo_redirects (site_id, from_path, to_path, status_code)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(site_id, from_path) DO UPDATE SET
                    to_path=excluded.to_path,
                    status_code=excluded.status_code
            """,
                (record.site_id, record.from_path, record.to_path, record.status_code),
            )
            conn.commit()
        finally:
            conn.close()

    def save_metadata(self, record: MetadataRecord) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO seo_metadata (
                    site_id, path, slug, title, description, robots, social_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(site_id, path) DO UPDATE SET
                    slug=excluded.slug,
                    title=excluded.title,
                    description=excluded.description,
                    robots=excluded.robots,
                    social_json=excluded.social_json
            """,
                (
                    record.site_id,
                    record.path,
                    record.slug,
                    record.title,
                    record.description,
                    record.robots,
                    json.dumps(record.social.model_dump(exclude_none=True)),
                ),
            )
            conn.commit()
        finally:
            conn.close()

    # --- SeoStorePort ---

    async def find_redirect(self, site_id: str, path: str) -> RedirectRecord | None:
        row = await self._run(
            "SELECT site_id, from_path, to_path, status_code FROM seo_redirects "
            "WHERE site_id = ? AND from_path = ?",
            (site_id, path),
        )
        if row is None:
            return None
        return self._to_record(RedirectRecord, row, path)

    async def find_metadata(self, site_id: str, path: str) -> MetadataRecord | None:
        row = await self._run(
            "SELECT site_id, path, slug, title, description, robots, social_json "
            "FROM seo_metadata WHERE site_id = ? AND path = ?",
            (site_id, path),
        )
        if row is None:
            return None
        social_json = row.pop("social_json", None)
        try:
            row["social"] = json.loads(social_json) if social_json else {}
        except json.JSONDecodeError as e:
            raise ValidationError("Malformed social_json column", path=path) from e
        return self._to_record(MetadataRecord, row, path)

    async def ping(self) -> None:
        await self._run("SELECT 1 AS ok", ())

    # --- Internals ---

    async def _run(self, sql: str, params: tuple[Any, ...]) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._fetch_one, sql, params)

    def _fetch_one(self, sql: str, params: tuple[Any, ...]) -> dict[str, Any] | None:
        try:
            conn = self._get_conn()
            try:
                return conn.execute(sql, params).fetchone()
            finally:
                conn.close()
        except sqlite3.OperationalError as e:
            raise NetworkError(f"SQLite unavailable: {e}") from e
        except sqlite3.DatabaseError as e:
            raise ServerError(f"SQLite error: {e}", status_code=500) from e

    def _to_record(self, model: Any, row: dict[str, Any], path: str) -> Any:
        try:
            return model.model_validate(row)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Malformed {model.__name__} row",
                issues=e.errors(include_url=False, include_context=False),
                path=path,
            ) from e
