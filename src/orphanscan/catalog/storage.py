"""SQLite-backed media catalog."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Sequence

from orphanscan.errors import ConfigurationError, StorageError
from orphanscan.models import Asset, ContentRecord, MetaRecord


class SQLiteCatalogStore:
    """Persistence layer for assets, content records and meta records.

    Read methods used during a scan wrap ``sqlite3.Error`` in
    :class:`StorageError`; a failed query must never be mistaken for zero hits.

    With ``read_only=True`` the database is opened through a ``mode=ro`` URI:
    no schema is created and no persistent pragma is set, so the file is left
    exactly as it was found.
    """

    def __init__(self, db_path: Path, *, read_only: bool = False) -> None:
        self.db_path = Path(db_path)
        self.read_only = read_only
        try:
            if read_only:
                self._conn = sqlite3.connect(
                    f"{self.db_path.resolve().as_uri()}?mode=ro", uri=True
                )
            else:
                self._conn = sqlite3.connect(self.db_path)
            self._conn.row_factory = sqlite3.Row
            # Connection-local, nothing is written to the file.
            self._conn.execute("PRAGMA case_sensitive_like=OFF;")
            if read_only:
                self._conn.execute("PRAGMA query_only=ON;")
            else:
                self._conn.execute("PRAGMA journal_mode=WAL;")
                self._conn.execute("PRAGMA synchronous=NORMAL;")
                self._ensure_schema()
        except sqlite3.Error as exc:
            raise StorageError(f"Unable to open catalog {self.db_path}: {exc}") from exc

    @classmethod
    def open_for_scan(cls, db_path: Path) -> "SQLiteCatalogStore":
        """Open an existing catalog without modifying it."""
        return cls(db_path, read_only=True)

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            yield self._conn
            self._conn.commit()
        except Exception:
            self._conn.rollback()
            raise

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS assets (
                    id INTEGER PRIMARY KEY,
                    title TEXT NOT NULL DEFAULT '',
                    mime_type TEXT NOT NULL DEFAULT '',
                    parent_id INTEGER,
                    stored_file TEXT,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS content_records (
                    id INTEGER PRIMARY KEY,
                    record_type TEXT NOT NULL,
                    body TEXT NOT NULL DEFAULT ''
                )
                """
            )
            conn.execute(
                """CREATE INDEX IF NOT EXISTS idx_content_records_type
                    ON content_records(record_type)
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS meta_records (
                    id INTEGER PRIMARY KEY,
                    owner_kind TEXT NOT NULL,
                    owner_id INTEGER NOT NULL,
                    meta_key TEXT NOT NULL,
                    meta_value TEXT
                )
                """
            )

    # Writes. Ingestion lives outside the audit; these populate a catalog.

    def add_asset(self, asset: Asset) -> int:
        with self.transaction() as conn:
            return conn.execute(
                """
                INSERT INTO assets(id, title, mime_type, parent_id, stored_file)
                VALUES (?, ?, ?, ?, ?)
                """,
                (asset.id, asset.title, asset.mime_type, asset.parent_id, asset.stored_file),
            ).lastrowid

    def add_content_record(self, record: ContentRecord) -> int:
        with self.transaction() as conn:
            return conn.execute(
                "INSERT INTO content_records(record_type, body) VALUES (?, ?)",
                (record.record_type, record.body),
            ).lastrowid

    def add_meta_record(self, record: MetaRecord) -> int:
        with self.transaction() as conn:
            return conn.execute(
                """
                INSERT INTO meta_records(owner_kind, owner_id, meta_key, meta_value)
                VALUES (?, ?, ?, ?)
                """,
                (record.owner_kind, record.owner_id, record.meta_key, record.meta_value),
            ).lastrowid

    # Reads.

    def count_assets(self) -> int:
        return self._scalar("SELECT COUNT(*) FROM assets")

    def fetch_recent_assets(self, limit: int) -> List[Asset]:
        """Return up to ``limit`` assets, newest identifier first."""
        try:
            rows = self._conn.execute(
                """
                SELECT id, title, mime_type, parent_id, stored_file
                FROM assets
                ORDER BY id DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"Unable to read assets: {exc}") from exc
        return [_row_to_asset(row) for row in rows]

    def count_content_references(self, pattern: str, record_types: Sequence[str]) -> int:
        """Count content records of the given types whose body matches ``pattern``.

        ``pattern`` is a ``LIKE`` pattern escaped with backslashes.
        """
        if not record_types:
            raise ConfigurationError("At least one content record type must be searched")
        placeholders = ", ".join("?" for _ in record_types)
        return self._scalar(
            f"""
            SELECT COUNT(*) FROM content_records
            WHERE record_type IN ({placeholders})
            AND body LIKE ? ESCAPE '\\'
            """,
            (*record_types, pattern),
        )

    def count_meta_references(self, pattern: str) -> int:
        return self._scalar(
            "SELECT COUNT(*) FROM meta_records WHERE meta_value LIKE ? ESCAPE '\\'",
            (pattern,),
        )

    def _scalar(self, sql: str, params: Sequence[object] = ()) -> int:
        try:
            row = self._conn.execute(sql, params).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Catalog query failed: {exc}") from exc
        return int(row[0]) if row is not None else 0


def _row_to_asset(row: sqlite3.Row) -> Asset:
    parent = row["parent_id"]
    # Imported catalogs use 0 for "no parent".
    if parent is not None and int(parent) == 0:
        parent = None
    return Asset(
        id=int(row["id"]),
        title=row["title"] or "",
        mime_type=row["mime_type"] or "",
        parent_id=int(parent) if parent is not None else None,
        stored_file=row["stored_file"],
    )
