"""SQLite-backed package store keyed by uuid."""

import json
import logging
import sqlite3
from contextlib import closing, contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Optional

from package_import.schema.validator import check_immutable
from package_import.store.base import AlreadyExistsError, StoreError, TargetStore, WriteContext

logger = logging.getLogger(__name__)


class SqlitePackageStore(TargetStore):
    """
    SQLite store for imported packages.
    The uuid primary key makes `create` atomic: a second insert of the same
    uuid fails inside SQLite, never in a check-then-write race.
    """

    def __init__(self, db_path: str | Path = "packages.db", timeout: float = 30.0):
        self._db_path = Path(db_path)
        self._timeout = timeout
        try:
            self._ensure_schema()
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open package store {self._db_path}: {e}") from e

    def _connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=self._timeout)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        """One transaction on a fresh connection, closed on exit."""
        with closing(self._connection()) as conn, conn:
            yield conn

    def _ensure_schema(self) -> None:
        schema_path = Path(__file__).parent / "schema.sql"
        with self._session() as conn:
            conn.executescript(schema_path.read_text())

    def _serialize(self, record: dict[str, Any]) -> str:
        return json.dumps(record, default=str, sort_keys=True)

    def create(self, key: str, record: dict[str, Any], context: WriteContext) -> None:
        now = datetime.now(timezone.utc).isoformat()
        try:
            with self._session() as conn:
                conn.execute(
                    """
                    INSERT INTO packages (uuid, name, version, data, imported_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (key, record.get("name"), record.get("version"), self._serialize(record), now, now),
                )
        except sqlite3.IntegrityError as e:
            raise AlreadyExistsError(key) from e
        except sqlite3.Error as e:
            raise StoreError(f"Insert of {key} failed: {e}") from e

    def update(self, key: str, record: dict[str, Any], context: WriteContext) -> None:
        now = datetime.now(timezone.utc).isoformat()
        try:
            with self._session() as conn:
                row = conn.execute("SELECT data FROM packages WHERE uuid = ?", (key,)).fetchone()
                if row is None:
                    raise StoreError(f"Package {key} does not exist")
                existing = json.loads(row["data"])
                kept = check_immutable(existing, record, context.immutable_fields)
                if kept:
                    logger.debug("Package %s: keeping stored immutable fields %s", key, ", ".join(kept))
                merged = dict(record)
                for name in context.immutable_fields:
                    if name in existing:
                        merged[name] = existing[name]
                conn.execute(
                    "UPDATE packages SET name = ?, version = ?, data = ?, updated_at = ? WHERE uuid = ?",
                    (merged.get("name"), merged.get("version"), self._serialize(merged), now, key),
                )
        except sqlite3.Error as e:
            raise StoreError(f"Update of {key} failed: {e}") from e

    def exists(self, key: str) -> bool:
        try:
            with self._session() as conn:
                row = conn.execute("SELECT 1 FROM packages WHERE uuid = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Lookup of {key} failed: {e}") from e
        return row is not None

    def get(self, key: str) -> Optional[dict[str, Any]]:
        """Get one stored package by uuid."""
        with self._session() as conn:
            row = conn.execute("SELECT data FROM packages WHERE uuid = ?", (key,)).fetchone()
        return json.loads(row["data"]) if row else None

    def get_all(self) -> list[dict[str, Any]]:
        """Return all stored packages ordered by name and version."""
        with self._session() as conn:
            rows = conn.execute("SELECT data FROM packages ORDER BY name, version, uuid").fetchall()
        return [json.loads(r["data"]) for r in rows]

    def count(self) -> int:
        with self._session() as conn:
            return conn.execute("SELECT COUNT(*) FROM packages").fetchone()[0]
