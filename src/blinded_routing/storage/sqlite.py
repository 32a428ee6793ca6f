"""SQLite-backed transient storage.

All stores of a provider share one database file and one connection, opened
once and reused until :meth:`SQLiteStorageProvider.close`. Writes are
serialized through a lock, so ``put``/``get`` are atomic per key.
"""
from __future__ import annotations

import sqlite3
import threading
from pathlib import Path

from blinded_routing.storage.base import (
    KeyNotFoundError,
    StorageError,
    StorageProvider,
    Store,
    StoreAlreadyExistsError,
    StoreNotFoundError,
)

# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_NAMESPACES = """
CREATE TABLE IF NOT EXISTS transient_namespace (
    name TEXT PRIMARY KEY
);
"""

_CREATE_ENTRIES = """
CREATE TABLE IF NOT EXISTS transient_entry (
    namespace TEXT NOT NULL REFERENCES transient_namespace(name),
    key       TEXT NOT NULL,
    value     BLOB NOT NULL,
    PRIMARY KEY (namespace, key)
);
"""

_SQL_INSERT_NAMESPACE = "INSERT INTO transient_namespace (name) VALUES (?)"
_SQL_FIND_NAMESPACE = "SELECT 1 FROM transient_namespace WHERE name = ?"
_SQL_UPSERT = (
    "INSERT INTO transient_entry (namespace, key, value) VALUES (?, ?, ?) "
    "ON CONFLICT(namespace, key) DO UPDATE SET value = excluded.value"
)
_SQL_GET = "SELECT value FROM transient_entry WHERE namespace = ? AND key = ?"
_SQL_DELETE = "DELETE FROM transient_entry WHERE namespace = ? AND key = ?"


class SQLiteStore(Store):
    """One namespace inside a :class:`SQLiteStorageProvider` database."""

    def __init__(self, provider: "SQLiteStorageProvider", name: str) -> None:
        self._provider = provider
        self.name = name

    def put(self, key: str, value: bytes) -> None:
        self._provider._execute(_SQL_UPSERT, (self.name, key, bytes(value)))

    def get(self, key: str) -> bytes:
        row = self._provider._query_one(_SQL_GET, (self.name, key))
        if row is None:
            raise KeyNotFoundError(key)
        return bytes(row[0])

    def delete(self, key: str) -> None:
        self._provider._execute(_SQL_DELETE, (self.name, key))


class SQLiteStorageProvider(StorageProvider):
    """Transient store provider persisting to a SQLite file.

    Parameters
    ----------
    db_path:
        Path to the database file, created if it does not exist. Use
        ``":memory:"`` for a private in-memory database.
    """

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = str(db_path)
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        try:
            self._conn: sqlite3.Connection | None = sqlite3.connect(
                self._db_path, check_same_thread=False
            )
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA foreign_keys=ON")
            self._conn.execute(_CREATE_NAMESPACES)
            self._conn.execute(_CREATE_ENTRIES)
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"open transient database {self._db_path}: {exc}") from exc

    # ------------------------------------------------------------------
    # StorageProvider interface
    # ------------------------------------------------------------------

    def create_store(self, name: str) -> None:
        try:
            self._execute(_SQL_INSERT_NAMESPACE, (name,))
        except StorageError as exc:
            if isinstance(exc.__cause__, sqlite3.IntegrityError):
                raise StoreAlreadyExistsError(name) from exc
            raise

    def open_store(self, name: str) -> SQLiteStore:
        if self._query_one(_SQL_FIND_NAMESPACE, (name,)) is None:
            raise StoreNotFoundError(name)
        return SQLiteStore(self, name)

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError(f"transient database {self._db_path} is closed")
        return self._conn

    def _execute(self, sql: str, params: tuple[object, ...]) -> None:
        with self._lock:
            conn = self._connection()
            try:
                with conn:
                    conn.execute(sql, params)
            except sqlite3.Error as exc:
                raise StorageError(f"transient store write failed: {exc}") from exc

    def _query_one(self, sql: str, params: tuple[object, ...]) -> tuple[object, ...] | None:
        with self._lock:
            conn = self._connection()
            try:
                return conn.execute(sql, params).fetchone()
            except sqlite3.Error as exc:
                raise StorageError(f"transient store read failed: {exc}") from exc


__all__ = ["SQLiteStorageProvider", "SQLiteStore"]
