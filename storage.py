"""
SQLite-backed key-value storage for tasklet.
Self-bootstrapping: creates the DB file and the kv table on first use.
Every value is stored as a JSON document under a named slot. Reads and writes
never raise; failures are logged and resolve to a safe default.
"""
from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

logger = logging.getLogger("storage")

# Used when no path is passed to Storage()
_DEFAULT_DB_PATH = Path(__file__).resolve().parent / "tasklet.db"

# Seconds sqlite3 waits on a locked file before giving up
_CONNECT_TIMEOUT = 30.0

_SCHEMA = """
-- One JSON document per slot (todos, todo-sorting, theme)
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""


def _now_iso() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def is_list(value: Any) -> bool:
    """Shape check for the todos slot."""
    return isinstance(value, list)


def is_dict(value: Any) -> bool:
    return isinstance(value, dict)


class Storage:
    """Named JSON slots in a single SQLite file."""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path else _DEFAULT_DB_PATH
        self._initialized = False

    def _init_database(self) -> None:
        """Ensure the database file and kv table exist."""
        db_path = self.path.resolve()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(db_path), timeout=_CONNECT_TIMEOUT)
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(_SCHEMA)
            conn.commit()
        finally:
            conn.close()
        self._initialized = True

    def _connect(self) -> sqlite3.Connection:
        if not self._initialized:
            self._init_database()
        conn = sqlite3.connect(str(self.path.resolve()), timeout=_CONNECT_TIMEOUT)
        conn.row_factory = sqlite3.Row
        return conn

    def save_raw(self, key: str, text: str) -> bool:
        """Store text verbatim under key. Returns False (and logs) on failure."""
        try:
            conn = self._connect()
            try:
                conn.execute(
                    """INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)
                       ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at""",
                    (key, text, _now_iso()),
                )
                conn.commit()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            logger.error("Failed to save %r to %s: %s", key, self.path, e)
            return False
        return True

    def load_raw(self, key: str) -> str | None:
        """Return stored text for key, or None if absent or unreadable."""
        try:
            conn = self._connect()
            try:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            logger.error("Failed to load %r from %s: %s", key, self.path, e)
            return None
        return row["value"] if row else None

    def save(self, key: str, value: Any) -> bool:
        """Serialize value as JSON under key. Never raises; returns whether the write landed."""
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError, RecursionError) as e:
            logger.error("Failed to serialize %r for storage: %s", key, e)
            return False
        return self.save_raw(key, payload)

    def load(
        self,
        key: str,
        default: Any = None,
        validate: Callable[[Any], bool] | None = None,
    ) -> Any:
        """
        Return the deserialized value stored under key.
        Falls back to default when the key is absent, the content is not valid JSON,
        the store cannot be read, or validate(value) is false.
        """
        raw = self.load_raw(key)
        if raw is None:
            return default
        try:
            value = json.loads(raw)
        except (TypeError, json.JSONDecodeError, RecursionError) as e:
            logger.warning("Stored value for %r is not valid JSON, using default: %s", key, e)
            return default
        if validate is not None and not validate(value):
            logger.warning("Stored value for %r has unexpected shape (%s), using default", key, type(value).__name__)
            return default
        return value

    def delete(self, key: str) -> bool:
        """Remove a slot. Returns True if a row was deleted."""
        try:
            conn = self._connect()
            try:
                cur = conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                conn.commit()
                return cur.rowcount > 0
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            logger.error("Failed to delete %r from %s: %s", key, self.path, e)
            return False

    def keys(self) -> list[str]:
        try:
            conn = self._connect()
            try:
                return [r["key"] for r in conn.execute("SELECT key FROM kv ORDER BY key").fetchall()]
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            logger.error("Failed to list keys in %s: %s", self.path, e)
            return []
