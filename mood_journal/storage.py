"""Byte key-value backends and the entry/profile stores built on them."""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol

from .errors import PersistenceWriteError
from .schemas import MoodEntry, UserProfile

logger = logging.getLogger(__name__)

ENTRIES_KEY = "MoodEntries"
PROFILE_KEY = "UserProfile"


class KeyValueBackend(Protocol):
    """Blocking get/set byte store."""

    def get(self, key: str) -> Optional[bytes]:
        ...

    def set(self, key: str, value: bytes) -> None:
        ...


class SQLiteKeyValueStore:
    """Persists opaque byte records in a single SQLite table."""

    def __init__(self, db_path: str):
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._init_schema()

    def _init_schema(self) -> None:
        self.conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value BLOB NOT NULL,
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
            """
        )
        self.conn.commit()

    def get(self, key: str) -> Optional[bytes]:
        try:
            with self._lock:
                row = self.conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            logger.warning("Reading %r failed: %s", key, exc)
            return None
        return bytes(row["value"]) if row else None

    def set(self, key: str, value: bytes) -> None:
        query = """
        INSERT INTO kv (key, value, updated_at) VALUES (?, ?, datetime('now'))
        ON CONFLICT(key) DO UPDATE SET
            value=excluded.value,
            updated_at=excluded.updated_at
        """
        with self._lock:
            try:
                self.conn.execute(query, (key, sqlite3.Binary(value)))
                self.conn.commit()
            except sqlite3.Error as exc:
                self.conn.rollback()
                raise PersistenceWriteError(key, str(exc)) from exc

    def close(self) -> None:
        self.conn.close()


class MemoryKeyValueStore:
    """Dict-backed backend for tests and throwaway demos."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self.data: Dict[str, bytes] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self.data.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self.data[key] = bytes(value)


class EntryStore:
    """Ordered, append-only collection of mood entries under one key."""

    def __init__(self, backend: KeyValueBackend, key: str = ENTRIES_KEY):
        self.backend = backend
        self.key = key
        self._entries: Optional[List[MoodEntry]] = None

    def load_all(self) -> List[MoodEntry]:
        """Return entries in stored order; corrupt or missing data reads as empty."""
        if self._entries is None:
            self._entries = self._read()
        return list(self._entries)

    def append(self, entry: MoodEntry) -> None:
        self.extend([entry])

    def extend(self, entries: Iterable[MoodEntry]) -> None:
        """Append a batch and persist once."""
        current = self.load_all()
        batch = list(entries)
        seen = {entry.id for entry in current}
        for entry in batch:
            if entry.id in seen:
                raise ValueError(f"duplicate entry id {entry.id!r}")
            seen.add(entry.id)
        self._write(current + batch)

    def replace_all(self, entries: Iterable[MoodEntry]) -> None:
        self._write(list(entries))

    def _read(self) -> List[MoodEntry]:
        raw = self.backend.get(self.key)
        if raw is None:
            return []
        try:
            payload = json.loads(raw.decode("utf-8"))
            return [MoodEntry.from_dict(item) for item in payload]
        except Exception as exc:
            logger.warning("Stored entries under %r are unreadable, starting empty: %s", self.key, exc)
            return []

    def _write(self, entries: List[MoodEntry]) -> None:
        data = json.dumps([entry.to_dict() for entry in entries], ensure_ascii=False).encode("utf-8")
        try:
            self.backend.set(self.key, data)
        except PersistenceWriteError:
            logger.error("Persisting %d entries failed", len(entries))
            raise
        self._entries = entries


class ProfileStore:
    """Single user profile record under one key."""

    def __init__(self, backend: KeyValueBackend, key: str = PROFILE_KEY):
        self.backend = backend
        self.key = key

    def load(self) -> UserProfile:
        raw = self.backend.get(self.key)
        if raw is None:
            return UserProfile()
        try:
            return UserProfile.from_dict(json.loads(raw.decode("utf-8")))
        except Exception as exc:
            logger.warning("Stored profile is unreadable, using defaults: %s", exc)
            return UserProfile()

    def save(self, profile: UserProfile) -> None:
        data = json.dumps(profile.to_dict(), ensure_ascii=False).encode("utf-8")
        try:
            self.backend.set(self.key, data)
        except PersistenceWriteError:
            logger.error("Persisting profile failed")
            raise
