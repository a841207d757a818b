"""SQLite-backed storage of alias to URL mappings."""

from __future__ import annotations

import sqlite3
import threading
from typing import Any

_SCHEMA = """
CREATE TABLE IF NOT EXISTS url(
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    alias TEXT NOT NULL UNIQUE,
    url TEXT NOT NULL);
CREATE INDEX IF NOT EXISTS idx_alias ON url(alias);
"""


class StorageError(Exception):
    """Base class of storage failures."""


class NotFoundError(StorageError):
    """No URL is stored under the requested alias."""

    def __init__(self, message: str = "not found") -> None:
        super().__init__(message)


class URLExistsError(StorageError):
    """The alias is already taken."""

    def __init__(self, message: str = "url already exists") -> None:
        super().__init__(message)


class Storage:
    """A table of short aliases and the URLs they point to."""

    def __init__(self, path: str) -> None:
        try:
            self._db = sqlite3.connect(path, check_same_thread=False)
            self._db.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise StorageError(f"cannot open storage {path!r}: {exc}") from exc
        self._lock = threading.Lock()

    def save_url(self, url: str, alias: str) -> int:
        """Store ``url`` under ``alias`` and return the new row id."""
        try:
            with self._lock, self._db:
                cursor = self._db.execute(
                    "INSERT INTO url(url, alias) VALUES(?, ?)", (url, alias)
                )
        except sqlite3.IntegrityError as exc:
            if "UNIQUE" in str(exc):
                raise URLExistsError() from exc
            raise StorageError(f"cannot save url: {exc}") from exc
        except sqlite3.Error as exc:
            raise StorageError(f"cannot save url: {exc}") from exc
        if cursor.lastrowid is None:
            raise StorageError("cannot save url: failed to get last insert id")
        return cursor.lastrowid

    def get_url(self, alias: str) -> str:
        """Return the URL stored under ``alias``."""
        try:
            with self._lock:
                row = self._db.execute(
                    "SELECT url FROM url WHERE alias = ?", (alias,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"cannot get url: {exc}") from exc
        if row is None:
            raise NotFoundError()
        return row[0]

    def delete_url(self, alias: str) -> None:
        """Remove the mapping for ``alias``; an unknown alias is not an error."""
        try:
            with self._lock, self._db:
                self._db.execute("DELETE FROM url WHERE alias = ?", (alias,))
        except sqlite3.Error as exc:
            raise StorageError(f"cannot delete url: {exc}") from exc

    def close(self) -> None:
        """Close the underlying database connection."""
        self._db.close()

    def __enter__(self) -> "Storage":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()