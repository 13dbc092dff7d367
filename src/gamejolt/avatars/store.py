"""SQLite-backed persistent store for downloaded avatar images.

Entries live in a single database at ``~/.cache/gamejolt/avatars.db``::

    CREATE TABLE avatars (
        user_id    INTEGER PRIMARY KEY,
        url        TEXT NOT NULL,
        expires_at REAL NOT NULL,
        body       BLOB NOT NULL
    )

A row is only reused while it is unexpired *and* its ``url`` matches the
URL being requested, so a user changing their avatar invalidates the
stored copy immediately.
"""

import sqlite3
import time
from pathlib import Path

DEFAULT_TTL = 24 * 3600

_SCHEMA = """
CREATE TABLE IF NOT EXISTS avatars (
    user_id    INTEGER PRIMARY KEY,
    url        TEXT NOT NULL,
    expires_at REAL NOT NULL,
    body       BLOB NOT NULL
)
"""


class AvatarStore:
    """SQLite blob store with per-entry TTL.

    Runs in WAL mode, so the background downloader can write while the
    caller reads.  Expired rows are dropped the first time they are read.
    Every storage failure reads as a miss: an unwritable cache directory
    degrades to "no persistence" instead of breaking profile fetches.

    Args:
        path: Database file.  Defaults to ``~/.cache/gamejolt/avatars.db``.
        ttl: Seconds a stored image stays valid.
    """

    _DB_PATH: Path = Path.home() / ".cache" / "gamejolt" / "avatars.db"

    def __init__(self, path: Path | None = None, ttl: int = DEFAULT_TTL):
        self._path = path or self._DB_PATH
        self.ttl = ttl
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._open() as db:
                db.execute(_SCHEMA)
        except (sqlite3.Error, OSError):
            pass  # every later call misses

    @property
    def path(self) -> Path:
        return self._path

    def _open(self) -> sqlite3.Connection:
        db = sqlite3.connect(str(self._path), timeout=5)
        db.execute("PRAGMA journal_mode=WAL")
        return db

    def _remove(self, where: str = "", args: tuple = ()) -> int:
        try:
            with self._open() as db:
                return db.execute(f"DELETE FROM avatars {where}", args).rowcount
        except sqlite3.Error:
            return 0

    # ----------------------
    # Lookup
    # ----------------------

    def get(self, user_id: int, url: str | None = None) -> bytes | None:
        """Return the stored image, or ``None`` on miss, expiry, or URL change.

        Args:
            user_id: The user the avatar belongs to.
            url: When given, the stored entry must have been downloaded
                from this URL.
        """
        try:
            with self._open() as db:
                row = db.execute(
                    "SELECT url, expires_at, body FROM avatars WHERE user_id = ?",
                    (user_id,),
                ).fetchone()
        except sqlite3.Error:
            row = None
        if not row:
            return None

        stored_url, expires_at, body = row
        if time.time() >= expires_at:
            self._remove("WHERE user_id = ?", (user_id,))
            return None
        if url is not None and url != stored_url:
            return None
        return bytes(body)

    def set(self, user_id: int, url: str, body: bytes) -> None:
        """Store *body* for *user_id*, replacing any previous image."""
        row = (user_id, url, time.time() + self.ttl, sqlite3.Binary(body))
        try:
            with self._open() as db:
                db.execute(
                    "INSERT OR REPLACE INTO avatars VALUES (?, ?, ?, ?)", row
                )
        except (sqlite3.Error, OSError):
            pass

    # ----------------------
    # Maintenance
    # ----------------------

    def clear(self) -> int:
        """Drop every stored avatar and return how many were dropped."""
        return self._remove()

    def purge_expired(self) -> int:
        """Drop avatars past their TTL and return how many were dropped."""
        return self._remove("WHERE expires_at <= ?", (time.time(),))

    def stats(self) -> dict:
        """Summarise the store.

        Returns:
            ``total``, ``active`` and ``expired`` entry counts, plus
            ``size_bytes``, the summed size of the stored images.  An
            empty dict when the database cannot be read.
        """
        try:
            with self._open() as db:
                total, expired, size = db.execute(
                    "SELECT COUNT(*), "
                    "COALESCE(SUM(expires_at <= ?), 0), "
                    "COALESCE(SUM(LENGTH(body)), 0) "
                    "FROM avatars",
                    (time.time(),),
                ).fetchone()
        except sqlite3.Error:
            return {}
        return {
            "total": total,
            "active": total - expired,
            "expired": expired,
            "size_bytes": size,
        }
