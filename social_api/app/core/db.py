"""
SQLite document storage and a simple migration system.

The two collections, ``user`` and ``post``, are SQLite tables whose list
fields (followers, likes, images, ...) are stored as JSON text.  This
module provides connection handling (``get_connection``), explicit
write transactions (``transaction``), migrations applied on start-up
(``init_db``) and the identifier helpers shared by both stores.

Applied migration versions are recorded in the ``migrations`` table;
new migrations are appended to ``MIGRATIONS`` with the next version.
"""

import logging
import os
import re
import secrets
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^[0-9a-f]{24}$")


class InvalidIdentifierError(ValueError):
    """Raised when a value cannot be an identifier of a stored document."""


def new_object_id() -> str:
    """Return a fresh 24 character hex identifier."""
    return secrets.token_hex(12)


def check_identifier(value: object) -> str:
    """Return ``value`` if it is a well formed identifier, else raise."""
    if not isinstance(value, str) or not IDENTIFIER_PATTERN.match(value):
        raise InvalidIdentifierError(f"Malformed identifier: {value!r}")
    return value


def utc_now() -> str:
    """Current UTC time as ISO-8601 with microseconds.

    All timestamps share this format so they sort correctly as text.
    """
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def get_database_path(database_url: str) -> str:
    """Resolve ``database_url`` to a filesystem path.

    Absolute paths are returned unchanged, relative ones are resolved
    against the project root.
    """
    if os.path.isabs(database_url):
        return database_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / database_url).resolve())


def get_connection(database_path: str) -> sqlite3.Connection:
    """Open a connection in autocommit mode.

    Single statements commit on their own; multi-statement writes go
    through ``transaction``.  Rows are returned as ``sqlite3.Row`` so
    columns can be read by name.
    """
    conn = sqlite3.connect(database_path, isolation_level=None, timeout=30)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def transaction(database_path: str) -> Iterator[sqlite3.Connection]:
    """Run the enclosed statements as one write transaction.

    ``BEGIN IMMEDIATE`` takes the database write lock up front, so the
    reads done inside the block cannot be invalidated by a concurrent
    writer before the block commits.
    """
    conn = get_connection(database_path)
    try:
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")
    finally:
        conn.close()


MIGRATIONS: list[tuple[int, str]] = [
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS user (
            id TEXT PRIMARY KEY,
            username TEXT NOT NULL UNIQUE,
            email TEXT NOT NULL UNIQUE,
            password TEXT NOT NULL,
            profile_picture TEXT NOT NULL DEFAULT '',
            cover_picture TEXT NOT NULL DEFAULT '',
            followers TEXT NOT NULL DEFAULT '[]',
            followings TEXT NOT NULL DEFAULT '[]',
            is_admin INTEGER NOT NULL DEFAULT 0,
            "desc" TEXT NOT NULL DEFAULT '',
            city TEXT NOT NULL DEFAULT '',
            "from" TEXT NOT NULL DEFAULT '',
            relationship TEXT NOT NULL DEFAULT 'single',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS post (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            "desc" TEXT NOT NULL DEFAULT '',
            img TEXT NOT NULL DEFAULT '[]',
            likes TEXT NOT NULL DEFAULT '[]',
            dislike TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """,
    ),
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_post_user_id ON post(user_id);
        CREATE INDEX IF NOT EXISTS idx_post_updated_at ON post(updated_at);
        """,
    ),
]


def init_db(database_path: str) -> None:
    """Create the database if needed and apply pending migrations."""
    conn = get_connection(database_path)
    try:
        conn.execute(
            "CREATE TABLE IF NOT EXISTS migrations ("
            "version INTEGER PRIMARY KEY, "
            "applied_at TEXT NOT NULL)"
        )
        row = conn.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
        current = row["version"] or 0
        for version, script in MIGRATIONS:
            if version <= current:
                continue
            conn.executescript(f"BEGIN;\n{script}\nCOMMIT;")
            conn.execute(
                "INSERT INTO migrations (version, applied_at) VALUES (?, ?)",
                (version, utc_now()),
            )
            logger.info("Applied migration %s", version)
    finally:
        conn.close()
