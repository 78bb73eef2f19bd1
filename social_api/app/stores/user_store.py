"""
Identity store: persistence of user documents.

``UserStore`` maps ``UserDocument`` to the ``user`` table.  Lookups by
identifier raise ``InvalidIdentifierError`` for malformed identifiers
and return ``None`` for unknown ones.  Both edges of a follow
relationship are written in a single transaction.
"""

import json
import logging
import sqlite3
from typing import Any, Dict, Iterable, Optional

from ..core.db import check_identifier, get_connection, new_object_id, transaction, utc_now
from ..schemas.user import UserDocument

logger = logging.getLogger(__name__)

# Document attribute -> column.  Only these columns are ever written by
# ``update``.
COLUMNS: Dict[str, str] = {
    "username": "username",
    "email": "email",
    "password": "password",
    "profile_picture": "profile_picture",
    "cover_picture": "cover_picture",
    "followers": "followers",
    "followings": "followings",
    "is_admin": "is_admin",
    "desc": '"desc"',
    "city": "city",
    "from_": '"from"',
    "relationship": "relationship",
}
JSON_FIELDS = {"followers", "followings"}


def _encode(field: str, value: Any) -> Any:
    if field in JSON_FIELDS:
        return json.dumps(list(value))
    if field == "is_admin":
        return 1 if value else 0
    if field == "relationship":
        return getattr(value, "value", value)
    return value


def _row_to_document(row: sqlite3.Row) -> UserDocument:
    return UserDocument(
        id=row["id"],
        username=row["username"],
        email=row["email"],
        password=row["password"],
        profile_picture=row["profile_picture"],
        cover_picture=row["cover_picture"],
        followers=json.loads(row["followers"]),
        followings=json.loads(row["followings"]),
        is_admin=bool(row["is_admin"]),
        desc=row["desc"],
        city=row["city"],
        from_=row["from"],
        relationship=row["relationship"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _fetch(conn: sqlite3.Connection, user_id: str) -> Optional[sqlite3.Row]:
    return conn.execute("SELECT * FROM user WHERE id = ?", (user_id,)).fetchone()


def _write_list(conn: sqlite3.Connection, user_id: str, column: str, values: Iterable[str], now: str) -> None:
    conn.execute(
        f"UPDATE user SET {column} = ?, updated_at = ? WHERE id = ?",
        (json.dumps(list(values)), now, user_id),
    )


class UserStore:
    """SQLite backed collection of user documents."""

    def __init__(self, database_path: str) -> None:
        self.database_path = database_path

    async def create(self, username: str, email: str, password: str) -> UserDocument:
        user_id = new_object_id()
        now = utc_now()
        conn = get_connection(self.database_path)
        try:
            conn.execute(
                "INSERT INTO user (id, username, email, password, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (user_id, username, email, password, now, now),
            )
            return _row_to_document(_fetch(conn, user_id))
        finally:
            conn.close()

    async def find_by_id(self, user_id: str) -> Optional[UserDocument]:
        check_identifier(user_id)
        conn = get_connection(self.database_path)
        try:
            row = _fetch(conn, user_id)
            return _row_to_document(row) if row else None
        finally:
            conn.close()

    async def find_by_email(self, email: str) -> Optional[UserDocument]:
        conn = get_connection(self.database_path)
        try:
            row = conn.execute("SELECT * FROM user WHERE email = ?", (email,)).fetchone()
            return _row_to_document(row) if row else None
        finally:
            conn.close()

    async def find_by_username_or_email(self, username: str, email: str) -> Optional[UserDocument]:
        conn = get_connection(self.database_path)
        try:
            row = conn.execute(
                "SELECT * FROM user WHERE username = ? OR email = ? LIMIT 1",
                (username, email),
            ).fetchone()
            return _row_to_document(row) if row else None
        finally:
            conn.close()

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Optional[UserDocument]:
        """Overwrite the given fields and return the updated document.

        ``changes`` is keyed by ``UserDocument`` attribute name.  Keys
        outside ``COLUMNS`` raise ``KeyError``.
        """
        check_identifier(user_id)
        assignments = [f"{COLUMNS[field]} = ?" for field in changes]
        values = [_encode(field, value) for field, value in changes.items()]
        assignments.append("updated_at = ?")
        values.extend([utc_now(), user_id])
        with transaction(self.database_path) as conn:
            conn.execute(f"UPDATE user SET {', '.join(assignments)} WHERE id = ?", tuple(values))
            row = _fetch(conn, user_id)
        return _row_to_document(row) if row else None

    async def delete(self, user_id: str) -> Optional[UserDocument]:
        check_identifier(user_id)
        with transaction(self.database_path) as conn:
            row = _fetch(conn, user_id)
            if row:
                conn.execute("DELETE FROM user WHERE id = ?", (user_id,))
        return _row_to_document(row) if row else None

    async def add_follow(self, follower_id: str, followee_id: str) -> bool:
        """Record that ``follower_id`` follows ``followee_id``.

        Adds ``follower_id`` to the followee's ``followers`` and
        ``followee_id`` to the follower's ``followings`` atomically.
        Returns ``False`` without writing when either user is missing.
        """
        check_identifier(follower_id)
        check_identifier(followee_id)
        with transaction(self.database_path) as conn:
            follower = _fetch(conn, follower_id)
            followee = _fetch(conn, followee_id)
            if follower is None or followee is None:
                return False
            now = utc_now()
            followers = json.loads(followee["followers"])
            if follower_id not in followers:
                _write_list(conn, followee_id, "followers", followers + [follower_id], now)
            followings = json.loads(follower["followings"])
            if followee_id not in followings:
                _write_list(conn, follower_id, "followings", followings + [followee_id], now)
        logger.debug("Follow edge %s -> %s stored", follower_id, followee_id)
        return True

    async def remove_follow(self, follower_id: str, followee_id: str) -> bool:
        """Remove both edges of a follow relationship atomically."""
        check_identifier(follower_id)
        check_identifier(followee_id)
        with transaction(self.database_path) as conn:
            follower = _fetch(conn, follower_id)
            followee = _fetch(conn, followee_id)
            if follower is None or followee is None:
                return False
            now = utc_now()
            followers = [uid for uid in json.loads(followee["followers"]) if uid != follower_id]
            _write_list(conn, followee_id, "followers", followers, now)
            followings = [uid for uid in json.loads(follower["followings"]) if uid != followee_id]
            _write_list(conn, follower_id, "followings", followings, now)
        logger.debug("Follow edge %s -> %s removed", follower_id, followee_id)
        return True
