"""
Post store: persistence of post documents.

``PostStore`` maps ``PostDocument`` to the ``post`` table.  Reactions
are written by ``set_reaction``, which rewrites both reaction lists in
one transaction so a user can never end up in ``likes`` and
``dislike`` at the same time.
"""

import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional

from ..core.db import check_identifier, get_connection, new_object_id, transaction, utc_now
from ..schemas.post import PostDocument, Reaction

logger = logging.getLogger(__name__)

COLUMNS: Dict[str, str] = {
    "user_id": "user_id",
    "desc": '"desc"',
    "img": "img",
    "likes": "likes",
    "dislike": "dislike",
}
JSON_FIELDS = {"img", "likes", "dislike"}


def _encode(field: str, value: Any) -> Any:
    return json.dumps(list(value)) if field in JSON_FIELDS else value


def _row_to_document(row: sqlite3.Row) -> PostDocument:
    return PostDocument(
        id=row["id"],
        user_id=row["user_id"],
        desc=row["desc"],
        img=json.loads(row["img"]),
        likes=json.loads(row["likes"]),
        dislike=json.loads(row["dislike"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _fetch(conn: sqlite3.Connection, post_id: str) -> Optional[sqlite3.Row]:
    return conn.execute("SELECT * FROM post WHERE id = ?", (post_id,)).fetchone()


class PostStore:
    """SQLite backed collection of post documents."""

    def __init__(self, database_path: str) -> None:
        self.database_path = database_path

    async def create(self, fields: Dict[str, Any]) -> PostDocument:
        """Insert a post built from ``fields`` (``user_id`` is required)."""
        if not fields.get("user_id"):
            raise ValueError("user_id is required")
        post_id = new_object_id()
        now = utc_now()
        names = ["id"] + [COLUMNS[field] for field in fields] + ["created_at", "updated_at"]
        values = [post_id] + [_encode(field, value) for field, value in fields.items()] + [now, now]
        placeholders = ", ".join("?" for _ in names)
        conn = get_connection(self.database_path)
        try:
            conn.execute(f"INSERT INTO post ({', '.join(names)}) VALUES ({placeholders})", tuple(values))
            return _row_to_document(_fetch(conn, post_id))
        finally:
            conn.close()

    async def find_by_id(self, post_id: str) -> Optional[PostDocument]:
        check_identifier(post_id)
        conn = get_connection(self.database_path)
        try:
            row = _fetch(conn, post_id)
            return _row_to_document(row) if row else None
        finally:
            conn.close()

    async def find_by_user(self, user_id: str) -> List[PostDocument]:
        """All posts owned by ``user_id``, oldest update first."""
        conn = get_connection(self.database_path)
        try:
            rows = conn.execute(
                "SELECT * FROM post WHERE user_id = ? ORDER BY updated_at, rowid",
                (user_id,),
            ).fetchall()
            return [_row_to_document(row) for row in rows]
        finally:
            conn.close()

    async def update(self, post_id: str, changes: Dict[str, Any]) -> Optional[PostDocument]:
        check_identifier(post_id)
        assignments = [f"{COLUMNS[field]} = ?" for field in changes]
        values = [_encode(field, value) for field, value in changes.items()]
        assignments.append("updated_at = ?")
        values.extend([utc_now(), post_id])
        with transaction(self.database_path) as conn:
            conn.execute(f"UPDATE post SET {', '.join(assignments)} WHERE id = ?", tuple(values))
            row = _fetch(conn, post_id)
        return _row_to_document(row) if row else None

    async def delete(self, post_id: str) -> Optional[PostDocument]:
        check_identifier(post_id)
        with transaction(self.database_path) as conn:
            row = _fetch(conn, post_id)
            if row:
                conn.execute("DELETE FROM post WHERE id = ?", (post_id,))
        return _row_to_document(row) if row else None

    async def set_reaction(self, post_id: str, user_id: str, reaction: Optional[Reaction]) -> Optional[PostDocument]:
        """Make ``reaction`` the only reaction of ``user_id`` on the post.

        ``None`` clears both lists for the user.  Order of the other
        users in each list is preserved.  Returns ``None`` if the post
        does not exist.
        """
        check_identifier(post_id)
        with transaction(self.database_path) as conn:
            row = _fetch(conn, post_id)
            if row is None:
                return None
            lists = {
                kind: [uid for uid in json.loads(row[kind.value]) if uid != user_id]
                for kind in Reaction
            }
            if reaction is not None:
                lists[reaction].append(user_id)
            conn.execute(
                "UPDATE post SET likes = ?, dislike = ?, updated_at = ? WHERE id = ?",
                (
                    json.dumps(lists[Reaction.LIKE]),
                    json.dumps(lists[Reaction.DISLIKE]),
                    utc_now(),
                    post_id,
                ),
            )
            row = _fetch(conn, post_id)
        logger.debug("Reaction of %s on post %s set to %s", user_id, post_id, reaction)
        return _row_to_document(row)
