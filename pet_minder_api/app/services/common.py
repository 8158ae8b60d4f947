"""
Helpers shared by the resource services.

These functions encapsulate the small SQLite lookups every service
needs before it writes: generating record ids, checking that a target
owner or a referenced pet exists, and converting timestamps to and
from the ISO strings stored in the database.
"""

from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Optional

from ..core.exceptions import InvalidRequestError, NotFoundError
from ..core.recurrence import as_utc


def current_time(now: Optional[datetime] = None) -> datetime:
    """Return ``now`` as aware UTC, or the current UTC time when omitted."""
    if now is None:
        return datetime.now(timezone.utc)
    return as_utc(now)


def new_id() -> str:
    return str(uuid.uuid4())


def to_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return as_utc(value).isoformat()


def from_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return as_utc(datetime.fromisoformat(value))


def user_exists(conn: sqlite3.Connection, user_id: str) -> bool:
    row = conn.execute("SELECT id FROM users WHERE id = ?", (user_id,)).fetchone()
    return row is not None


def require_user(conn: sqlite3.Connection, user_id: str) -> None:
    """Raise ``NotFoundError`` unless the user exists."""
    if not user_exists(conn, user_id):
        raise NotFoundError(f"User {user_id} not found")


def require_target_owner(conn: sqlite3.Connection, owner_id: str) -> None:
    """Reject creating a record for an owner that does not exist."""
    if not user_exists(conn, owner_id):
        raise InvalidRequestError(f"Owner {owner_id} does not exist")


def require_new_id(conn: sqlite3.Connection, table: str, record_id: str) -> None:
    """Reject a client supplied id that is already taken."""
    row = conn.execute(f"SELECT id FROM {table} WHERE id = ?", (record_id,)).fetchone()
    if row is not None:
        raise InvalidRequestError(f"Id {record_id} is already in use")


def require_pet_reference(conn: sqlite3.Connection, pet_id: Optional[str], owner_id: str) -> None:
    """A task or reminder may only point at an existing pet of the same owner."""
    if pet_id is None:
        return
    row = conn.execute("SELECT owner_id FROM pets WHERE id = ?", (pet_id,)).fetchone()
    if row is None:
        raise InvalidRequestError(f"Pet {pet_id} does not exist")
    if row["owner_id"] != owner_id:
        raise InvalidRequestError(f"Pet {pet_id} belongs to another owner")
