"""
Service for managing reminders.

Reminders combine both halves of the core:

* ``AccessGuard`` decides who may read or change a reminder, after the
  reminder has been found;
* ``RecurrenceEngine`` validates the schedule before anything is
  written, and derives ``is_due`` and ``next_occurrences`` each time a
  reminder is read.

Callers may pass ``now`` explicitly; it defaults to the current UTC
time.  Sending notifications is not handled here: this service only
reports which reminders are due.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import List, Optional

from ..core.access import AccessGuard, Operation, Ownership, Principal
from ..core.config import settings
from ..core.db import get_connection
from ..core.exceptions import InvalidRequestError, NotFoundError
from ..core.recurrence import RecurrenceEngine
from ..schemas.reminder import ReminderCreate, ReminderRead, ReminderUpdate
from .common import (
    current_time,
    from_iso,
    new_id,
    require_new_id,
    require_pet_reference,
    require_target_owner,
    require_user,
    to_iso,
)


logger = logging.getLogger(__name__)

REMINDER_COLUMNS = (
    "id, owner_id, pet_id, title, message, fire_at, is_recurring, recurrence_pattern, is_completed"
)

# Fields of ``ReminderUpdate`` that may be cleared with ``None``.
NULLABLE_FIELDS = {"pet_id", "message", "recurrence_pattern"}


class ReminderService:
    """Service for reminders and their derived schedule."""

    @staticmethod
    def _row_to_read(row: sqlite3.Row, now: datetime) -> ReminderRead:
        fire_at = from_iso(row["fire_at"])
        is_recurring = bool(row["is_recurring"])
        is_completed = bool(row["is_completed"])
        return ReminderRead(
            id=row["id"],
            owner_id=row["owner_id"],
            pet_id=row["pet_id"],
            title=row["title"],
            message=row["message"],
            fire_at=fire_at,
            is_recurring=is_recurring,
            recurrence_pattern=row["recurrence_pattern"],
            is_completed=is_completed,
            is_due=RecurrenceEngine.compute_is_due(fire_at, is_completed, now),
            next_occurrences=RecurrenceEngine.compute_next_occurrences(
                fire_at,
                is_recurring,
                row["recurrence_pattern"],
                settings.reminder_horizon_count,
            ),
        )

    @staticmethod
    def _fetch(conn: sqlite3.Connection, reminder_id: str) -> sqlite3.Row:
        row = conn.execute(
            f"SELECT {REMINDER_COLUMNS} FROM reminders WHERE id = ?", (reminder_id,)
        ).fetchone()
        if not row:
            raise NotFoundError(f"Reminder {reminder_id} not found")
        return row

    @classmethod
    async def create_reminder(
        cls,
        data: ReminderCreate,
        principal: Principal,
        now: Optional[datetime] = None,
    ) -> ReminderRead:
        owner_id = AccessGuard.resolve_owner(principal, data.owner_id)
        AccessGuard.ensure(principal, Ownership(owner_id), Operation.CREATE, "reminder")
        RecurrenceEngine.validate_schedule(
            data.fire_at, data.is_recurring, data.recurrence_pattern
        ).raise_for_error()
        conn = get_connection()
        try:
            require_target_owner(conn, owner_id)
            require_pet_reference(conn, data.pet_id, owner_id)
            reminder_id = data.id or new_id()
            require_new_id(conn, "reminders", reminder_id)
            conn.execute(
                """
                INSERT INTO reminders (id, owner_id, pet_id, title, message, fire_at,
                                       is_recurring, recurrence_pattern, is_completed)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0)
                """,
                (
                    reminder_id,
                    owner_id,
                    data.pet_id,
                    data.title,
                    data.message,
                    to_iso(data.fire_at),
                    int(data.is_recurring),
                    RecurrenceEngine.normalize_pattern(data.is_recurring, data.recurrence_pattern),
                ),
            )
            conn.commit()
            logger.info(
                "User %s created reminder %s for owner %s", principal.subject_id, reminder_id, owner_id
            )
            return cls._row_to_read(cls._fetch(conn, reminder_id), current_time(now))
        finally:
            conn.close()

    @classmethod
    async def list_reminders(
        cls,
        principal: Principal,
        owner_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[ReminderRead]:
        """Return reminders visible to the caller, ordered by fire time."""
        now = current_time(now)
        conn = get_connection()
        try:
            if owner_id is not None:
                require_user(conn, owner_id)
                AccessGuard.ensure(principal, Ownership(owner_id, owner_id), Operation.READ, "user")
            elif not principal.is_admin:
                owner_id = principal.subject_id
            query = f"SELECT {REMINDER_COLUMNS} FROM reminders"
            params: tuple = ()
            if owner_id is not None:
                query += " WHERE owner_id = ?"
                params = (owner_id,)
            query += " ORDER BY fire_at"
            rows = conn.execute(query, params).fetchall()
            return [cls._row_to_read(row, now) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def list_due_reminders(
        cls,
        principal: Principal,
        now: Optional[datetime] = None,
    ) -> List[ReminderRead]:
        """Return the caller's reminders that are due at ``now``."""
        reminders = await cls.list_reminders(principal, now=now)
        return [reminder for reminder in reminders if reminder.is_due]

    @classmethod
    async def get_reminder(
        cls,
        reminder_id: str,
        principal: Principal,
        now: Optional[datetime] = None,
    ) -> ReminderRead:
        conn = get_connection()
        try:
            row = cls._fetch(conn, reminder_id)
            AccessGuard.ensure(
                principal, Ownership(row["owner_id"], reminder_id), Operation.READ, "reminder"
            )
            return cls._row_to_read(row, current_time(now))
        finally:
            conn.close()

    @classmethod
    async def update_reminder(
        cls,
        reminder_id: str,
        updates: ReminderUpdate,
        principal: Principal,
        now: Optional[datetime] = None,
    ) -> ReminderRead:
        """Apply a partial update.

        The resulting schedule (stored values merged with the update)
        is validated before the write.  A completed reminder cannot be
        reopened.
        """
        conn = get_connection()
        try:
            row = cls._fetch(conn, reminder_id)
            AccessGuard.ensure(
                principal, Ownership(row["owner_id"], reminder_id), Operation.UPDATE, "reminder"
            )
            changes = {
                k: v
                for k, v in updates.model_dump(exclude_unset=True).items()
                if v is not None or k in NULLABLE_FIELDS
            }
            if row["is_completed"] and changes.get("is_completed") is False:
                raise InvalidRequestError("A completed reminder cannot be reopened")

            fire_at = changes.get("fire_at", from_iso(row["fire_at"]))
            is_recurring = changes.get("is_recurring", bool(row["is_recurring"]))
            pattern = changes.get("recurrence_pattern", row["recurrence_pattern"])
            RecurrenceEngine.validate_schedule(fire_at, is_recurring, pattern).raise_for_error()

            if "pet_id" in changes:
                require_pet_reference(conn, changes["pet_id"], row["owner_id"])
            if "fire_at" in changes:
                changes["fire_at"] = to_iso(changes["fire_at"])
            if {"is_recurring", "recurrence_pattern"} & changes.keys():
                changes["recurrence_pattern"] = RecurrenceEngine.normalize_pattern(is_recurring, pattern)
            for flag in ("is_recurring", "is_completed"):
                if flag in changes:
                    changes[flag] = int(changes[flag])

            if changes:
                fields = ", ".join(f"{key} = ?" for key in changes)
                conn.execute(
                    f"UPDATE reminders SET {fields}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (*changes.values(), reminder_id),
                )
                conn.commit()
                logger.info(
                    "User %s updated reminder %s (%s)",
                    principal.subject_id,
                    reminder_id,
                    ", ".join(changes),
                )
            return cls._row_to_read(cls._fetch(conn, reminder_id), current_time(now))
        finally:
            conn.close()

    @classmethod
    async def complete_reminder(
        cls,
        reminder_id: str,
        principal: Principal,
        now: Optional[datetime] = None,
    ) -> ReminderRead:
        """Mark a reminder as completed.  Completing twice is a no-op."""
        conn = get_connection()
        try:
            row = cls._fetch(conn, reminder_id)
            AccessGuard.ensure(
                principal, Ownership(row["owner_id"], reminder_id), Operation.UPDATE, "reminder"
            )
            if not row["is_completed"]:
                conn.execute(
                    "UPDATE reminders SET is_completed = 1, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (reminder_id,),
                )
                conn.commit()
                logger.info("User %s completed reminder %s", principal.subject_id, reminder_id)
            return cls._row_to_read(cls._fetch(conn, reminder_id), current_time(now))
        finally:
            conn.close()

    @classmethod
    async def delete_reminder(cls, reminder_id: str, principal: Principal) -> None:
        conn = get_connection()
        try:
            row = cls._fetch(conn, reminder_id)
            AccessGuard.ensure(
                principal, Ownership(row["owner_id"], reminder_id), Operation.DELETE, "reminder"
            )
            conn.execute("DELETE FROM reminders WHERE id = ?", (reminder_id,))
            conn.commit()
            logger.info("User %s deleted reminder %s", principal.subject_id, reminder_id)
        finally:
            conn.close()
