"""
Service for managing to-do tasks.

Tasks belong to one owner and may reference one of that owner's pets.
As with pets, existence is checked before ownership so that a missing
task is reported as "not found" to everyone.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import List, Optional

from ..core.access import AccessGuard, Operation, Ownership, Principal
from ..core.db import get_connection
from ..core.exceptions import NotFoundError
from ..schemas.task import TodoTaskCreate, TodoTaskRead, TodoTaskUpdate
from .common import (
    from_iso,
    new_id,
    require_new_id,
    require_pet_reference,
    require_target_owner,
    require_user,
    to_iso,
)


logger = logging.getLogger(__name__)

TASK_COLUMNS = "id, owner_id, pet_id, type, title, is_completed, due_date"


class TaskService:
    """Service for creating, listing, updating and deleting to-do tasks."""

    @staticmethod
    def _row_to_read(row: sqlite3.Row) -> TodoTaskRead:
        return TodoTaskRead(
            id=row["id"],
            owner_id=row["owner_id"],
            pet_id=row["pet_id"],
            type=row["type"],
            title=row["title"],
            is_completed=bool(row["is_completed"]),
            due_date=from_iso(row["due_date"]),
        )

    @staticmethod
    def _fetch(conn: sqlite3.Connection, task_id: str) -> sqlite3.Row:
        row = conn.execute(
            f"SELECT {TASK_COLUMNS} FROM todo_tasks WHERE id = ?", (task_id,)
        ).fetchone()
        if not row:
            raise NotFoundError(f"Task {task_id} not found")
        return row

    @classmethod
    async def create_task(cls, data: TodoTaskCreate, principal: Principal) -> TodoTaskRead:
        owner_id = AccessGuard.resolve_owner(principal, data.owner_id)
        AccessGuard.ensure(principal, Ownership(owner_id), Operation.CREATE, "task")
        conn = get_connection()
        try:
            require_target_owner(conn, owner_id)
            require_pet_reference(conn, data.pet_id, owner_id)
            task_id = data.id or new_id()
            require_new_id(conn, "todo_tasks", task_id)
            conn.execute(
                """
                INSERT INTO todo_tasks (id, owner_id, pet_id, type, title, is_completed, due_date)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    task_id,
                    owner_id,
                    data.pet_id,
                    data.type,
                    data.title,
                    int(data.is_completed),
                    to_iso(data.due_date),
                ),
            )
            conn.commit()
            logger.info("User %s created task %s for owner %s", principal.subject_id, task_id, owner_id)
            return cls._row_to_read(cls._fetch(conn, task_id))
        finally:
            conn.close()

    @classmethod
    async def list_tasks(cls, principal: Principal, owner_id: Optional[str] = None) -> List[TodoTaskRead]:
        """Return tasks visible to the caller (see ``PetService.list_pets``)."""
        conn = get_connection()
        try:
            if owner_id is not None:
                require_user(conn, owner_id)
                AccessGuard.ensure(principal, Ownership(owner_id, owner_id), Operation.READ, "user")
            elif not principal.is_admin:
                owner_id = principal.subject_id
            query = f"SELECT {TASK_COLUMNS} FROM todo_tasks"
            params: tuple = ()
            if owner_id is not None:
                query += " WHERE owner_id = ?"
                params = (owner_id,)
            query += " ORDER BY is_completed, due_date IS NULL, due_date"
            return [cls._row_to_read(row) for row in conn.execute(query, params).fetchall()]
        finally:
            conn.close()

    @classmethod
    async def get_task(cls, task_id: str, principal: Principal) -> TodoTaskRead:
        conn = get_connection()
        try:
            row = cls._fetch(conn, task_id)
            AccessGuard.ensure(principal, Ownership(row["owner_id"], task_id), Operation.READ, "task")
            return cls._row_to_read(row)
        finally:
            conn.close()

    @classmethod
    async def update_task(cls, task_id: str, updates: TodoTaskUpdate, principal: Principal) -> TodoTaskRead:
        """Apply a partial update.

        ``pet_id`` and ``due_date`` may be cleared with ``None``; the
        other fields ignore ``None``.
        """
        conn = get_connection()
        try:
            row = cls._fetch(conn, task_id)
            AccessGuard.ensure(principal, Ownership(row["owner_id"], task_id), Operation.UPDATE, "task")
            changes = updates.model_dump(exclude_unset=True)
            changes = {
                k: v for k, v in changes.items() if v is not None or k in {"pet_id", "due_date"}
            }
            if "pet_id" in changes:
                require_pet_reference(conn, changes["pet_id"], row["owner_id"])
            if "due_date" in changes:
                changes["due_date"] = to_iso(changes["due_date"])
            if "is_completed" in changes:
                changes["is_completed"] = int(changes["is_completed"])
            if changes:
                fields = ", ".join(f"{key} = ?" for key in changes)
                conn.execute(
                    f"UPDATE todo_tasks SET {fields}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (*changes.values(), task_id),
                )
                conn.commit()
                logger.info("User %s updated task %s (%s)", principal.subject_id, task_id, ", ".join(changes))
            return cls._row_to_read(cls._fetch(conn, task_id))
        finally:
            conn.close()

    @classmethod
    async def delete_task(cls, task_id: str, principal: Principal) -> None:
        conn = get_connection()
        try:
            row = cls._fetch(conn, task_id)
            AccessGuard.ensure(principal, Ownership(row["owner_id"], task_id), Operation.DELETE, "task")
            conn.execute("DELETE FROM todo_tasks WHERE id = ?", (task_id,))
            conn.commit()
            logger.info("User %s deleted task %s", principal.subject_id, task_id)
        finally:
            conn.close()
