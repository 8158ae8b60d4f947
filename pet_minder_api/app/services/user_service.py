"""
Business logic for users.

A user record is owned by the user itself, so the same
``AccessGuard`` rule that protects pets and reminders also protects
profiles: users may read, change and delete their own account and
administrators may do so for anyone.  Changing a role is reserved to
administrators.
"""

import logging
import sqlite3
from datetime import datetime
from typing import List, Optional

from ..core.access import AccessGuard, Operation, Ownership, Principal, Role
from ..core.db import get_connection
from ..core.exceptions import ForbiddenError, InvalidRequestError, NotFoundError
from ..core.security import hash_password, verify_password
from ..schemas.user import UserCreate, UserDetail, UserRead, UserUpdate
from .common import new_id
from .pet_service import PetService
from .reminder_service import ReminderService
from .task_service import TaskService


logger = logging.getLogger(__name__)

USER_COLUMNS = "id, email, first_name, last_name, role"


class UserService:
    """Service for registering, authenticating and managing users."""

    @staticmethod
    def _row_to_read(row: sqlite3.Row) -> UserRead:
        return UserRead(
            id=row["id"],
            email=row["email"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            role=Role.from_claim(row["role"]),
        )

    @staticmethod
    def _fetch(conn: sqlite3.Connection, user_id: str) -> sqlite3.Row:
        row = conn.execute(
            f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", (user_id,)
        ).fetchone()
        if not row:
            raise NotFoundError(f"User {user_id} not found")
        return row

    @staticmethod
    def _require_free_email(conn: sqlite3.Connection, email: str, user_id: Optional[str] = None) -> None:
        row = conn.execute("SELECT id FROM users WHERE email = ?", (email,)).fetchone()
        if row and row["id"] != user_id:
            raise InvalidRequestError(f"Email {email} is already registered")

    @classmethod
    async def create_user(cls, data: UserCreate) -> UserRead:
        """Register a new user.

        The first registered user becomes an administrator so that a
        fresh installation can be managed without touching the database.
        """
        conn = get_connection()
        try:
            cls._require_free_email(conn, data.email)
            row = conn.execute("SELECT COUNT(*) AS count FROM users").fetchone()
            role = Role.ADMIN if row["count"] == 0 else Role.REGULAR
            user_id = new_id()
            conn.execute(
                """
                INSERT INTO users (id, email, first_name, last_name, password, role)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    data.email,
                    data.first_name,
                    data.last_name,
                    hash_password(data.password),
                    role.value,
                ),
            )
            conn.commit()
            logger.info("Registered user %s (%s) as %s", user_id, data.email, role.value)
            return cls._row_to_read(cls._fetch(conn, user_id))
        finally:
            conn.close()

    @classmethod
    async def authenticate(cls, email: str, password: str) -> Optional[UserRead]:
        """Return the user if the credentials match, otherwise ``None``."""
        conn = get_connection()
        try:
            row = conn.execute(
                f"SELECT {USER_COLUMNS}, password FROM users WHERE email = ?",
                (email,),
            ).fetchone()
            if not row or not verify_password(password, row["password"]):
                logger.info("Failed login for %s", email)
                return None
            return cls._row_to_read(row)
        finally:
            conn.close()

    @classmethod
    async def list_users(cls) -> List[UserRead]:
        """Return all users; the route restricts this to administrators."""
        conn = get_connection()
        try:
            rows = conn.execute(f"SELECT {USER_COLUMNS} FROM users ORDER BY email").fetchall()
            return [cls._row_to_read(row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def get_user(cls, user_id: str, principal: Principal) -> UserRead:
        conn = get_connection()
        try:
            row = cls._fetch(conn, user_id)
            AccessGuard.ensure(principal, Ownership(row["id"], row["id"]), Operation.READ, "user")
            return cls._row_to_read(row)
        finally:
            conn.close()

    @classmethod
    async def get_user_detail(
        cls,
        user_id: str,
        principal: Principal,
        now: Optional[datetime] = None,
    ) -> UserDetail:
        """Return a user together with their pets, tasks and reminders."""
        user = await cls.get_user(user_id, principal)
        return UserDetail(
            **user.model_dump(),
            pets=await PetService.list_pets(principal, owner_id=user_id),
            tasks=await TaskService.list_tasks(principal, owner_id=user_id),
            reminders=await ReminderService.list_reminders(principal, owner_id=user_id, now=now),
        )

    @classmethod
    async def update_user(cls, user_id: str, updates: UserUpdate, principal: Principal) -> UserRead:
        conn = get_connection()
        try:
            row = cls._fetch(conn, user_id)
            AccessGuard.ensure(principal, Ownership(row["id"], row["id"]), Operation.UPDATE, "user")
            changes = {k: v for k, v in updates.model_dump(exclude_unset=True).items() if v is not None}
            if "role" in changes:
                if not principal.is_admin:
                    raise ForbiddenError("Only administrators may change roles")
                changes["role"] = Role(changes["role"]).value
            if "email" in changes:
                cls._require_free_email(conn, changes["email"], user_id)
            if "password" in changes:
                changes["password"] = hash_password(changes["password"])
            if changes:
                fields = ", ".join(f"{key} = ?" for key in changes)
                conn.execute(
                    f"UPDATE users SET {fields}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (*changes.values(), user_id),
                )
                conn.commit()
                logger.info("User %s updated user %s (%s)", principal.subject_id, user_id, ", ".join(changes))
            return cls._row_to_read(cls._fetch(conn, user_id))
        finally:
            conn.close()

    @classmethod
    async def delete_user(cls, user_id: str, principal: Principal) -> None:
        """Delete a user and, through foreign key cascades, everything they own."""
        conn = get_connection()
        try:
            row = cls._fetch(conn, user_id)
            AccessGuard.ensure(principal, Ownership(row["id"], row["id"]), Operation.DELETE, "user")
            conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
            conn.commit()
            logger.info("User %s deleted user %s", principal.subject_id, user_id)
        finally:
            conn.close()
