"""
Business logic for pets and their health records.

Every operation follows the same order: load the pet (404 if it does
not exist), ask ``AccessGuard`` whether the caller may touch it (403
otherwise), then read or write.  Health data belongs to the pet and
inherits its ownership.
"""

import json
import logging
import sqlite3
from typing import List, Optional

from ..core.access import AccessGuard, Operation, Ownership, Principal
from ..core.db import get_connection
from ..core.exceptions import NotFoundError
from ..schemas.pet import HealthDataRead, HealthDataUpdate, PetCreate, PetRead, PetUpdate
from .common import from_iso, new_id, require_new_id, require_target_owner, require_user, to_iso


logger = logging.getLogger(__name__)

PET_COLUMNS = "id, owner_id, name, gender, type, date_of_birth, breed, weight"


class PetService:
    """Service for managing pets, scoped to their owners."""

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------
    @staticmethod
    def _health_row_to_read(row: sqlite3.Row) -> HealthDataRead:
        weight_history = json.loads(row["weight_history"] or "[]")
        return HealthDataRead(
            id=row["id"],
            pet_id=row["pet_id"],
            weight_history=weight_history,
            last_vet_visit=from_iso(row["last_vet_visit"]),
            vaccinations=json.loads(row["vaccinations"] or "[]"),
            allergies=json.loads(row["allergies"] or "[]"),
            medical_notes=row["medical_notes"],
            current_medications=json.loads(row["current_medications"] or "[]"),
            current_weight=weight_history[-1] if weight_history else 0.0,
        )

    @classmethod
    def _row_to_read(cls, conn: sqlite3.Connection, row: sqlite3.Row) -> PetRead:
        health_row = conn.execute(
            "SELECT * FROM health_data WHERE pet_id = ?", (row["id"],)
        ).fetchone()
        return PetRead(
            id=row["id"],
            owner_id=row["owner_id"],
            name=row["name"],
            gender=row["gender"],
            type=row["type"],
            date_of_birth=row["date_of_birth"],
            breed=row["breed"],
            weight=row["weight"],
            health_data=cls._health_row_to_read(health_row) if health_row else None,
        )

    @staticmethod
    def _fetch(conn: sqlite3.Connection, pet_id: str) -> sqlite3.Row:
        row = conn.execute(
            f"SELECT {PET_COLUMNS} FROM pets WHERE id = ?", (pet_id,)
        ).fetchone()
        if not row:
            raise NotFoundError(f"Pet {pet_id} not found")
        return row

    # ------------------------------------------------------------------
    # Pets
    # ------------------------------------------------------------------
    @classmethod
    async def create_pet(cls, data: PetCreate, principal: Principal) -> PetRead:
        owner_id = AccessGuard.resolve_owner(principal, data.owner_id)
        AccessGuard.ensure(principal, Ownership(owner_id), Operation.CREATE, "pet")
        conn = get_connection()
        try:
            require_target_owner(conn, owner_id)
            pet_id = data.id or new_id()
            require_new_id(conn, "pets", pet_id)
            conn.execute(
                """
                INSERT INTO pets (id, owner_id, name, gender, type, date_of_birth, breed, weight)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    pet_id,
                    owner_id,
                    data.name,
                    data.gender,
                    data.type,
                    data.date_of_birth.isoformat(),
                    data.breed,
                    data.weight,
                ),
            )
            conn.commit()
            logger.info("User %s created pet %s for owner %s", principal.subject_id, pet_id, owner_id)
            return cls._row_to_read(conn, cls._fetch(conn, pet_id))
        finally:
            conn.close()

    @classmethod
    async def list_pets(cls, principal: Principal, owner_id: Optional[str] = None) -> List[PetRead]:
        """Return pets visible to the caller.

        Without ``owner_id`` administrators see every pet and regular
        users see their own.  With ``owner_id`` the caller must be that
        owner or an administrator.
        """
        conn = get_connection()
        try:
            if owner_id is not None:
                require_user(conn, owner_id)
                AccessGuard.ensure(principal, Ownership(owner_id, owner_id), Operation.READ, "user")
            elif not principal.is_admin:
                owner_id = principal.subject_id
            if owner_id is None:
                rows = conn.execute(f"SELECT {PET_COLUMNS} FROM pets ORDER BY name").fetchall()
            else:
                rows = conn.execute(
                    f"SELECT {PET_COLUMNS} FROM pets WHERE owner_id = ? ORDER BY name",
                    (owner_id,),
                ).fetchall()
            return [cls._row_to_read(conn, row) for row in rows]
        finally:
            conn.close()

    @classmethod
    async def get_pet(cls, pet_id: str, principal: Principal) -> PetRead:
        conn = get_connection()
        try:
            row = cls._fetch(conn, pet_id)
            AccessGuard.ensure(principal, Ownership(row["owner_id"], pet_id), Operation.READ, "pet")
            return cls._row_to_read(conn, row)
        finally:
            conn.close()

    @classmethod
    async def update_pet(cls, pet_id: str, updates: PetUpdate, principal: Principal) -> PetRead:
        """Update fields of an existing pet.

        Only fields provided in ``updates`` are set; ``None`` values are
        ignored because every pet column is mandatory.
        """
        conn = get_connection()
        try:
            row = cls._fetch(conn, pet_id)
            AccessGuard.ensure(principal, Ownership(row["owner_id"], pet_id), Operation.UPDATE, "pet")
            changes = {k: v for k, v in updates.model_dump(exclude_unset=True).items() if v is not None}
            if "date_of_birth" in changes:
                changes["date_of_birth"] = changes["date_of_birth"].isoformat()
            if changes:
                fields = ", ".join(f"{key} = ?" for key in changes)
                conn.execute(
                    f"UPDATE pets SET {fields}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (*changes.values(), pet_id),
                )
                conn.commit()
                logger.info("User %s updated pet %s (%s)", principal.subject_id, pet_id, ", ".join(changes))
            return cls._row_to_read(conn, cls._fetch(conn, pet_id))
        finally:
            conn.close()

    @classmethod
    async def delete_pet(cls, pet_id: str, principal: Principal) -> None:
        """Delete a pet together with its health record.

        Tasks and reminders that referenced the pet keep existing with
        ``pet_id`` cleared (foreign key ``ON DELETE SET NULL``).
        """
        conn = get_connection()
        try:
            row = cls._fetch(conn, pet_id)
            AccessGuard.ensure(principal, Ownership(row["owner_id"], pet_id), Operation.DELETE, "pet")
            conn.execute("DELETE FROM pets WHERE id = ?", (pet_id,))
            conn.commit()
            logger.info("User %s deleted pet %s", principal.subject_id, pet_id)
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Health data
    # ------------------------------------------------------------------
    @classmethod
    async def get_health_data(cls, pet_id: str, principal: Principal) -> HealthDataRead:
        conn = get_connection()
        try:
            row = cls._fetch(conn, pet_id)
            AccessGuard.ensure(principal, Ownership(row["owner_id"], pet_id), Operation.READ, "pet")
            health_row = conn.execute(
                "SELECT * FROM health_data WHERE pet_id = ?", (pet_id,)
            ).fetchone()
            if not health_row:
                raise NotFoundError(f"Pet {pet_id} has no health data")
            return cls._health_row_to_read(health_row)
        finally:
            conn.close()

    @classmethod
    async def set_health_data(cls, pet_id: str, data: HealthDataUpdate, principal: Principal) -> HealthDataRead:
        """Create or replace the health record of a pet."""
        conn = get_connection()
        try:
            row = cls._fetch(conn, pet_id)
            AccessGuard.ensure(principal, Ownership(row["owner_id"], pet_id), Operation.UPDATE, "pet")
            existing = conn.execute(
                "SELECT id FROM health_data WHERE pet_id = ?", (pet_id,)
            ).fetchone()
            values = (
                json.dumps(data.weight_history),
                to_iso(data.last_vet_visit),
                json.dumps(data.vaccinations),
                json.dumps(data.allergies),
                data.medical_notes,
                json.dumps(data.current_medications),
            )
            if existing:
                conn.execute(
                    """
                    UPDATE health_data
                    SET weight_history = ?, last_vet_visit = ?, vaccinations = ?, allergies = ?,
                        medical_notes = ?, current_medications = ?, updated_at = CURRENT_TIMESTAMP
                    WHERE pet_id = ?
                    """,
                    (*values, pet_id),
                )
            else:
                conn.execute(
                    """
                    INSERT INTO health_data (id, weight_history, last_vet_visit, vaccinations, allergies,
                                             medical_notes, current_medications, pet_id)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (new_id(), *values, pet_id),
                )
            conn.commit()
            logger.info("User %s updated health data of pet %s", principal.subject_id, pet_id)
            health_row = conn.execute(
                "SELECT * FROM health_data WHERE pet_id = ?", (pet_id,)
            ).fetchone()
            return cls._health_row_to_read(health_row)
        finally:
            conn.close()
