"""
Ownership-scoped access control.

Every owned record (pets, to-do tasks, reminders and the user record
itself) exposes an ``owner_id``.  ``AccessGuard.authorize`` is the one
place that decides whether a principal may perform an operation on such
a record:

* administrators may do anything to any record, but creating a record
  on someone's behalf requires an explicit target owner;
* regular users may only touch records they own.

``authorize`` is a pure function that returns a ``Decision`` instead of
raising.  Services call ``AccessGuard.ensure`` which turns a negative
decision into the matching ``ServiceError``.  Callers must check that
the record exists before asking the guard, so "not found" and
"forbidden" are never confused.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from .exceptions import ForbiddenError, InvalidRequestError


logger = logging.getLogger(__name__)


class Role(str, Enum):
    REGULAR = "regular"
    ADMIN = "admin"

    @classmethod
    def from_claim(cls, value: Optional[str]) -> "Role":
        """Map a free-text role claim onto the closed set of roles.

        Unknown or missing claims fall back to ``REGULAR``.
        """
        claim = (value or "").strip().lower()
        if claim in {"admin", "administrator"}:
            return cls.ADMIN
        if claim not in {"regular", "user"}:
            logger.warning("Unknown role claim %r, treating as regular user", value)
        return cls.REGULAR


class Operation(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class DenyReason(str, Enum):
    NOT_OWNER = "not_owner"
    # Admin create without a target owner: a request error, not a
    # permission error.
    MISSING_OWNER = "missing_owner"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of a request."""

    subject_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


class OwnedResource(Protocol):
    owner_id: Optional[str]


@dataclass(frozen=True)
class Ownership:
    """Bare ownership view of a record, used where no model is at hand."""

    owner_id: Optional[str]
    id: Optional[str] = None


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[DenyReason] = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)


class AccessGuard:
    """Single authorization decision point for owned records."""

    @staticmethod
    def authorize(
        principal: Principal,
        resource: Optional[OwnedResource],
        operation: Operation,
    ) -> Decision:
        """Decide whether ``principal`` may perform ``operation`` on ``resource``.

        ``resource`` may only be ``None`` for ``Operation.CREATE``.
        """
        owner_id = getattr(resource, "owner_id", None) if resource is not None else None

        if principal.is_admin:
            if operation is Operation.CREATE and not owner_id:
                return Decision(False, DenyReason.MISSING_OWNER)
            return ALLOW

        if owner_id and owner_id == principal.subject_id:
            return ALLOW
        return Decision(False, DenyReason.NOT_OWNER)

    @classmethod
    def ensure(
        cls,
        principal: Principal,
        resource: Optional[OwnedResource],
        operation: Operation,
        kind: str = "record",
    ) -> None:
        """Raise the matching ``ServiceError`` unless the operation is allowed."""
        decision = cls.authorize(principal, resource, operation)
        if decision:
            return
        if decision.reason is DenyReason.MISSING_OWNER:
            raise InvalidRequestError(f"An owner_id is required when an administrator creates a {kind}")
        logger.warning(
            "Denied %s on %s %s for user %s",
            operation.value,
            kind,
            getattr(resource, "id", None),
            principal.subject_id,
        )
        raise ForbiddenError(f"Not allowed to {operation.value} this {kind}")

    @staticmethod
    def resolve_owner(principal: Principal, requested_owner_id: Optional[str]) -> Optional[str]:
        """Return the owner a new record should be created for.

        Regular users always create for themselves; whatever owner they
        sent is ignored.  Administrators create for the owner they name
        (``None`` when they named none, which ``authorize`` rejects).
        """
        if principal.is_admin:
            return requested_owner_id or None
        return principal.subject_id
