from itertools import product

import pytest

from pet_minder_api.app.core.access import (
    AccessGuard,
    DenyReason,
    Operation,
    Ownership,
    Principal,
    Role,
)
from pet_minder_api.app.core.exceptions import ForbiddenError, InvalidRequestError

ALICE = "alice"
BOB = "bob"


OWNERSHIPS = {
    "own": Ownership(ALICE, "r-1"),
    "foreign": Ownership(BOB, "r-2"),
    "unowned": Ownership(None),
    "absent": None,
}


def _expected(role: Role, operation: Operation, ownership: str):
    if role is Role.ADMIN:
        if operation is Operation.CREATE and ownership in {"unowned", "absent"}:
            return False, DenyReason.MISSING_OWNER
        return True, None
    if ownership == "own":
        return True, None
    return False, DenyReason.NOT_OWNER


@pytest.mark.parametrize(
    "role, operation, ownership",
    [
        pytest.param(role, operation, ownership, id=f"{role.value}-{operation.value}-{ownership}")
        for role, operation, ownership in product(Role, Operation, OWNERSHIPS)
    ],
)
def test_authorize_matrix(role: Role, operation: Operation, ownership: str) -> None:
    """
    Admins may do anything to records that have an owner; regular users
    may only touch their own records, whatever the operation.
    """
    principal = Principal(subject_id=ALICE, role=role)
    decision = AccessGuard.authorize(principal, OWNERSHIPS[ownership], operation)

    allowed, reason = _expected(role, operation, ownership)
    assert decision.allowed is allowed
    assert decision.reason is reason
    assert bool(decision) is allowed


@pytest.mark.parametrize("resource", [None, Ownership(None), Ownership("")], ids=["absent", "none", "empty"])
def test_admin_create_without_owner_is_a_request_error(resource) -> None:
    admin = Principal(subject_id=ALICE, role=Role.ADMIN)

    decision = AccessGuard.authorize(admin, resource, Operation.CREATE)
    assert not decision
    assert decision.reason is DenyReason.MISSING_OWNER

    with pytest.raises(InvalidRequestError):
        AccessGuard.ensure(admin, resource, Operation.CREATE, "reminder")


def test_regular_user_create_without_resource_is_denied() -> None:
    regular = Principal(subject_id=ALICE, role=Role.REGULAR)
    assert AccessGuard.authorize(regular, None, Operation.CREATE).reason is DenyReason.NOT_OWNER


def test_ensure_raises_forbidden_for_foreign_reminder() -> None:
    user1 = Principal(subject_id="user1", role=Role.REGULAR)
    reminder = Ownership(owner_id="user2", id="r-1")

    assert AccessGuard.authorize(user1, reminder, Operation.UPDATE).reason is DenyReason.NOT_OWNER
    with pytest.raises(ForbiddenError):
        AccessGuard.ensure(user1, reminder, Operation.UPDATE, "reminder")


def test_resolve_owner() -> None:
    regular = Principal(subject_id=ALICE, role=Role.REGULAR)
    admin = Principal(subject_id="root", role=Role.ADMIN)

    # Regular users cannot create records for somebody else.
    assert AccessGuard.resolve_owner(regular, BOB) == ALICE
    assert AccessGuard.resolve_owner(regular, None) == ALICE
    assert AccessGuard.resolve_owner(admin, BOB) == BOB
    assert AccessGuard.resolve_owner(admin, "") is None


@pytest.mark.parametrize(
    "claim, expected",
    [
        ("admin", Role.ADMIN),
        ("Administrator", Role.ADMIN),
        (" ADMIN ", Role.ADMIN),
        ("regular", Role.REGULAR),
        ("superuser", Role.REGULAR),
        (None, Role.REGULAR),
    ],
)
def test_role_from_claim(claim, expected: Role) -> None:
    assert Role.from_claim(claim) is expected


def test_principal_is_immutable() -> None:
    principal = Principal(subject_id=ALICE, role=Role.REGULAR)
    with pytest.raises(AttributeError):
        principal.role = Role.ADMIN  # type: ignore[misc]
