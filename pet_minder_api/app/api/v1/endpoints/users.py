"""
User endpoints for API v1.

Provide registration, login, profile management and per-user views of
pets, tasks and reminders.  Registration and login are public; every
other route requires a bearer token.  Service errors (not found,
forbidden, invalid request) are turned into HTTP responses by the
application's exception handler.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from pet_minder_api.app.core.access import Principal, Role
from pet_minder_api.app.core.security import create_access_token, get_current_user, require_roles
from pet_minder_api.app.schemas.pet import PetRead
from pet_minder_api.app.schemas.reminder import ReminderRead
from pet_minder_api.app.schemas.task import TodoTaskRead
from pet_minder_api.app.schemas.user import Token, UserCreate, UserDetail, UserLogin, UserRead, UserUpdate
from pet_minder_api.app.services.pet_service import PetService
from pet_minder_api.app.services.reminder_service import ReminderService
from pet_minder_api.app.services.task_service import TaskService
from pet_minder_api.app.services.user_service import UserService


router = APIRouter()


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register_user(user: UserCreate) -> UserRead:
    """Register a new user.

    The very first user becomes an administrator; later users are
    regular users.
    """
    return await UserService.create_user(user)


@router.post("/login", response_model=Token)
async def login_user(credentials: UserLogin) -> Token:
    """Authenticate with email and password and return a bearer token."""
    db_user = await UserService.authenticate(credentials.email, credentials.password)
    if not db_user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return Token(access_token=create_access_token({"sub": db_user.id}))


@router.get("/", response_model=List[UserRead])
async def list_users(current_user: Principal = Depends(require_roles(Role.ADMIN))) -> List[UserRead]:
    """List all users (administrators only)."""
    return await UserService.list_users()


@router.get("/me", response_model=UserDetail)
async def get_me(current_user: Principal = Depends(get_current_user)) -> UserDetail:
    """Return the caller's own profile with everything they own."""
    return await UserService.get_user_detail(current_user.subject_id, current_user)


@router.get("/{user_id}", response_model=UserDetail)
async def get_user(user_id: str, current_user: Principal = Depends(get_current_user)) -> UserDetail:
    """Return a user with their pets, tasks and reminders (self or admin)."""
    return await UserService.get_user_detail(user_id, current_user)


@router.patch("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: str,
    updates: UserUpdate,
    current_user: Principal = Depends(get_current_user),
) -> UserRead:
    """Update a profile.  Only administrators may change ``role``."""
    return await UserService.update_user(user_id, updates, current_user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, current_user: Principal = Depends(get_current_user)) -> None:
    """Delete a user together with their pets, tasks and reminders."""
    await UserService.delete_user(user_id, current_user)


@router.get("/{user_id}/pets", response_model=List[PetRead])
async def list_user_pets(user_id: str, current_user: Principal = Depends(get_current_user)) -> List[PetRead]:
    return await PetService.list_pets(current_user, owner_id=user_id)


@router.get("/{user_id}/tasks", response_model=List[TodoTaskRead])
async def list_user_tasks(
    user_id: str, current_user: Principal = Depends(get_current_user)
) -> List[TodoTaskRead]:
    return await TaskService.list_tasks(current_user, owner_id=user_id)


@router.get("/{user_id}/reminders", response_model=List[ReminderRead])
async def list_user_reminders(
    user_id: str, current_user: Principal = Depends(get_current_user)
) -> List[ReminderRead]:
    return await ReminderService.list_reminders(current_user, owner_id=user_id)
