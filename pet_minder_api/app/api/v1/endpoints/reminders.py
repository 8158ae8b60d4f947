"""
API endpoints for reminders.

Every reminder returned by these routes carries ``is_due`` and
``next_occurrences`` computed at the time of the request.  Clients
that want to show or deliver notifications poll ``GET /reminders/due``
and acknowledge a reminder through ``POST /reminders/{id}/complete``.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from pet_minder_api.app.core.access import Principal
from pet_minder_api.app.core.security import get_current_user
from pet_minder_api.app.schemas.reminder import ReminderCreate, ReminderRead, ReminderUpdate
from pet_minder_api.app.services.reminder_service import ReminderService


router = APIRouter()


@router.post("/", response_model=ReminderRead, status_code=status.HTTP_201_CREATED)
async def create_reminder(
    reminder: ReminderCreate,
    current_user: Principal = Depends(get_current_user),
) -> ReminderRead:
    """Create a reminder.

    Recurring reminders must name a recurrence pattern (``Daily``,
    ``Weekly``, ``Monthly`` or ``Yearly``); otherwise the request is
    rejected with 400.
    """
    return await ReminderService.create_reminder(reminder, current_user)


@router.get("/", response_model=List[ReminderRead])
async def list_reminders(current_user: Principal = Depends(get_current_user)) -> List[ReminderRead]:
    return await ReminderService.list_reminders(current_user)


@router.get("/due", response_model=List[ReminderRead])
async def list_due_reminders(current_user: Principal = Depends(get_current_user)) -> List[ReminderRead]:
    """Reminders whose fire time has passed and which are not completed."""
    return await ReminderService.list_due_reminders(current_user)


@router.get("/{reminder_id}", response_model=ReminderRead)
async def get_reminder(
    reminder_id: str,
    current_user: Principal = Depends(get_current_user),
) -> ReminderRead:
    return await ReminderService.get_reminder(reminder_id, current_user)


@router.patch("/{reminder_id}", response_model=ReminderRead)
async def update_reminder(
    reminder_id: str,
    updates: ReminderUpdate,
    current_user: Principal = Depends(get_current_user),
) -> ReminderRead:
    return await ReminderService.update_reminder(reminder_id, updates, current_user)


@router.post("/{reminder_id}/complete", response_model=ReminderRead)
async def complete_reminder(
    reminder_id: str,
    current_user: Principal = Depends(get_current_user),
) -> ReminderRead:
    """Mark a reminder as completed.  It stays readable but is no longer due."""
    return await ReminderService.complete_reminder(reminder_id, current_user)


@router.delete("/{reminder_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reminder(
    reminder_id: str,
    current_user: Principal = Depends(get_current_user),
) -> None:
    await ReminderService.delete_reminder(reminder_id, current_user)
