"""
Pydantic models for reminders.

The stored schedule of a reminder is ``fire_at``, ``is_recurring``,
``recurrence_pattern`` and ``is_completed``.  ``ReminderRead`` adds two
fields that are computed on every read and never stored:

* ``is_due``: the fire time has passed and the reminder is not completed;
* ``next_occurrences``: the upcoming occurrences of a recurring reminder
  (empty for one-off reminders).

Recognised patterns are ``Daily``, ``Weekly``, ``Monthly`` and
``Yearly`` (case-insensitive).
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ReminderBase(BaseModel):
    pet_id: Optional[str] = None
    title: str = Field(..., min_length=1, examples=["Flea treatment"])
    message: Optional[str] = Field(None, examples=["Apply the spot-on between the shoulders"])
    fire_at: datetime = Field(..., examples=["2025-09-01T09:00:00Z"])
    is_recurring: bool = False
    recurrence_pattern: Optional[str] = Field(None, examples=["Monthly"])


class ReminderCreate(ReminderBase):
    """Schema for creating a reminder."""

    id: Optional[str] = None
    owner_id: Optional[str] = Field(None, description="Target owner, required for administrators")


class ReminderUpdate(BaseModel):
    """Schema for updating a reminder.

    Only provided fields are changed.  ``pet_id``, ``message`` and
    ``recurrence_pattern`` may be cleared with ``null``.  Setting
    ``is_completed`` back to ``false`` on a completed reminder is
    rejected.
    """

    pet_id: Optional[str] = None
    title: Optional[str] = Field(None, min_length=1)
    message: Optional[str] = None
    fire_at: Optional[datetime] = None
    is_recurring: Optional[bool] = None
    recurrence_pattern: Optional[str] = None
    is_completed: Optional[bool] = None


class ReminderRead(ReminderBase):
    id: str
    owner_id: str
    is_completed: bool = False
    is_due: bool = False
    next_occurrences: List[datetime] = Field(default_factory=list)

    model_config = {
        "from_attributes": True,
    }
