"""
Pydantic models for to-do tasks.

A to-do task is a small piece of care work (buy food, book the vet)
owned by one user and optionally tied to one of their pets.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class TodoTaskBase(BaseModel):
    type: str = Field(..., min_length=1, examples=["Grooming"])
    title: str = Field(..., min_length=1, examples=["Trim claws"])
    is_completed: bool = False
    pet_id: Optional[str] = None
    due_date: Optional[datetime] = Field(None, examples=["2025-09-01T10:00:00Z"])


class TodoTaskCreate(TodoTaskBase):
    """Schema for creating a task."""

    id: Optional[str] = None
    owner_id: Optional[str] = Field(None, description="Target owner, required for administrators")


class TodoTaskUpdate(BaseModel):
    """Schema for updating a task; only provided fields are changed."""

    type: Optional[str] = Field(None, min_length=1)
    title: Optional[str] = Field(None, min_length=1)
    is_completed: Optional[bool] = None
    pet_id: Optional[str] = None
    due_date: Optional[datetime] = None


class TodoTaskRead(TodoTaskBase):
    id: str
    owner_id: str

    model_config = {
        "from_attributes": True,
    }
