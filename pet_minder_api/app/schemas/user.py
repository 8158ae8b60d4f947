"""
Pydantic models for user data.

Defines schemas for registering users, authenticating and reading
user information.  Passwords are accepted on input only and never
returned.  ``UserDetail`` embeds everything the user owns.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..core.access import Role
from .pet import PetRead
from .reminder import ReminderRead
from .task import TodoTaskRead


class UserBase(BaseModel):
    email: str = Field(..., min_length=3, examples=["owner@example.com"])
    first_name: str = Field("", examples=["Anna"])
    last_name: str = Field("", examples=["Smith"])


class UserCreate(UserBase):
    """Schema for registering a user.

    The first user ever registered becomes an administrator; everyone
    after that is a regular user until an administrator promotes them.
    """

    password: str = Field(..., min_length=1, examples=["strongpassword"])


class UserLogin(BaseModel):
    email: str
    password: str


class UserUpdate(BaseModel):
    """Schema for updating a user; only provided fields are changed.

    ``role`` may only be changed by an administrator.
    """

    email: Optional[str] = Field(None, min_length=3)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    password: Optional[str] = Field(None, min_length=1)
    role: Optional[Role] = None


class UserRead(UserBase):
    """Schema for reading a user from the API."""

    id: str
    role: Role = Role.REGULAR

    model_config = {
        "from_attributes": True,
    }


class UserDetail(UserRead):
    pets: List[PetRead] = Field(default_factory=list)
    tasks: List[TodoTaskRead] = Field(default_factory=list)
    reminders: List[ReminderRead] = Field(default_factory=list)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
