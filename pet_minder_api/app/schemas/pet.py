"""
Pydantic models for pets and their health records.

``PetCreate`` accepts an optional ``owner_id``: administrators must
set it to create a pet for someone, regular users may omit it (it is
replaced by their own id anyway).  Health data is stored one record
per pet and exposed both on its own and embedded in ``PetRead``.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PetBase(BaseModel):
    name: str = Field(..., min_length=1, examples=["Biscuit"])
    gender: str = Field(..., examples=["Female"])
    type: str = Field(..., examples=["Dog"])
    date_of_birth: date = Field(..., examples=["2021-04-12"])
    breed: str = Field(..., examples=["Beagle"])
    weight: float = Field(0.0, ge=0, examples=[11.4])


class PetCreate(PetBase):
    """Schema for creating a pet."""

    id: Optional[str] = Field(None, description="Client supplied id; generated when omitted")
    owner_id: Optional[str] = Field(None, description="Target owner, required for administrators")


class PetUpdate(BaseModel):
    """Schema for updating a pet.

    All fields are optional; only provided fields will be updated.
    The owner of a pet cannot be changed.
    """

    name: Optional[str] = Field(None, min_length=1)
    gender: Optional[str] = None
    type: Optional[str] = None
    date_of_birth: Optional[date] = None
    breed: Optional[str] = None
    weight: Optional[float] = Field(None, ge=0)


class HealthDataBase(BaseModel):
    weight_history: List[float] = Field(default_factory=list, examples=[[10.2, 10.9, 11.4]])
    last_vet_visit: Optional[datetime] = None
    vaccinations: List[str] = Field(default_factory=list)
    allergies: List[str] = Field(default_factory=list)
    medical_notes: Optional[str] = None
    current_medications: List[str] = Field(default_factory=list)


class HealthDataUpdate(HealthDataBase):
    """Full replacement of a pet's health record."""
    pass


class HealthDataRead(HealthDataBase):
    id: str
    pet_id: str
    # Latest entry of ``weight_history``, or 0 when there is none.
    current_weight: float = 0.0

    model_config = {
        "from_attributes": True,
    }


class PetRead(PetBase):
    """Schema for reading a pet from the API."""

    id: str
    owner_id: str
    health_data: Optional[HealthDataRead] = None

    model_config = {
        "from_attributes": True,
    }
