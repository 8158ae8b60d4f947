"""
Pet endpoints for API v1.

CRUD operations for pets plus the per-pet health record.  Regular
users only ever see and change their own pets; administrators see all
pets and must name an ``owner_id`` when creating one.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from pet_minder_api.app.core.access import Principal
from pet_minder_api.app.core.security import get_current_user
from pet_minder_api.app.schemas.pet import HealthDataRead, HealthDataUpdate, PetCreate, PetRead, PetUpdate
from pet_minder_api.app.services.pet_service import PetService


router = APIRouter()


@router.post("/", response_model=PetRead, status_code=status.HTTP_201_CREATED)
async def create_pet(pet: PetCreate, current_user: Principal = Depends(get_current_user)) -> PetRead:
    """Create a pet.

    Regular users always create pets for themselves.  Administrators
    create pets on behalf of the user named in ``owner_id``; omitting
    it is a 400 error.
    """
    return await PetService.create_pet(pet, current_user)


@router.get("/", response_model=List[PetRead])
async def list_pets(current_user: Principal = Depends(get_current_user)) -> List[PetRead]:
    """List the caller's pets, or every pet for administrators."""
    return await PetService.list_pets(current_user)


@router.get("/{pet_id}", response_model=PetRead)
async def get_pet(pet_id: str, current_user: Principal = Depends(get_current_user)) -> PetRead:
    return await PetService.get_pet(pet_id, current_user)


@router.patch("/{pet_id}", response_model=PetRead)
async def update_pet(
    pet_id: str,
    updates: PetUpdate,
    current_user: Principal = Depends(get_current_user),
) -> PetRead:
    """Partially update a pet; unspecified fields remain unchanged."""
    return await PetService.update_pet(pet_id, updates, current_user)


@router.delete("/{pet_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pet(pet_id: str, current_user: Principal = Depends(get_current_user)) -> None:
    await PetService.delete_pet(pet_id, current_user)


@router.get("/{pet_id}/health", response_model=HealthDataRead)
async def get_health_data(pet_id: str, current_user: Principal = Depends(get_current_user)) -> HealthDataRead:
    return await PetService.get_health_data(pet_id, current_user)


@router.put("/{pet_id}/health", response_model=HealthDataRead)
async def set_health_data(
    pet_id: str,
    health: HealthDataUpdate,
    current_user: Principal = Depends(get_current_user),
) -> HealthDataRead:
    """Create or replace the pet's health record."""
    return await PetService.set_health_data(pet_id, health, current_user)
