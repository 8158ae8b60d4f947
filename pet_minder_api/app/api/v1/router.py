"""
Top‑level router for version 1 of the API.

This router aggregates domain‑specific routers (users, pets, tasks,
reminders) under a unified prefix.  When new domains are introduced,
update this file to include their routers.
"""

from fastapi import APIRouter

from .endpoints import pets, reminders, tasks, users

router = APIRouter()

router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(pets.router, prefix="/pets", tags=["pets"])
router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
router.include_router(reminders.router, prefix="/reminders", tags=["reminders"])
