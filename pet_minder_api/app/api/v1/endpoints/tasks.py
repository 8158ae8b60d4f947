"""
API endpoints for to-do tasks.

Tasks follow the same ownership rules as pets: a regular user manages
their own tasks, an administrator manages everyone's.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from pet_minder_api.app.core.access import Principal
from pet_minder_api.app.core.security import get_current_user
from pet_minder_api.app.schemas.task import TodoTaskCreate, TodoTaskRead, TodoTaskUpdate
from pet_minder_api.app.services.task_service import TaskService


router = APIRouter()


@router.post("/", response_model=TodoTaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    task: TodoTaskCreate,
    current_user: Principal = Depends(get_current_user),
) -> TodoTaskRead:
    return await TaskService.create_task(task, current_user)


@router.get("/", response_model=List[TodoTaskRead])
async def list_tasks(current_user: Principal = Depends(get_current_user)) -> List[TodoTaskRead]:
    """List the caller's tasks (all tasks for administrators), open ones first."""
    return await TaskService.list_tasks(current_user)


@router.get("/{task_id}", response_model=TodoTaskRead)
async def get_task(task_id: str, current_user: Principal = Depends(get_current_user)) -> TodoTaskRead:
    return await TaskService.get_task(task_id, current_user)


@router.patch("/{task_id}", response_model=TodoTaskRead)
async def update_task(
    task_id: str,
    updates: TodoTaskUpdate,
    current_user: Principal = Depends(get_current_user),
) -> TodoTaskRead:
    return await TaskService.update_task(task_id, updates, current_user)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, current_user: Principal = Depends(get_current_user)) -> None:
    await TaskService.delete_task(task_id, current_user)
