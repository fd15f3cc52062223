"""Task endpoints. Every route acts on the calling user's own tasks."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, status

from todo_backend.domain.create_models import TaskCreate
from todo_backend.domain.task import Task
from todo_backend.domain.update_models import TaskUpdate
from todo_backend.domain.user import UserIdentity
from todo_backend.interface.dependencies import AppServices, get_current_user, get_services, require_admin


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _public(task: Task) -> dict[str, Any]:
    """Response body for a task; ownership details stay server-side."""
    return task.model_dump(mode="json", exclude={"owner_ids"})


@router.get("")
async def list_tasks(
    user: UserIdentity = Depends(get_current_user),
    services: AppServices = Depends(get_services),
) -> list[dict[str, Any]]:
    tasks = await services.task_service.list_tasks(owner_id=user.id)
    return [_public(task) for task in tasks]


@router.get("/health")
async def task_health() -> dict[str, str]:
    return {"status": "UP", "message": "The server is up"}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(
    draft: TaskCreate,
    user: UserIdentity = Depends(get_current_user),
    services: AppServices = Depends(get_services),
) -> dict[str, Any]:
    task = await services.task_service.create_task(owner_id=user.id, draft=draft)
    return _public(task)


@router.post("/gen", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def generate_tasks(
    user: UserIdentity = Depends(get_current_user),
    services: AppServices = Depends(get_services),
) -> dict[str, str | int]:
    tasks = await services.task_service.generate_samples(owner_id=user.id)
    return {"message": f"{len(tasks)} Tasks were generated", "count": len(tasks)}


@router.delete("/all")
async def delete_all_tasks(
    user: UserIdentity = Depends(get_current_user),
    services: AppServices = Depends(get_services),
) -> dict[str, str | int]:
    deleted = await services.task_service.delete_all_tasks(owner_id=user.id)
    return {"message": f"{len(deleted)} Tasks were deleted successfully", "count": len(deleted)}


@router.get("/{task_id}")
async def get_task(
    task_id: str,
    user: UserIdentity = Depends(get_current_user),
    services: AppServices = Depends(get_services),
) -> dict[str, Any]:
    task = await services.task_service.get_task(owner_id=user.id, task_id=task_id)
    return _public(task)


@router.patch("/{task_id}")
async def update_task(
    task_id: str,
    patch: TaskUpdate,
    user: UserIdentity = Depends(get_current_user),
    services: AppServices = Depends(get_services),
) -> dict[str, Any]:
    task = await services.task_service.update_task(owner_id=user.id, task_id=task_id, patch=patch)
    return _public(task)


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    user: UserIdentity = Depends(get_current_user),
    services: AppServices = Depends(get_services),
) -> dict[str, Any]:
    task = await services.task_service.delete_task(owner_id=user.id, task_id=task_id)
    return _public(task)
