"""User account endpoints."""

import logging

from fastapi import APIRouter, Depends, status

from todo_backend.core.errors import AppError, ErrorKind
from todo_backend.domain.create_models import UserCreate
from todo_backend.domain.update_models import UserUpdate
from todo_backend.domain.user import PublicUser, UserIdentity, UserRole
from todo_backend.interface.dependencies import AppServices, get_current_user, get_services, require_admin


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(draft: UserCreate, services: AppServices = Depends(get_services)) -> dict[str, str]:
    """Self-service registration; always creates a USER account."""
    user = await services.user_service.create_as_user(draft=draft)
    return {"message": f"The user {user.username} was created successfully.", "id": user.id}


@router.post("/admin", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_user_as_admin(draft: UserCreate, services: AppServices = Depends(get_services)) -> dict[str, str]:
    user = await services.user_service.create_as_admin(draft=draft, role=draft.role)
    return {"message": f"The user {user.username} was created successfully.", "id": user.id}


@router.get("", dependencies=[Depends(require_admin)])
async def list_users(services: AppServices = Depends(get_services)) -> list[PublicUser]:
    return [PublicUser.from_identity(user) for user in await services.user_service.list_users()]


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    _caller: UserIdentity = Depends(get_current_user),
    services: AppServices = Depends(get_services),
) -> PublicUser:
    return PublicUser.from_identity(await services.user_service.get_user(user_id=user_id))


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    patch: UserUpdate,
    caller: UserIdentity = Depends(get_current_user),
    services: AppServices = Depends(get_services),
) -> PublicUser:
    """Update an account. Users may edit themselves; only admins may edit others or change roles."""
    is_admin = caller.role == UserRole.ADMIN
    if caller.id != user_id and not is_admin:
        raise AppError(ErrorKind.FORBIDDEN, "Cannot modify another user's account")
    if patch.role is not None and not is_admin:
        raise AppError(ErrorKind.FORBIDDEN, "Only admins can change roles")

    user = await services.user_service.update_user(user_id=user_id, patch=patch)
    return PublicUser.from_identity(user)


@router.delete("/{user_id}", dependencies=[Depends(require_admin)])
async def delete_user(user_id: str, services: AppServices = Depends(get_services)) -> dict[str, str]:
    user = await services.user_service.delete_user(
        user_id=user_id,
        task_service=services.task_service,
        registry=services.registry,
    )
    return {"message": f"User {user.username} deleted successfully"}
