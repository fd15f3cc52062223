"""Login, logout and session endpoints."""

import logging

from fastapi import APIRouter, Depends

from todo_backend.domain.create_models import LoginRequest
from todo_backend.domain.user import PublicUser, UserIdentity
from todo_backend.interface.dependencies import AppServices, get_current_user, get_services, get_session_token


logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/auth")
async def login(login_request: LoginRequest, services: AppServices = Depends(get_services)) -> dict[str, str]:
    """Check credentials and open a session; the token is returned as ``cookie``."""
    user = await services.user_service.login(
        username=login_request.username, password=login_request.password
    )
    token = services.registry.create_session(user)
    return {"cookie": token}


@router.get("/auth")
async def current_user(user: UserIdentity = Depends(get_current_user)) -> PublicUser:
    return PublicUser.from_identity(user)


@router.post("/auth/renew")
async def renew_session(
    token: str = Depends(get_session_token),
    services: AppServices = Depends(get_services),
) -> dict[str, str]:
    services.registry.renew(token)
    return {"message": "Session renewed"}


@router.post("/logout")
async def logout(
    token: str = Depends(get_session_token),
    services: AppServices = Depends(get_services),
) -> dict[str, str]:
    services.registry.invalidate(token)
    return {"message": "User logged out"}
