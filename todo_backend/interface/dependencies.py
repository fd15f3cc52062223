"""FastAPI dependencies resolving services and the calling user."""

import logging
from dataclasses import dataclass

from fastapi import Depends, Header, Request

from todo_backend.core.errors import invalid_input
from todo_backend.domain.user import UserIdentity
from todo_backend.services.authorization import AuthorizationGate
from todo_backend.services.session_registry import SessionRegistry
from todo_backend.services.task_service import TaskService
from todo_backend.services.user_service import UserService


logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    """Process-wide service instances, stored on ``app.state.services``."""

    registry: SessionRegistry
    gate: AuthorizationGate
    task_service: TaskService
    user_service: UserService


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_session_token(authorization: str | None = Header(default=None)) -> str:
    """The session token, passed verbatim in the Authorization header."""
    if not authorization:
        logger.warning("auth_missing_header")
        raise invalid_input("Missing Authorization header")
    return authorization


def get_current_user(
    token: str = Depends(get_session_token),
    services: AppServices = Depends(get_services),
) -> UserIdentity:
    return services.gate.require_user(token)


def require_admin(
    token: str = Depends(get_session_token),
    services: AppServices = Depends(get_services),
) -> None:
    services.gate.require_admin(token)
