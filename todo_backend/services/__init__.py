from todo_backend.services.authorization import AuthorizationGate
from todo_backend.services.session_registry import SessionRegistry
from todo_backend.services.task_service import TaskService, validate_task
from todo_backend.services.user_service import UserService


__all__ = [
    "AuthorizationGate",
    "SessionRegistry",
    "TaskService",
    "UserService",
    "validate_task",
]
