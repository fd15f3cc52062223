"""Domain models and DTOs."""

from todo_backend.domain.create_models import LoginRequest, TaskCreate, UserCreate
from todo_backend.domain.task import Difficulty, Task
from todo_backend.domain.update_models import TaskUpdate, UserUpdate
from todo_backend.domain.user import PublicUser, UserIdentity, UserRole


__all__ = [
    "Difficulty",
    "LoginRequest",
    "PublicUser",
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "UserCreate",
    "UserIdentity",
    "UserRole",
    "UserUpdate",
]
