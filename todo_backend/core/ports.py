"""Ports (interfaces) the services depend on.

Services take these Protocols instead of concrete storage or hashing
implementations. Absence is reported as ``None`` (or ``False``), never as an
exception, so callers can tell "not found" apart from a store failure.
"""

from typing import Protocol

from todo_backend.domain.task import Task
from todo_backend.domain.user import UserIdentity


class DuplicateRecordError(Exception):
    """Raised by a store when an insert or save violates a uniqueness rule."""

    def __init__(self, field: str, value: str) -> None:
        super().__init__(f"Duplicate {field}: {value}")
        self.field = field
        self.value = value


class CredentialStore(Protocol):
    """Persistence for user accounts."""

    async def find_by_username(self, username: str) -> UserIdentity | None: ...

    async def find_by_email(self, email: str) -> UserIdentity | None: ...

    async def find_by_id(self, user_id: str) -> UserIdentity | None: ...

    async def find_all(self) -> list[UserIdentity]: ...

    async def insert(self, user: UserIdentity) -> UserIdentity:
        """Insert atomically, raising DuplicateRecordError on a username/email clash."""
        ...

    async def save(self, user: UserIdentity) -> UserIdentity | None:
        """Overwrite an existing account; None if it no longer exists."""
        ...

    async def delete(self, user_id: str) -> bool: ...


class TaskStore(Protocol):
    """Persistence for tasks, always scoped by owner."""

    async def find_by_owner(self, owner_id: str) -> list[Task]: ...

    async def find_by_owner_and_id(self, owner_id: str, task_id: str) -> Task | None: ...

    async def insert(self, task: Task) -> Task: ...

    async def insert_many(self, tasks: list[Task]) -> list[Task]: ...

    async def save(self, task: Task) -> Task | None:
        """Overwrite an existing task; None if it no longer exists."""
        ...

    async def delete_by_owner_and_id(self, owner_id: str, task_id: str) -> bool: ...


class PasswordHasher(Protocol):
    """One-way password hashing."""

    def hash(self, plaintext: str) -> str: ...

    def verify(self, plaintext: str, hashed: str) -> bool: ...
