"""Partial update payloads.

A field that was not sent, or was sent as null, leaves the stored value
unchanged. Zero values such as ``priority=0`` or ``done=False`` are real
updates.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class _Patch(BaseModel):
    def present_fields(self) -> dict[str, Any]:
        """Return the fields the caller actually supplied with a non-null value."""
        return {name: value for name, value in self.model_dump(exclude_unset=True).items() if value is not None}


class TaskUpdate(_Patch):
    """Patch for a task."""

    name: str | None = None
    description: str | None = None
    difficulty: str | None = None
    priority: int | None = None
    deadline: datetime | None = None
    done: bool | None = None


class UserUpdate(_Patch):
    """Patch for a user account."""

    username: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None
