"""Pydantic models for incoming create requests.

Fields are deliberately loose (mostly optional strings) so the services can
report every rule violation as a typed INVALID_INPUT failure.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    """Payload for creating a user account."""

    username: str | None = Field(default=None, description="Login name (5-30 chars)")
    email: str | None = Field(default=None, description="Email address")
    password: str | None = Field(default=None, description="Plaintext password (6-29 chars)")
    role: str | None = Field(default=None, description="Requested role (admin creation only)")


class TaskCreate(BaseModel):
    """Payload for creating a task."""

    name: str | None = Field(default=None, description="Task name")
    description: str | None = Field(default=None, description="Detailed task description")
    difficulty: str | None = Field(default=None, description="LOW, MEDIUM or HIGH (any case)")
    priority: int = Field(default=0, description="Priority from 0 to 5")
    deadline: datetime | None = Field(default=None, description="When the task is due")
    done: bool = Field(default=False, description="Whether the task is finished")


class LoginRequest(BaseModel):
    """Credentials presented at login."""

    username: str
    password: str
