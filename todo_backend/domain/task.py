"""Task domain models and enums."""

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field, computed_field


class Difficulty(StrEnum):
    """How hard a task is."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @classmethod
    def parse(cls, value: str | None) -> "Difficulty | None":
        """Case-insensitive lookup, returning None for unknown values."""
        if value is None:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class Task(BaseModel):
    """Task data transfer object."""

    id: str = Field(..., description="Unique task ID")
    name: str = Field(..., description="Task name")
    description: str | None = Field(default=None, description="Detailed task description")
    difficulty: Difficulty | None = Field(default=None, description="LOW, MEDIUM or HIGH")
    priority: int = Field(default=0, description="Priority from 0 to 5")
    deadline: datetime | None = Field(default=None, description="When the task is due")
    created_at: datetime | None = Field(default=None, description="Creation timestamp")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")
    done: bool = Field(default=False, description="Whether the task is finished")
    owner_ids: list[str] = Field(default_factory=list, description="IDs of the users owning this task")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def expired(self) -> bool:
        """True when the deadline has already passed."""
        if self.deadline is None:
            return False
        deadline = self.deadline if self.deadline.tzinfo else self.deadline.replace(tzinfo=UTC)
        return deadline < datetime.now(UTC)
