"""Task service: owner-scoped CRUD and validation.

Every lookup goes through the store's owner-scoped queries, so a task the
caller does not own is reported exactly like a task that does not exist.

Updates are read-then-write with no isolation from the store; two sessions
updating the same task concurrently resolve as last-write-wins.
"""

import logging
import random
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from todo_backend.core.config import constants, settings
from todo_backend.core.errors import AppError, ErrorKind, invalid_input, not_found
from todo_backend.core.logging import log_with_user_context, span
from todo_backend.core.ports import TaskStore
from todo_backend.domain.create_models import TaskCreate
from todo_backend.domain.task import Difficulty, Task
from todo_backend.domain.update_models import TaskUpdate
from todo_backend.services.session_registry import utc_now


logger = logging.getLogger(__name__)


def _parse_difficulty(value: str | None) -> Difficulty | None:
    if value is None:
        return None
    difficulty = Difficulty.parse(value)
    if difficulty is None:
        raise invalid_input(f"Task difficulty is invalid: {value}")
    return difficulty


def validate_task(task: Task | TaskCreate) -> None:
    """Check the invariants every task must satisfy before it is stored.

    Raises:
        AppError(INVALID_INPUT): On the first rule the task breaks
    """
    if task.name is None or not task.name.strip():
        raise invalid_input("Task name is required")

    if task.priority is None or not constants.TASK_PRIORITY_MIN <= task.priority <= constants.TASK_PRIORITY_MAX:
        raise invalid_input(
            f"Task priority must be between {constants.TASK_PRIORITY_MIN} and {constants.TASK_PRIORITY_MAX}"
        )

    _parse_difficulty(task.difficulty)

    created_at = getattr(task, "created_at", None)
    updated_at = getattr(task, "updated_at", None)
    if created_at is not None and updated_at is not None and updated_at < created_at:
        raise invalid_input("Task updated_at is before created_at")

    if isinstance(task, Task) and not task.owner_ids:
        raise invalid_input("Task must have at least one owner")


class TaskService:
    """Validates and mutates tasks on behalf of an owning user."""

    def __init__(self, store: TaskStore, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._store = store
        self._clock = clock

    async def list_tasks(self, *, owner_id: str) -> list[Task]:
        with span("task_service.list_tasks"):
            return await self._store.find_by_owner(owner_id)

    async def get_task(self, *, owner_id: str, task_id: str) -> Task:
        """Fetch one task owned by ``owner_id``.

        Raises:
            AppError(NOT_FOUND): If no such task is owned by the caller
        """
        with span("task_service.get_task"):
            task = await self._store.find_by_owner_and_id(owner_id, task_id)
            if task is None:
                raise not_found(f"Task {task_id} not found")
            return task

    async def create_task(self, *, owner_id: str, draft: TaskCreate) -> Task:
        """Validate a draft and store it as a new task owned by ``owner_id``.

        Args:
            owner_id: ID of the user who will own the task
            draft: Requested task fields

        Returns:
            The stored task with its generated ID and timestamps

        Raises:
            AppError(INVALID_INPUT): If the draft breaks a task rule
        """
        with span("task_service.create_task"):
            validate_task(draft)

            now = self._clock()
            task = Task(
                id=str(uuid.uuid4()),
                name=draft.name,
                description=draft.description,
                difficulty=_parse_difficulty(draft.difficulty),
                priority=draft.priority,
                deadline=draft.deadline,
                created_at=now,
                updated_at=now,
                done=draft.done,
                owner_ids=[owner_id],
            )
            validate_task(task)

            stored = await self._store.insert(task)
            log_with_user_context(logger, "info", "Created task", user_id=owner_id, task_id=stored.id)
            return stored

    async def update_task(self, *, owner_id: str, task_id: str, patch: TaskUpdate) -> Task:
        """Merge the supplied fields of ``patch`` into an owned task.

        Args:
            owner_id: ID of the calling user
            task_id: Task to update
            patch: Fields to change; unset or null fields keep their stored value

        Returns:
            The saved task

        Raises:
            AppError(NOT_FOUND): If no such task is owned by the caller, or it was
                deleted before the update was saved
            AppError(INVALID_INPUT): If the merged task breaks a task rule
        """
        with span("task_service.update_task"):
            existing = await self.get_task(owner_id=owner_id, task_id=task_id)

            changes: dict[str, Any] = patch.present_fields()
            if "difficulty" in changes:
                changes["difficulty"] = _parse_difficulty(changes["difficulty"])
            changes["updated_at"] = self._clock()

            merged = existing.model_copy(update=changes)
            validate_task(merged)

            saved = await self._store.save(merged)
            if saved is None:
                raise not_found(f"Task {task_id} not found")
            log_with_user_context(
                logger,
                "info",
                "Updated task",
                user_id=owner_id,
                task_id=task_id,
                fields=sorted(k for k in changes if k != "updated_at"),
            )
            return saved

    async def delete_task(self, *, owner_id: str, task_id: str) -> Task:
        """Delete an owned task and return what was removed.

        Raises:
            AppError(NOT_FOUND): If no such task is owned by the caller
        """
        with span("task_service.delete_task"):
            task = await self.get_task(owner_id=owner_id, task_id=task_id)
            if not await self._store.delete_by_owner_and_id(owner_id, task_id):
                raise not_found(f"Task {task_id} not found")
            log_with_user_context(logger, "info", "Deleted task", user_id=owner_id, task_id=task_id)
            return task

    async def delete_all_tasks(self, *, owner_id: str) -> list[Task]:
        """Delete every task owned by ``owner_id``; best effort, not atomic.

        A task that vanishes between the listing and its delete is skipped.
        Returns the tasks this call actually removed.
        """
        with span("task_service.delete_all_tasks"):
            deleted: list[Task] = []
            for task in await self._store.find_by_owner(owner_id):
                try:
                    deleted.append(await self.delete_task(owner_id=owner_id, task_id=task.id))
                except AppError as e:
                    if e.kind != ErrorKind.NOT_FOUND:
                        raise
                    logger.info("Task already gone during bulk delete", extra={"task_id": task.id})

            log_with_user_context(logger, "info", "Deleted all tasks", user_id=owner_id, count=len(deleted))
            return deleted

    async def generate_samples(self, *, owner_id: str) -> list[Task]:
        """Insert a random batch of valid demo tasks owned by ``owner_id``.

        The batch size is drawn from ``settings.sample_tasks_min``..``sample_tasks_max``.

        Returns:
            The inserted tasks
        """
        with span("task_service.generate_samples"):
            count = random.randint(settings.sample_tasks_min, settings.sample_tasks_max)
            now = self._clock()
            window_start = now - timedelta(days=constants.SAMPLE_DEADLINE_DAYS_BEFORE)
            window_seconds = int(
                timedelta(days=constants.SAMPLE_DEADLINE_DAYS_BEFORE + constants.SAMPLE_DEADLINE_DAYS_AFTER).total_seconds()
            )
            difficulties = list(Difficulty)

            tasks: list[Task] = []
            for i in range(1, count + 1):
                task = Task(
                    id=str(uuid.uuid4()),
                    name=f"Task: {i}",
                    description=f"Description for Task {i}",
                    priority=random.randint(1, constants.TASK_PRIORITY_MAX),
                    difficulty=random.choice(difficulties),
                    done=random.choice([True, False]),
                    deadline=window_start + timedelta(seconds=random.randint(0, window_seconds)),
                    created_at=now,
                    updated_at=now,
                    owner_ids=[owner_id],
                )
                validate_task(task)
                tasks.append(task)

            stored = await self._store.insert_many(tasks)
            log_with_user_context(logger, "info", "Generated sample tasks", user_id=owner_id, count=len(stored))
            return stored
