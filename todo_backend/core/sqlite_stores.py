"""SQLite implementations of the CredentialStore and TaskStore ports."""

import json
import logging
from typing import Any

from todo_backend.core import db_client
from todo_backend.domain.task import Task
from todo_backend.domain.user import UserIdentity


logger = logging.getLogger(__name__)

_USERS = "users"
_TASKS = "tasks"

# Owner scoping is done in SQL so a task the caller does not own is never loaded
_OWNED_BY = "EXISTS (SELECT 1 FROM json_each(tasks.owner_ids) WHERE json_each.value = ?)"


def _task_to_row(task: Task) -> dict[str, Any]:
    row = task.model_dump(mode="json", exclude={"expired"})
    row["done"] = int(task.done)
    return row


def _row_to_task(row: dict[str, Any]) -> Task:
    return Task.model_validate({**row, "owner_ids": json.loads(row["owner_ids"]), "done": bool(row["done"])})


class SqliteCredentialStore:
    """User accounts in the ``users`` table."""

    async def _find_one(self, column: str, value: str) -> UserIdentity | None:
        row = await db_client.fetch_one(f"SELECT * FROM {_USERS} WHERE {column} = ?", (value,))  # noqa: S608 - fixed column names
        return UserIdentity.model_validate(row) if row else None

    async def find_by_username(self, username: str) -> UserIdentity | None:
        return await self._find_one("username", username)

    async def find_by_email(self, email: str) -> UserIdentity | None:
        return await self._find_one("email", email)

    async def find_by_id(self, user_id: str) -> UserIdentity | None:
        return await self._find_one("id", user_id)

    async def find_all(self) -> list[UserIdentity]:
        rows = await db_client.fetch_all(f"SELECT * FROM {_USERS} ORDER BY rowid")  # noqa: S608 - constant table name
        return [UserIdentity.model_validate(row) for row in rows]

    async def insert(self, user: UserIdentity) -> UserIdentity:
        row = await db_client.create_record(collection=_USERS, data=user.model_dump(mode="json"))
        return UserIdentity.model_validate(row)

    async def save(self, user: UserIdentity) -> UserIdentity | None:
        data = user.model_dump(mode="json", exclude={"id"})
        try:
            row = await db_client.update_record(collection=_USERS, record_id=user.id, data=data)
        except KeyError:
            return None
        return UserIdentity.model_validate(row)

    async def delete(self, user_id: str) -> bool:
        return await db_client.delete_record(collection=_USERS, record_id=user_id)


class SqliteTaskStore:
    """Tasks in the ``tasks`` table; ``owner_ids`` is a JSON array column."""

    async def find_by_owner(self, owner_id: str) -> list[Task]:
        rows = await db_client.fetch_all(
            f"SELECT * FROM {_TASKS} WHERE {_OWNED_BY} ORDER BY rowid",  # noqa: S608 - constant fragments
            (owner_id,),
        )
        return [_row_to_task(row) for row in rows]

    async def find_by_owner_and_id(self, owner_id: str, task_id: str) -> Task | None:
        row = await db_client.fetch_one(
            f"SELECT * FROM {_TASKS} WHERE id = ? AND {_OWNED_BY}",  # noqa: S608 - constant fragments
            (task_id, owner_id),
        )
        return _row_to_task(row) if row else None

    async def insert(self, task: Task) -> Task:
        row = await db_client.create_record(collection=_TASKS, data=_task_to_row(task))
        return _row_to_task(row)

    async def insert_many(self, tasks: list[Task]) -> list[Task]:
        await db_client.create_records(collection=_TASKS, records=[_task_to_row(task) for task in tasks])
        return tasks

    async def save(self, task: Task) -> Task | None:
        data = _task_to_row(task)
        data.pop("id")
        try:
            row = await db_client.update_record(collection=_TASKS, record_id=task.id, data=data)
        except KeyError:
            # Deleted since it was read
            return None
        return _row_to_task(row)

    async def delete_by_owner_and_id(self, owner_id: str, task_id: str) -> bool:
        removed = await db_client.execute(
            f"DELETE FROM {_TASKS} WHERE id = ? AND {_OWNED_BY}",  # noqa: S608 - constant fragments
            (task_id, owner_id),
        )
        return removed > 0
