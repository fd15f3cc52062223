"""Pytest configuration and fixtures for integration tests."""

import pytest

from todo_backend.core import config as config_module, db_client
from todo_backend.core.schema import init_db
from todo_backend.core.sqlite_stores import SqliteCredentialStore, SqliteTaskStore


@pytest.fixture
async def sqlite_db(tmp_path, monkeypatch):
    """A fresh SQLite database file with the schema applied."""
    monkeypatch.setattr(config_module.settings, "sqlite_db_path", str(tmp_path / "todo.db"))
    await init_db()
    yield
    await db_client.close_connection()


@pytest.fixture
def sqlite_task_store(sqlite_db) -> SqliteTaskStore:
    return SqliteTaskStore()


@pytest.fixture
def sqlite_credential_store(sqlite_db) -> SqliteCredentialStore:
    return SqliteCredentialStore()
