"""SQLite schema management (code-first approach)."""

import logging

from todo_backend.core.db_client import get_connection


logger = logging.getLogger(__name__)


# Central list of all collections in the schema
COLLECTIONS = [
    "users",
    "tasks",
]

_SCHEMA: dict[str, str] = {
    # Username and email uniqueness is enforced here so concurrent registrations
    # cannot both succeed.
    "users": """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            username TEXT NOT NULL UNIQUE,
            email TEXT NOT NULL UNIQUE,
            password_hash TEXT NOT NULL,
            role TEXT NOT NULL CHECK (role IN ('USER', 'ADMIN', 'GUEST'))
        )
    """,
    "tasks": """
        CREATE TABLE IF NOT EXISTS tasks (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT,
            difficulty TEXT CHECK (difficulty IS NULL OR difficulty IN ('LOW', 'MEDIUM', 'HIGH')),
            priority INTEGER NOT NULL DEFAULT 0 CHECK (priority BETWEEN 0 AND 5),
            deadline TEXT,
            created_at TEXT,
            updated_at TEXT,
            done INTEGER NOT NULL DEFAULT 0,
            owner_ids TEXT NOT NULL
        )
    """,
}


async def init_db(*, db_path: str | None = None) -> None:
    """Create every table that does not exist yet."""
    conn = await get_connection(db_path=db_path)
    for collection in COLLECTIONS:
        await conn.execute(_SCHEMA[collection])
    await conn.commit()
    logger.info("Database schema initialized", extra={"collections": COLLECTIONS})
