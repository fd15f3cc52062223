"""SQLite database client wrapper with CRUD operations."""

import asyncio
import json
import logging
import re
import threading
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from todo_backend.core.config import settings
from todo_backend.core.ports import DuplicateRecordError


logger = logging.getLogger(__name__)

_UNIQUE_VIOLATION = re.compile(r"UNIQUE constraint failed: \w+\.(\w+)")


def _validate_collection_name(collection: str) -> None:
    """Validate that a collection name contains only alphanumeric characters and underscores."""
    if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", collection):
        msg = f"Invalid collection name: {collection}. Only alphanumeric characters and underscores are allowed."
        raise ValueError(msg)


def _to_db_value(val: Any) -> Any:
    if isinstance(val, datetime):
        return val.isoformat()
    if isinstance(val, dict | list):
        return json.dumps(val)
    return val


def _raise_if_duplicate(error: aiosqlite.IntegrityError, data: dict[str, Any]) -> None:
    match = _UNIQUE_VIOLATION.search(str(error))
    if match:
        field = match.group(1)
        raise DuplicateRecordError(field, str(data.get(field, ""))) from error


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


_db_connections: dict[tuple[int, int, str], aiosqlite.Connection] = {}
_db_lock = asyncio.Lock()


def _cache_key(db_path: str | None) -> tuple[int, int, str]:
    return threading.get_ident(), id(asyncio.get_running_loop()), str(get_db_path(db_path))


async def get_connection(*, db_path: str | None = None) -> aiosqlite.Connection:
    """Get or create a cached connection for the current thread, loop, and db path."""
    cache_key = _cache_key(db_path)

    if cache_key in _db_connections:
        return _db_connections[cache_key]

    async with _db_lock:
        # Double-check after acquiring lock
        if cache_key in _db_connections:
            return _db_connections[cache_key]

        path = get_db_path(db_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(str(path))
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA foreign_keys = ON")
        await conn.execute("PRAGMA journal_mode = WAL")

        _db_connections[cache_key] = conn

        logger.info("Created new SQLite connection", extra={"db_path": str(path)})
        return conn


async def close_connection(*, db_path: str | None = None) -> None:
    """Close the cached SQLite connection for the current thread, loop, and db path."""
    cache_key = _cache_key(db_path)
    if cache_key not in _db_connections:
        return

    async with _db_lock:
        conn = _db_connections.pop(cache_key, None)
        if conn is not None:
            await conn.close()
            logger.info("Closed SQLite connection", extra={"db_path": cache_key[2]})


async def create_record(*, collection: str, data: dict[str, Any]) -> dict[str, Any]:
    """Insert a new record (data must carry its own ``id``) and return it."""
    _validate_collection_name(collection)
    try:
        conn = await get_connection()

        columns = list(data.keys())
        columns_str = ", ".join(columns)
        placeholders_str = ", ".join("?" for _ in columns)
        values = [_to_db_value(data[key]) for key in columns]

        query = f"INSERT INTO {collection} ({columns_str}) VALUES ({placeholders_str})"  # noqa: S608 - collection is validated
        await conn.execute(query, values)
        await conn.commit()
    except aiosqlite.IntegrityError as e:
        await conn.rollback()
        _raise_if_duplicate(e, data)
        msg = f"Failed to create record in {collection}: {e}"
        raise RuntimeError(msg) from e
    except Exception as e:
        logger.error("create_record_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to create record in {collection}: {e}"
        raise RuntimeError(msg) from e

    logger.info("Created record", extra={"collection": collection, "record_id": data.get("id")})
    return await get_record(collection=collection, record_id=str(data["id"]))


async def create_records(*, collection: str, records: Sequence[dict[str, Any]]) -> int:
    """Insert many records in one transaction. Returns the number inserted."""
    _validate_collection_name(collection)
    if not records:
        return 0

    columns = list(records[0].keys())
    columns_str = ", ".join(columns)
    placeholders_str = ", ".join("?" for _ in columns)
    rows = [[_to_db_value(record[key]) for key in columns] for record in records]

    try:
        conn = await get_connection()
        query = f"INSERT INTO {collection} ({columns_str}) VALUES ({placeholders_str})"  # noqa: S608 - collection is validated
        await conn.executemany(query, rows)
        await conn.commit()
    except Exception as e:
        logger.error("create_records_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to create records in {collection}: {e}"
        raise RuntimeError(msg) from e

    logger.info("Created records", extra={"collection": collection, "count": len(rows)})
    return len(rows)


async def get_record(*, collection: str, record_id: str) -> dict[str, Any]:
    """Fetch a single record by ID, raising KeyError if not found."""
    _validate_collection_name(collection)
    query = f"SELECT * FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
    record = await fetch_one(query, (record_id,))
    if record is None:
        msg = f"Record not found in {collection}: {record_id}"
        raise KeyError(msg)
    return record


async def update_record(*, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Update a record by ID and return the updated record, raising KeyError if it does not exist."""
    if not data:
        msg = "Empty update payload"
        raise ValueError(msg)

    _validate_collection_name(collection)
    try:
        conn = await get_connection()

        set_clause = ", ".join(f"{key} = ?" for key in data)
        values = [_to_db_value(val) for val in data.values()]
        values.append(record_id)

        query = f"UPDATE {collection} SET {set_clause} WHERE id = ?"  # noqa: S608 - collection is validated
        cursor = await conn.execute(query, values)
        await conn.commit()
        updated = cursor.rowcount
    except aiosqlite.IntegrityError as e:
        await conn.rollback()
        _raise_if_duplicate(e, data)
        msg = f"Failed to update record in {collection}: {e}"
        raise RuntimeError(msg) from e
    except Exception as e:
        logger.error("update_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to update record in {collection}: {e}"
        raise RuntimeError(msg) from e

    if updated == 0:
        msg = f"Record not found in {collection}: {record_id}"
        raise KeyError(msg)

    logger.info("Updated record", extra={"collection": collection, "record_id": record_id})
    return await get_record(collection=collection, record_id=record_id)


async def execute(query: str, params: Sequence[Any] = ()) -> int:
    """Run a write statement and return the affected row count."""
    try:
        conn = await get_connection()
        cursor = await conn.execute(query, params)
        await conn.commit()
        return cursor.rowcount
    except Exception as e:
        logger.error("execute_failed", extra={"error": str(e)})
        msg = f"Failed to execute statement: {e}"
        raise RuntimeError(msg) from e


async def delete_record(*, collection: str, record_id: str) -> bool:
    """Delete a record by ID. Returns False if it did not exist."""
    _validate_collection_name(collection)
    query = f"DELETE FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
    deleted = await execute(query, (record_id,)) > 0
    if deleted:
        logger.info("Deleted record", extra={"collection": collection, "record_id": record_id})
    return deleted


async def fetch_one(query: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
    """Return the first row of a parameterized query as a dict, or None."""
    try:
        conn = await get_connection()
        cursor = await conn.execute(query, params)
        row = await cursor.fetchone()
    except Exception as e:
        logger.error("fetch_one_failed", extra={"error": str(e)})
        msg = f"Failed to query database: {e}"
        raise RuntimeError(msg) from e
    return dict(row) if row is not None else None


async def fetch_all(query: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
    """Return every row of a parameterized query as dicts."""
    try:
        conn = await get_connection()
        cursor = await conn.execute(query, params)
        rows = await cursor.fetchall()
    except Exception as e:
        logger.error("fetch_all_failed", extra={"error": str(e)})
        msg = f"Failed to query database: {e}"
        raise RuntimeError(msg) from e
    return [dict(row) for row in rows]

