"""SQLite document store client with CRUD operations.

Each collection is a table holding one JSON document per row. Filters use the
PocketBase-style syntax the services build (``field = "value" && other != "x"``)
and are compiled to ``json_extract`` comparisons with bound parameters.
"""

import asyncio
import json
import logging
import re
import threading
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from upkeep.core.config import settings


logger = logging.getLogger(__name__)

COLLECTIONS: tuple[str, ...] = ("tasks", "templates", "properties")

_RESERVED_FIELDS = {"id", "created", "updated"}


class DatabaseError(RuntimeError):
    """A store operation failed."""


class RecordNotFoundError(KeyError):
    """The requested record does not exist."""


def _validate_collection_name(collection: str) -> None:
    """Validate that a collection name contains only alphanumeric characters and underscores."""
    if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", collection):
        msg = f"Invalid collection name: {collection}. Only alphanumeric characters and underscores are allowed."
        raise ValueError(msg)


def _validate_field_name(field: str) -> None:
    if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", field):
        msg = f"Invalid field name: {field}"
        raise ValueError(msg)


def sanitize_param(value: str | int | float | bool | None) -> str:
    """Escape a value for safe embedding in filter strings via json.dumps."""
    return json.dumps(str(value))[1:-1]


def _now() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def _json_default(value: object) -> str:
    if isinstance(value, datetime | date):
        return value.isoformat()
    msg = f"Object of type {type(value).__name__} is not JSON serializable"
    raise TypeError(msg)


def _encode(data: dict[str, Any]) -> str:
    payload = {key: val for key, val in data.items() if key not in _RESERVED_FIELDS}
    return json.dumps(payload, default=_json_default)


def _row_to_record(row: tuple[Any, ...]) -> dict[str, Any]:
    record_id, payload, created, updated = row
    return {"id": str(record_id), "created": created, "updated": updated, **json.loads(payload)}


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


def _field_expression(field: str) -> str:
    if field in _RESERVED_FIELDS:
        return field
    _validate_field_name(field)
    return f"json_extract(data, '$.{field}')"


def _parse_value(value: str, *, is_like: bool = False) -> str | bool:
    """Parse a filter literal; only booleans are coerced, everything else stays text."""
    if is_like:
        escaped = value.replace("%", "\\%").replace("_", "\\_")
        return f"%{escaped}%"

    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False

    return value


def _get_sql_operator(op: str) -> str:
    """Map filter operator to SQL operator."""
    op_map = {
        "=": "=",
        "!=": "!=",
        ">": ">",
        "<": "<",
        ">=": ">=",
        "<=": "<=",
        "~": "LIKE",
    }
    sql_op = op_map.get(op)
    if not sql_op:
        msg = f"Unsupported operator: {op}"
        raise ValueError(msg)
    return sql_op


def _parse_single_comparison(comparison: str) -> tuple[str, str | bool]:
    """Parse a single comparison expression into a SQL condition and parameter."""
    match = re.match(
        r"""(\w+)\s*(!=|>=|<=|=|>|<|~)\s*(['"])([^'"]*)\3""",
        comparison.strip(),
    )
    if not match:
        msg = f"Invalid filter syntax: {comparison}"
        raise ValueError(msg)

    field = match.group(1)
    op = match.group(2)
    raw_value = match.group(4)

    sql_op = _get_sql_operator(op)
    is_like = sql_op == "LIKE"
    value = _parse_value(raw_value, is_like=is_like)
    expression = _field_expression(field)

    if is_like:
        return f"{expression} LIKE ? ESCAPE '\\'", value
    if sql_op == "!=":
        # Missing fields compare as not-equal, matching PocketBase semantics
        return f"({expression} IS NULL OR {expression} != ?)", value
    return f"{expression} {sql_op} ?", value


def _parse_or_group(or_group: str) -> tuple[str, list[str | bool]]:
    """Parse a parenthesized OR group into a SQL condition and parameters."""
    inner = or_group[1:-1]
    or_parts = [p.strip() for p in inner.split("||")]
    or_conditions = []
    or_params = []

    for part in or_parts:
        cond, value = _parse_single_comparison(part)
        or_conditions.append(cond)
        or_params.append(value)

    return f"({' OR '.join(or_conditions)})", or_params


def _split_and_conditions(filter_query: str) -> list[str]:
    """Split filter query by && while preserving parenthesized groups."""
    parts = []
    current = ""
    paren_depth = 0

    for char in filter_query:
        if char == "(":
            paren_depth += 1
        elif char == ")":
            paren_depth -= 1

        current += char

        if paren_depth == 0 and current.endswith("&&"):
            parts.append(current[:-2].strip())
            current = ""

    if current.strip():
        parts.append(current.strip())

    return parts


def parse_filter(filter_query: str) -> tuple[str, list[str | bool]]:
    """Parse filter syntax into a SQL WHERE clause and parameter list."""
    if not filter_query:
        return "", []

    conditions = []
    params: list[str | bool] = []

    for raw_part in _split_and_conditions(filter_query):
        part = raw_part.strip()

        if part.startswith("(") and part.endswith(")"):
            cond, cond_params = _parse_or_group(part)
            conditions.append(cond)
            params.extend(cond_params)
        else:
            cond, value = _parse_single_comparison(part)
            conditions.append(cond)
            params.append(value)

    return " AND ".join(conditions), params


def _parse_sort(sort: str) -> str:
    """Translate ``field`` / ``-field`` / ``+field`` into an ORDER BY clause."""
    if not sort:
        return "id ASC"
    match = re.match(r"^([+-]?)([A-Za-z_][A-Za-z0-9_]*)$", sort.strip())
    if not match:
        logger.warning("Invalid sort parameter, using default", extra={"sort": sort})
        return "id ASC"
    direction = "DESC" if match.group(1) == "-" else "ASC"
    return f"{_field_expression(match.group(2))} {direction}, id ASC"


_db_connections: dict[tuple[int, int, str], aiosqlite.Connection] = {}
_db_lock = asyncio.Lock()


async def get_connection(*, db_path: str | None = None) -> aiosqlite.Connection:
    """Get or create a cached connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop = asyncio.get_running_loop()
    loop_id = id(loop)
    path = get_db_path(db_path)
    cache_key = (thread_id, loop_id, str(path))

    if cache_key in _db_connections:
        return _db_connections[cache_key]

    async with _db_lock:
        if cache_key in _db_connections:
            return _db_connections[cache_key]

        path.parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(str(path))
        await conn.execute("PRAGMA journal_mode = WAL")
        for collection in COLLECTIONS:
            await _create_table(conn, collection)
        await conn.commit()

        _db_connections[cache_key] = conn

        logger.info(
            "Created new SQLite connection",
            extra={"db_path": str(path), "thread_id": thread_id, "loop_id": loop_id},
        )
        return conn


async def _create_table(conn: aiosqlite.Connection, collection: str) -> None:
    _validate_collection_name(collection)
    await conn.execute(
        f"CREATE TABLE IF NOT EXISTS {collection} ("  # noqa: S608 - collection is validated
        "id INTEGER PRIMARY KEY AUTOINCREMENT, "
        "data TEXT NOT NULL, "
        "created TEXT NOT NULL, "
        "updated TEXT NOT NULL)"
    )


async def close_connection(*, db_path: str | None = None) -> None:
    """Close the cached SQLite connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop_id = id(asyncio.get_running_loop())
    path = get_db_path(db_path)
    cache_key = (thread_id, loop_id, str(path))

    async with _db_lock:
        conn = _db_connections.pop(cache_key, None)
    if conn is None:
        return

    try:
        await conn.close()
        logger.info("Closed SQLite connection", extra={"db_path": str(path)})
    except Exception as e:
        logger.warning("Error closing SQLite connection", extra={"error": str(e), "db_path": str(path)})


async def create_record(*, collection: str, data: dict[str, Any]) -> dict[str, Any]:
    """Insert a new document and return it with its assigned id."""
    _validate_collection_name(collection)
    try:
        conn = await get_connection()
        now = _now()
        query = f"INSERT INTO {collection} (data, created, updated) VALUES (?, ?, ?)"  # noqa: S608
        cursor = await conn.execute(query, (_encode(data), now, now))
        await conn.commit()
        record_id = cursor.lastrowid
    except Exception as e:
        logger.error("create_record_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to create record in {collection}: {e}"
        raise DatabaseError(msg) from e

    logger.info("Created record", extra={"collection": collection, "record_id": record_id})
    return await get_record(collection=collection, record_id=str(record_id))


async def get_record(*, collection: str, record_id: str) -> dict[str, Any]:
    """Fetch a single document by ID, raising RecordNotFoundError if missing."""
    _validate_collection_name(collection)
    if not str(record_id).isdigit():
        msg = f"Record not found in {collection}: {record_id}"
        raise RecordNotFoundError(msg)

    try:
        conn = await get_connection()
        query = f"SELECT id, data, created, updated FROM {collection} WHERE id = ?"  # noqa: S608
        cursor = await conn.execute(query, (int(record_id),))
        row = await cursor.fetchone()
    except Exception as e:
        logger.error("get_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to get record from {collection}: {e}"
        raise DatabaseError(msg) from e

    if row is None:
        msg = f"Record not found in {collection}: {record_id}"
        raise RecordNotFoundError(msg)

    return _row_to_record(row)


async def update_record(*, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Merge ``data`` into a stored document and return the updated record."""
    if not data:
        msg = "Empty update payload"
        raise ValueError(msg)

    current = await get_record(collection=collection, record_id=record_id)
    merged = {**current, **data}

    try:
        conn = await get_connection()
        query = f"UPDATE {collection} SET data = ?, updated = ? WHERE id = ?"  # noqa: S608
        await conn.execute(query, (_encode(merged), _now(), int(record_id)))
        await conn.commit()
    except Exception as e:
        logger.error("update_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to update record in {collection}: {e}"
        raise DatabaseError(msg) from e

    logger.info("Updated record", extra={"collection": collection, "record_id": record_id})
    return await get_record(collection=collection, record_id=record_id)


async def delete_record(*, collection: str, record_id: str) -> None:
    """Delete a document by ID, raising RecordNotFoundError if missing."""
    _validate_collection_name(collection)
    if not str(record_id).isdigit():
        msg = f"Record not found in {collection}: {record_id}"
        raise RecordNotFoundError(msg)

    try:
        conn = await get_connection()
        query = f"DELETE FROM {collection} WHERE id = ?"  # noqa: S608
        cursor = await conn.execute(query, (int(record_id),))
        await conn.commit()
    except Exception as e:
        logger.error("delete_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to delete record from {collection}: {e}"
        raise DatabaseError(msg) from e

    if cursor.rowcount == 0:
        msg = f"Record not found in {collection}: {record_id}"
        raise RecordNotFoundError(msg)

    logger.info("Deleted record", extra={"collection": collection, "record_id": record_id})


async def list_records(
    *,
    collection: str,
    page: int = 1,
    per_page: int = 50,
    filter_query: str = "",
    sort: str = "",
) -> list[dict[str, Any]]:
    """List documents with optional filtering, sorting, and pagination."""
    _validate_collection_name(collection)
    where_clause, params = parse_filter(filter_query)
    where_sql = f"WHERE {where_clause}" if where_clause else ""
    order_sql = _parse_sort(sort)
    offset = (page - 1) * per_page

    try:
        conn = await get_connection()
        query = (
            f"SELECT id, data, created, updated FROM {collection} {where_sql} "  # noqa: S608
            f"ORDER BY {order_sql} LIMIT ? OFFSET ?"
        )
        cursor = await conn.execute(query, [*params, per_page, offset])
        rows = await cursor.fetchall()
    except Exception as e:
        logger.error("list_records_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to list records from {collection}: {e}"
        raise DatabaseError(msg) from e

    records = [_row_to_record(row) for row in rows]
    logger.info("Listed records", extra={"collection": collection, "count": len(records)})
    return records
