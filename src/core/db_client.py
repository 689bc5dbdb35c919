"""SQLite database client wrapper with CRUD operations."""

import json
import logging
import re
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

import aiosqlite
from fastapi import Request

from src.core import schema
from src.core.errors import NotFoundError, StorageError


logger = logging.getLogger(__name__)


class DatabaseError(StorageError):
    """Storage operation failed."""


class UniqueConstraintError(DatabaseError):
    """Insert or update violated a unique index."""


class RecordNotFoundError(NotFoundError):
    """No record matched the lookup."""


def _validate_collection_name(collection: str) -> None:
    """Validate that a collection name contains only alphanumeric characters and underscores."""
    if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", collection):
        msg = f"Invalid collection name: {collection}. Only alphanumeric characters and underscores are allowed."
        raise ValueError(msg)


def _validate_field_name(field: str) -> None:
    if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", field):
        msg = f"Invalid field name: {field}"
        raise ValueError(msg)


def _encode_value(value: Any) -> Any:  # noqa: ANN401
    """Convert a Python value into something SQLite can bind."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict | list):
        return json.dumps(value)
    return value


def _decode_record(collection: str, record: dict[str, Any]) -> dict[str, Any]:
    """Stringify the integer primary key and decode JSON columns."""
    converted = record.copy()
    if isinstance(converted.get("id"), int):
        converted["id"] = str(converted["id"])
    for column in schema.JSON_COLUMNS.get(collection, set()):
        raw = converted.get(column)
        if isinstance(raw, str):
            converted[column] = json.loads(raw)
    return converted


def _parse_value(value: str, *, is_like: bool = False) -> str:
    """Unescape a quoted filter value (see sanitize_param); values always stay strings."""
    try:
        value = json.loads(f'"{value}"')
    except json.JSONDecodeError as e:
        msg = f"Invalid filter value: {value}"
        raise ValueError(msg) from e
    if is_like:
        return "%" + value.replace("%", "\\%").replace("_", "\\_") + "%"
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


def _parse_single_comparison(comparison: str) -> tuple[str, str]:
    """Parse a single comparison expression into a SQL condition and parameter."""
    match = re.match(
        r"""^(\w+)\s*(!=|>=|<=|=|>|<|~)\s*(?:"((?:\\.|[^\\"])*)"|'([^']*)')$""",
        comparison,
    )
    if not match:
        msg = f"Invalid filter syntax: {comparison}"
        raise ValueError(msg)

    field = match.group(1)
    sql_op = _get_sql_operator(match.group(2))
    is_like = sql_op == "LIKE"
    if match.group(3) is not None:
        value = _parse_value(match.group(3), is_like=is_like)
    else:
        value = _parse_value(json.dumps(match.group(4))[1:-1], is_like=is_like)

    if is_like:
        return f"{field} LIKE ? ESCAPE '\\'", value
    return f"{field} {sql_op} ?", value


def _parse_or_group(or_group: str) -> tuple[str, list[str]]:
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


def parse_filter(filter_query: str) -> tuple[str, list[str]]:
    """Parse filter syntax (``field = "value" && (a = "x" || a = "y")``) into a WHERE clause."""
    if not filter_query:
        return "", []

    conditions = []
    params: list[str] = []

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


def sanitize_param(value: str | int | float | bool | None) -> str:
    """Escape a value for safe embedding in a filter query."""
    return json.dumps(str(value))[1:-1]


def _parse_sort(sort: str) -> str:
    """Validate a sort clause like ``created_at DESC, id DESC``; fall back to ``id ASC``."""
    if not sort:
        return "id ASC"
    parts = [p.strip() for p in sort.split(",")]
    for part in parts:
        if not re.match(r"^[A-Za-z_][A-Za-z0-9_]*(\s+(ASC|DESC))?$", part, re.IGNORECASE):
            logger.warning("Invalid sort parameter, using default", extra={"sort": sort})
            return "id ASC"
    return ", ".join(parts)


class DatabaseClient:
    """Async SQLite client owning a single connection for the life of the app.

    Constructed once at startup, opened with :meth:`connect` and closed with
    :meth:`close`. Request handlers receive it through ``get_db``.
    """

    def __init__(self, *, db_path: str | Path) -> None:
        self._db_path = str(db_path)
        self._conn: aiosqlite.Connection | None = None

    @property
    def db_path(self) -> str:
        return self._db_path

    @property
    def name(self) -> str:
        """Database name (file stem, or ``:memory:``)."""
        if self._db_path == ":memory:":
            return self._db_path
        return Path(self._db_path).stem

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    async def connect(self) -> None:
        """Open the connection and apply the schema."""
        if self._conn is not None:
            return

        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        try:
            conn = await aiosqlite.connect(self._db_path)
            await conn.execute("PRAGMA journal_mode = WAL")
            await schema.init_db(conn)
        except aiosqlite.Error as e:
            logger.error("database_connect_failed", extra={"db_path": self._db_path, "error": str(e)})
            msg = f"Failed to open database {self.name}: {e}"
            raise DatabaseError(msg) from e

        self._conn = conn
        logger.info("Created new SQLite connection", extra={"db_path": self._db_path})

    async def close(self) -> None:
        """Close the connection if it is open."""
        if self._conn is None:
            return

        try:
            await self._conn.close()
            logger.info("Closed SQLite connection", extra={"db_path": self._db_path})
        except aiosqlite.Error as e:
            logger.warning("Error closing SQLite connection", extra={"error": str(e), "db_path": self._db_path})
        finally:
            self._conn = None

    def _connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            msg = "Database connection is not open. Call connect() first."
            raise DatabaseError(msg)
        return self._conn

    async def create_record(self, *, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a new record and return it with its assigned id.

        Raises:
            UniqueConstraintError: If the insert violates a unique index
            DatabaseError: For any other failure
        """
        _validate_collection_name(collection)
        conn = self._connection()

        columns = list(data.keys())
        for column in columns:
            _validate_field_name(column)
        columns_str = ", ".join(columns)
        placeholders_str = ", ".join("?" for _ in columns)
        values = [_encode_value(data[key]) for key in columns]

        query = f"INSERT INTO {collection} ({columns_str}) VALUES ({placeholders_str})"  # noqa: S608 - names are validated
        try:
            cursor = await conn.execute(query, values)
            await conn.commit()
        except aiosqlite.IntegrityError as e:
            # Only the failed statement is undone; other pending writes on the shared connection survive
            if "UNIQUE constraint failed" in str(e):
                logger.info("Unique constraint violated", extra={"collection": collection, "error": str(e)})
                msg = f"Duplicate record in {collection}: {e}"
                raise UniqueConstraintError(msg) from e
            logger.error("create_record_failed", extra={"collection": collection, "error": str(e)})
            msg = f"Failed to create record in {collection}: {e}"
            raise DatabaseError(msg) from e
        except aiosqlite.Error as e:
            logger.error("create_record_failed", extra={"collection": collection, "error": str(e)})
            msg = f"Failed to create record in {collection}: {e}"
            raise DatabaseError(msg) from e

        record_id = cursor.lastrowid
        logger.info("Created record", extra={"collection": collection, "record_id": record_id})
        return await self.get_record(collection=collection, record_id=str(record_id))

    async def get_record(self, *, collection: str, record_id: str) -> dict[str, Any]:
        """Fetch a single record by ID, raising RecordNotFoundError if not found."""
        _validate_collection_name(collection)
        conn = self._connection()

        try:
            numeric_id = int(record_id)
        except (TypeError, ValueError) as e:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg) from e

        query = f"SELECT * FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
        try:
            cursor = await conn.execute(query, (numeric_id,))
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            logger.error("get_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
            msg = f"Failed to get record from {collection}: {e}"
            raise DatabaseError(msg) from e

        if row is None:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        columns = [description[0] for description in cursor.description]
        return _decode_record(collection, dict(zip(columns, row, strict=True)))

    async def update_record(self, *, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Update a record by ID and return the updated record."""
        if not data:
            msg = "Empty update payload"
            raise ValueError(msg)

        await self.get_record(collection=collection, record_id=record_id)
        updated = await self.update_where(
            collection=collection,
            filter_query=f'id = "{sanitize_param(record_id)}"',
            data=data,
        )
        if updated == 0:
            msg = f"Record not found in {collection}: {record_id}"
            raise RecordNotFoundError(msg)

        logger.info("Updated record", extra={"collection": collection, "record_id": record_id})
        return await self.get_record(collection=collection, record_id=record_id)

    async def update_where(self, *, collection: str, filter_query: str, data: dict[str, Any]) -> int:
        """Update every record matching the filter in one statement; return the row count."""
        if not data:
            msg = "Empty update payload"
            raise ValueError(msg)

        _validate_collection_name(collection)
        conn = self._connection()

        for key in data:
            _validate_field_name(key)
        set_clause = ", ".join(f"{key} = ?" for key in data)
        values: list[Any] = [_encode_value(val) for val in data.values()]

        where_clause, params = parse_filter(filter_query)
        if not where_clause:
            msg = "Refusing to update without a filter"
            raise ValueError(msg)
        values.extend(params)

        query = f"UPDATE {collection} SET {set_clause} WHERE {where_clause}"  # noqa: S608 - names are validated
        try:
            cursor = await conn.execute(query, values)
            await conn.commit()
        except aiosqlite.IntegrityError as e:
            msg = f"Update violated a constraint in {collection}: {e}"
            raise UniqueConstraintError(msg) from e
        except aiosqlite.Error as e:
            logger.error("update_where_failed", extra={"collection": collection, "error": str(e)})
            msg = f"Failed to update records in {collection}: {e}"
            raise DatabaseError(msg) from e

        return cursor.rowcount

    async def append_to_list(
        self,
        *,
        collection: str,
        filter_query: str,
        field: str,
        value: Any,  # noqa: ANN401
        data: dict[str, Any] | None = None,
    ) -> int:
        """Atomically append ``value`` to the JSON array ``field`` of matching records.

        The append and any extra ``data`` assignments run as a single UPDATE
        statement, so concurrent appends never lose each other.

        Returns:
            Number of records updated
        """
        _validate_collection_name(collection)
        _validate_field_name(field)
        conn = self._connection()

        extra = data or {}
        for key in extra:
            _validate_field_name(key)

        set_parts = [f"{field} = json_insert(COALESCE({field}, '[]'), '$[#]', ?)"]
        values: list[Any] = [_encode_value(value)]
        for key, val in extra.items():
            set_parts.append(f"{key} = ?")
            values.append(_encode_value(val))

        where_clause, params = parse_filter(filter_query)
        if not where_clause:
            msg = "Refusing to append without a filter"
            raise ValueError(msg)
        values.extend(params)

        query = f"UPDATE {collection} SET {', '.join(set_parts)} WHERE {where_clause}"  # noqa: S608 - names are validated
        try:
            cursor = await conn.execute(query, values)
            await conn.commit()
        except aiosqlite.Error as e:
            logger.error("append_to_list_failed", extra={"collection": collection, "field": field, "error": str(e)})
            msg = f"Failed to append to {collection}.{field}: {e}"
            raise DatabaseError(msg) from e

        return cursor.rowcount

    async def list_records(
        self,
        *,
        collection: str,
        page: int = 1,
        per_page: int = 50,
        filter_query: str = "",
        sort: str = "",
    ) -> list[dict[str, Any]]:
        """List records with optional filtering, sorting, and pagination."""
        _validate_collection_name(collection)
        conn = self._connection()

        where_clause = ""
        params: list[Any] = []
        if filter_query:
            where_clause, params = parse_filter(filter_query)
            where_clause = f"WHERE {where_clause}"

        safe_sort = _parse_sort(sort)
        offset = (page - 1) * per_page

        query = f"SELECT * FROM {collection} {where_clause} ORDER BY {safe_sort} LIMIT ? OFFSET ?"  # noqa: S608 - collection is validated
        params.extend([per_page, offset])

        try:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            logger.error("list_records_failed", extra={"collection": collection, "error": str(e)})
            msg = f"Failed to list records from {collection}: {e}"
            raise DatabaseError(msg) from e

        columns = [description[0] for description in cursor.description]
        records = [_decode_record(collection, dict(zip(columns, row, strict=True))) for row in rows]

        logger.debug("Listed records", extra={"collection": collection, "count": len(records)})
        return records

    async def get_first_record(self, *, collection: str, filter_query: str) -> dict[str, Any] | None:
        """Return the first record matching the filter, or None."""
        records = await self.list_records(collection=collection, per_page=1, filter_query=filter_query)
        return records[0] if records else None

    async def count_records(self, *, collection: str, filter_query: str = "") -> int:
        """Count records matching the filter."""
        _validate_collection_name(collection)
        conn = self._connection()

        where_clause, params = parse_filter(filter_query)
        query = f"SELECT COUNT(*) FROM {collection}"  # noqa: S608 - collection is validated
        if where_clause:
            query = f"{query} WHERE {where_clause}"

        try:
            cursor = await conn.execute(query, params)
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            logger.error("count_records_failed", extra={"collection": collection, "error": str(e)})
            msg = f"Failed to count records in {collection}: {e}"
            raise DatabaseError(msg) from e

        return int(row[0]) if row else 0

    async def list_collections(self) -> list[str]:
        """Names of the tables present in the database."""
        conn = self._connection()
        try:
            cursor = await conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            msg = f"Failed to list collections: {e}"
            raise DatabaseError(msg) from e
        return [row[0] for row in rows]


def get_db(request: Request) -> DatabaseClient:
    """FastAPI dependency returning the client opened in the application lifespan."""
    db: DatabaseClient | None = getattr(request.app.state, "db", None)
    if db is None:
        msg = "Database client is not initialized"
        raise DatabaseError(msg)
    return db
