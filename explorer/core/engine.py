"""
ENGINE MODULE - Binding to the embedded relational engine

Purpose:
    1. Describe the engine contract the session relies on (Engine, DatabaseHandle)
    2. Provide the one adapter we ship: SQLite images opened in memory
    3. Translate driver failures into explorer errors with the engine's own message

Contract:
    init_engine(locate_binary) -> Engine          (async, EngineInitError)
    Engine.open(data) -> DatabaseHandle           (DatasetOpenError)
    DatabaseHandle.execute(sql) -> [ResultSet]    (EngineQueryError)
"""

import asyncio
import logging
import os
import sqlite3
from typing import Callable, List, Optional, Protocol

from sqlalchemy import create_engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.pool import StaticPool

from explorer.core.errors import DatasetOpenError, EngineInitError, EngineQueryError
from explorer.core.schemas import Cell, ResultSet

logger = logging.getLogger(__name__)

# SQLite authorizer for user SQL: reads only.
# Action codes: https://www.sqlite.org/c3ref/c_alter_table.html
_SQLITE_OK, _SQLITE_DENY = 0, 1
_SQLITE_PRAGMA = 19
_READ_ONLY_ACTIONS = {
    20,  # SQLITE_READ
    21,  # SQLITE_SELECT
    31,  # SQLITE_FUNCTION
    33,  # SQLITE_RECURSIVE
}
_BLOCKED_PRAGMAS = frozenset({"query_only", "writable_schema"})


def read_only_authorizer(action, arg1, arg2, db_name, trigger_name):
    """Allow reads and non-toggling pragmas, deny everything else (ATTACH, DDL, DML)."""
    if action == _SQLITE_PRAGMA:
        return _SQLITE_DENY if (arg1 or "").lower() in _BLOCKED_PRAGMAS else _SQLITE_OK
    return _SQLITE_OK if action in _READ_ONLY_ACTIONS else _SQLITE_DENY


# ============================================================================
# CONTRACT
# ============================================================================


class DatabaseHandle(Protocol):
    def execute(self, sql_text: str) -> List[ResultSet]: ...

    def close(self) -> None: ...


class Engine(Protocol):
    def open(self, data: bytes) -> DatabaseHandle: ...


# ============================================================================
# SQLITE ADAPTER
# ============================================================================


def split_statements(sql_text: str) -> List[str]:
    """
    Split SQL text into complete statements.

    Semicolons inside string literals or comments do not end a statement,
    sqlite3.complete_statement() decides that. A trailing statement without
    a semicolon is kept as-is.

    Example:
        "select 1; select 'a;b';" -> ["select 1;", "select 'a;b';"]
    """
    statements = []
    buffer = ""
    parts = sql_text.split(";")

    for index, piece in enumerate(parts):
        buffer += piece
        if index < len(parts) - 1:
            buffer += ";"
            if not sqlite3.complete_statement(buffer):
                continue

        statement = buffer.strip()
        buffer = ""
        # Skip empty statements like ";;"
        if statement.strip(";").strip():
            statements.append(statement)

    return statements


def to_cell(value) -> Cell:
    # BLOBs are surfaced as hex text so cells stay integer/real/text/null
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    return value


class SqliteDatabase:
    """A dataset image living in an in-memory SQLite connection."""

    def __init__(self, connection: sqlite3.Connection):
        self._connection = connection
        # SQLAlchemy drives the single connection we deserialized into
        self._engine = create_engine(
            "sqlite://", creator=lambda: connection, poolclass=StaticPool
        )

    def execute(self, sql_text: str) -> List[ResultSet]:
        """
        Run every statement of ``sql_text`` and collect the row-returning ones.

        Raises:
            EngineQueryError: with the driver message untouched
        """
        results = []
        try:
            with self._engine.connect() as conn:
                for statement in split_statements(sql_text):
                    cursor = conn.exec_driver_sql(statement)
                    if not cursor.returns_rows:
                        continue

                    columns = tuple(cursor.keys())
                    rows = tuple(
                        tuple(to_cell(value) for value in row)
                        for row in cursor.fetchall()
                    )
                    results.append(ResultSet(columns=columns, rows=rows))
        except DBAPIError as exc:
            # exc.orig is the sqlite3 exception, its text is what the user should see
            raise EngineQueryError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            raise EngineQueryError(str(exc)) from exc

        return results

    def close(self) -> None:
        self._engine.dispose()
        self._connection.close()


class SqliteEngine:
    def __init__(self, extension_path: str = ""):
        self.extension_path = extension_path

    def open(self, data: bytes) -> SqliteDatabase:
        """
        Deserialize a database image into memory.

        The connection is switched to query_only and guarded by
        read_only_authorizer, so user SQL cannot write, attach files or turn
        query_only back off. The catalog is read once so a malformed image
        fails here instead of on the first user query.
        """
        connection = sqlite3.connect(":memory:", check_same_thread=False)
        try:
            connection.deserialize(data)
            if self.extension_path:
                connection.enable_load_extension(True)
                connection.load_extension(self.extension_path)
                connection.enable_load_extension(False)
            connection.execute("PRAGMA query_only = ON")
            connection.execute("SELECT count(*) FROM sqlite_master").fetchone()
            connection.set_authorizer(read_only_authorizer)
        except (sqlite3.Error, OverflowError) as exc:
            connection.close()
            raise DatasetOpenError(f"Could not open dataset: {exc}") from exc

        logger.info(f"Opened dataset image ({len(data)} bytes)")
        return SqliteDatabase(connection)


def _init_sqlite_engine(locate_binary: Optional[Callable[[], str]]) -> SqliteEngine:
    if not hasattr(sqlite3.Connection, "deserialize"):
        raise EngineInitError(
            f"SQLite {sqlite3.sqlite_version} cannot load database images"
        )

    extension_path = locate_binary() if locate_binary else ""
    if extension_path:
        if not os.path.exists(extension_path):
            raise EngineInitError(f"Engine extension not found: {extension_path}")
        if not hasattr(sqlite3.Connection, "enable_load_extension"):
            raise EngineInitError("This SQLite build cannot load extensions")

    logger.info(f"SQLite engine {sqlite3.sqlite_version} initialized")
    return SqliteEngine(extension_path)


async def init_engine(locate_binary: Optional[Callable[[], str]] = None) -> Engine:
    """
    Initialize the embedded engine.

    Args:
        locate_binary: Returns the path of an optional loadable extension
            ("" for none)

    Raises:
        EngineInitError: when the runtime cannot be used
    """
    return await asyncio.to_thread(_init_sqlite_engine, locate_binary)
