"""Executors: the narrow interface between the engine and a DB-API connection."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Protocol, runtime_checkable

from recordmap.errors import ExecutionError
from recordmap.sql import SQLITE, Dialect, Statement, detect_dialect


@runtime_checkable
class Executor(Protocol):
    """Runs built statements against a store."""

    dialect: Dialect

    def query(self, statement: Statement) -> Any:
        """Context manager yielding an iterator of mapping rows."""
        ...

    def execute(self, statement: Statement) -> int: ...

    def insert(self, statement: Statement) -> int | None: ...

    def close(self) -> None: ...


class DbApiExecutor:
    """Executor over any DB-API 2 connection.

    Driver errors are re-raised as ExecutionError chained to the original.
    """

    def __init__(self, connection: Any, dialect: Dialect | None = None) -> None:
        self._conn = connection
        self.dialect = dialect or detect_dialect(connection)
        self._error_type: type[BaseException] = getattr(connection, "Error", Exception)

    @property
    def connection(self) -> Any:
        return self._conn

    def _cursor(self) -> Any:
        return self._conn.cursor()

    def _run(self, cursor: Any, statement: Statement) -> None:
        try:
            cursor.execute(statement.sql, statement.params)
        except self._error_type as e:
            raise ExecutionError(statement.sql, str(e)) from e

    def _rows(self, cursor: Any) -> Iterator[Mapping[str, Any]]:
        names = [d[0] for d in cursor.description or ()]
        for row in cursor:
            yield dict(zip(names, row))

    @contextmanager
    def query(self, statement: Statement) -> Iterator[Iterator[Mapping[str, Any]]]:
        cursor = self._cursor()
        try:
            self._run(cursor, statement)
            yield self._rows(cursor)
        finally:
            cursor.close()

    def execute(self, statement: Statement) -> int:
        cursor = self._cursor()
        try:
            self._run(cursor, statement)
            return cursor.rowcount
        finally:
            cursor.close()

    def insert(self, statement: Statement) -> int | None:
        """Execute an INSERT and return the first generated integer key, if any.

        A statement with RETURNING or OUTPUT yields the key as its first
        column; otherwise the cursor's lastrowid is used.
        """
        cursor = self._cursor()
        try:
            self._run(cursor, statement)
            if cursor.description:
                row = cursor.fetchone()
                key = row[0] if row is not None else None
            else:
                key = getattr(cursor, "lastrowid", None)
            return key if isinstance(key, int) and key > 0 else None
        finally:
            cursor.close()

    def close(self) -> None:
        self._conn.close()


class SqliteExecutor(DbApiExecutor):
    """SQLite executor; opened from a path it runs in autocommit mode."""

    def __init__(self, database: str | sqlite3.Connection) -> None:
        if isinstance(database, sqlite3.Connection):
            conn = database
        else:
            conn = sqlite3.connect(database, isolation_level=None)
            conn.execute("PRAGMA foreign_keys=ON")
        super().__init__(conn, SQLITE)
        self._error_type = sqlite3.Error

    def _cursor(self) -> sqlite3.Cursor:
        cursor = self._conn.cursor()
        cursor.row_factory = sqlite3.Row
        return cursor

    def _rows(self, cursor: Any) -> Iterator[Mapping[str, Any]]:
        yield from cursor


def open_executor(target: Any, dialect: Dialect | None = None) -> DbApiExecutor:
    """Wrap a SQLite path, a sqlite3 connection, or any DB-API connection."""
    if isinstance(target, (str, sqlite3.Connection)):
        return SqliteExecutor(target)
    return DbApiExecutor(target, dialect)
