"""Shared test fixtures for recordmap tests."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Any

import pytest

from recordmap import Cardinality, Column, Engine, Record, Reference, WritePermission
from recordmap.sql import SQLITE, Dialect, Statement

# --- Test record types ---


class User(Record, table="user"):
    id: Column[int] = Column(primary_key=True, auto=True)
    email: Column[str] = Column(unique=True, nullable=False, length=32)
    name: Column[str]
    orders = Reference(
        lambda: Order, source="id", refer="user_id", cardinality=Cardinality.TO_MANY
    )


class Order(Record, table="order"):
    id: Column[int] = Column(primary_key=True, auto=True)
    user_id: Column[int] = Column(nullable=False)
    total: Column[float] = Column("total_amount", default=0.0)
    user = Reference(User, source="user_id", refer="id")


class AuditEntry(Record, table="audit_entry", permissions=[WritePermission.INSERT]):
    id: Column[int] = Column(primary_key=True, auto=True)
    message: Column[str]


class Node(Record, table="node"):
    id: Column[int] = Column(primary_key=True)
    parent_id: Column[int]
    parent = Reference(lambda: Node, source="parent_id", refer="id")


SCHEMA = """
CREATE TABLE "user" (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT NOT NULL UNIQUE,
    name TEXT
);
CREATE TABLE "order" (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL REFERENCES "user"(id),
    total_amount REAL
);
CREATE TABLE audit_entry (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    message TEXT
);
CREATE TABLE node (
    id INTEGER PRIMARY KEY,
    parent_id INTEGER
);
"""


class RecordingExecutor:
    """Executor that records statements and replays canned query results."""

    def __init__(self, results: list[list[dict[str, Any]]] | None = None, dialect: Dialect = SQLITE):
        self.dialect = dialect
        self.results = list(results or [])
        self.statements: list[Statement] = []
        self.next_key = 1
        self.closed = False

    @contextmanager
    def query(self, statement: Statement):
        self.statements.append(statement)
        rows = self.results.pop(0) if self.results else []
        yield iter(rows)

    def execute(self, statement: Statement) -> int:
        self.statements.append(statement)
        return 1

    def insert(self, statement: Statement) -> int | None:
        self.statements.append(statement)
        return self.next_key

    def close(self) -> None:
        self.closed = True


def create_schema(db_path: str) -> None:
    conn = sqlite3.connect(db_path)
    try:
        conn.executescript(SCHEMA)
    finally:
        conn.close()


# --- Fixtures ---


@pytest.fixture
def tmp_db(tmp_path):
    """Create a temporary SQLite database path with the test schema."""
    path = str(tmp_path / "test.db")
    create_schema(path)
    return path


@pytest.fixture
def engine(tmp_db):
    """Create an Engine over the temporary database."""
    e = Engine.connect(tmp_db)
    yield e
    e.close()


@pytest.fixture
def recorder():
    return RecordingExecutor()


@pytest.fixture
def recording_engine(recorder):
    return Engine(recorder)
