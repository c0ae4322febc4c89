"""Shared fixtures for CLI tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from recordmap import Engine
from recordmap.cli import app

# Reuse the record types from the main conftest
from tests.conftest import Order, User, create_schema

if TYPE_CHECKING:
    from click.testing import Result


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_db(tmp_path):
    """Create a temp DB path with the test schema."""
    db_path = str(tmp_path / "cli_test.db")
    create_schema(db_path)
    return db_path


@pytest.fixture
def seeded_db(cli_db):
    """Create a DB with some seed data."""
    with Engine.connect(cli_db) as engine:
        alice = engine.insert(User(email="alice@x.com", name="Alice"))
        bob = engine.insert(User(email="bob@x.com", name="Bob"))
        engine.insert(Order(user_id=alice, total=10.0))
        engine.insert(Order(user_id=alice, total=30.0))
        engine.insert(Order(user_id=bob, total=20.0))
    return cli_db


def invoke(runner: CliRunner, args: list[str], db_path: str | None = None) -> "Result":
    """Invoke CLI with proper state setup."""
    if db_path:
        # Inject --db before subcommand
        args = ["--db", db_path] + args
    result = runner.invoke(app, args, catch_exceptions=False)
    return result
