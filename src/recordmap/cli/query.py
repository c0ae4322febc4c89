"""recordmap list / aggregate: run manual reads against a database."""

from __future__ import annotations

from typing import Any, Optional

import typer

from recordmap.cli import _exitcodes as ec
from recordmap.cli._engine import open_engine
from recordmap.cli._filters import parse_cli_filters, parse_cli_sorts
from recordmap.cli._loader import load_records
from recordmap.cli._output import print_error, print_json, print_table
from recordmap.errors import ExecutionError, RecordMapError
from recordmap.filters import Function
from recordmap.query import QuerySpec
from recordmap.schema import describe
from recordmap.types import Record


def _resolve_type(
    type_name: str, models: Optional[str], models_path: Optional[str]
) -> type[Record]:
    if not models and not models_path:
        print_error("One of --models or --models-path is required")
        raise typer.Exit(ec.USAGE_ERROR)

    try:
        record_types = load_records(models, models_path)
    except Exception as e:
        print_error(f"Failed to load models: {e}")
        raise typer.Exit(ec.GENERAL_ERROR)

    if type_name not in record_types:
        print_error(f"Record type '{type_name}' not found in models")
        raise typer.Exit(ec.USAGE_ERROR)
    return record_types[type_name]


def _build_spec(
    columns: Optional[list[str]],
    filter_args: Optional[list[str]],
    sort_args: Optional[list[str]] = None,
) -> QuerySpec:
    try:
        spec = QuerySpec().project(*(columns or []))
        spec.filter(*parse_cli_filters(filter_args))
        spec.sort_by(*parse_cli_sorts(sort_args))
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)
    return spec


def list_cmd(
    type_name: str = typer.Argument(..., help="Record type name"),
    models: Optional[str] = typer.Option(None, "--models", help="Python import path for models"),
    models_path: Optional[str] = typer.Option(
        None, "--models-path", help="Filesystem path to models"
    ),
    columns: Optional[list[str]] = typer.Option(
        None, "--column", help="Column to project (repeatable)"
    ),
    filter_args: Optional[list[str]] = typer.Option(
        None, "--filter", help="COLUMN OP VALUE_JSON (repeatable)"
    ),
    sort_args: Optional[list[str]] = typer.Option(
        None, "--sort", help="COLUMN or COLUMN:desc (repeatable)"
    ),
) -> None:
    """List rows of a record type."""
    from recordmap.cli import state

    record_type = _resolve_type(type_name, models, models_path)
    spec = _build_spec(columns, filter_args, sort_args)

    try:
        engine = open_engine()
    except Exception as e:
        print_error(f"Cannot open database: {e}")
        raise typer.Exit(ec.DATABASE_ERROR)

    try:
        results = engine.list(record_type, spec)
    except ExecutionError as e:
        print_error(e.message)
        raise typer.Exit(ec.EXECUTION_FAILURE)
    except RecordMapError as e:
        print_error(e.message)
        raise typer.Exit(ec.USAGE_ERROR)
    finally:
        engine.close()

    descriptor = describe(record_type)
    headers = list(spec.columns) or [c.name for c in descriptor.columns]
    rows: list[list[Any]] = [
        [descriptor.column(h).value_of(r) for h in headers] for r in results
    ]
    if state.json_output:
        print_json([dict(zip(headers, row)) for row in rows])
    elif not rows:
        print("No rows found.")
    else:
        print_table(headers, rows)


def aggregate_cmd(
    type_name: str = typer.Argument(..., help="Record type name"),
    function: str = typer.Argument(..., help="COUNT, SUM, AVG, MAX or MIN"),
    models: Optional[str] = typer.Option(None, "--models", help="Python import path for models"),
    models_path: Optional[str] = typer.Option(
        None, "--models-path", help="Filesystem path to models"
    ),
    columns: Optional[list[str]] = typer.Option(
        None, "--column", help="Column to aggregate (repeatable)"
    ),
    filter_args: Optional[list[str]] = typer.Option(
        None, "--filter", help="COLUMN OP VALUE_JSON (repeatable)"
    ),
) -> None:
    """Compute one aggregate over a record type."""
    from recordmap.cli import state

    try:
        fn = Function(function.upper())
    except ValueError:
        valid = ", ".join(f.value for f in Function)
        print_error(f"Unknown aggregate function '{function}'. Valid functions: {valid}")
        raise typer.Exit(ec.USAGE_ERROR)

    record_type = _resolve_type(type_name, models, models_path)
    spec = _build_spec(columns, filter_args)

    try:
        engine = open_engine()
    except Exception as e:
        print_error(f"Cannot open database: {e}")
        raise typer.Exit(ec.DATABASE_ERROR)

    try:
        value = engine.aggregate(record_type, fn, spec)
    except ExecutionError as e:
        print_error(e.message)
        raise typer.Exit(ec.EXECUTION_FAILURE)
    except RecordMapError as e:
        print_error(e.message)
        raise typer.Exit(ec.USAGE_ERROR)
    finally:
        engine.close()

    if state.json_output:
        print_json({"function": fn.value, "value": value})
    else:
        print(value)
