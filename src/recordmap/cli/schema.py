"""recordmap describe: show the table metadata of a record type."""

from __future__ import annotations

from typing import Optional

import typer

from recordmap.cli import _exitcodes as ec
from recordmap.cli._loader import load_records
from recordmap.cli._output import print_error, print_json, print_table
from recordmap.schema import describe


def describe_cmd(
    type_name: str = typer.Argument(..., help="Record type name"),
    models: Optional[str] = typer.Option(None, "--models", help="Python import path for models"),
    models_path: Optional[str] = typer.Option(
        None, "--models-path", help="Filesystem path to models"
    ),
) -> None:
    """Show table, permissions, columns and relations of a record type."""
    from recordmap.cli import state

    json_mode = state.json_output

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

    descriptor = describe(record_types[type_name])
    columns = [
        {
            "name": c.name,
            "nullable": c.nullable,
            "unique": c.unique,
            "length": c.length,
            "scale": c.scale,
            "primary": c.primary,
            "auto": c.auto,
        }
        for c in descriptor.columns
    ]
    relations = [
        {
            "name": r.name,
            "target": r.target_type.__name__,
            "source": r.source,
            "refer": r.refer,
            "cardinality": r.cardinality.value,
        }
        for r in descriptor.relations
    ]
    permissions = sorted(p.value for p in descriptor.permissions)

    if json_mode:
        print_json(
            {
                "type": type_name,
                "table": descriptor.table,
                "permissions": permissions,
                "columns": columns,
                "relations": relations,
            },
        )
        return

    print(f"{type_name} (table: {descriptor.table})")
    print(f"permissions: {', '.join(permissions) or '(read-only)'}")
    print()
    headers = list(columns[0]) if columns else ["name"]
    print_table(headers, [list(c.values()) for c in columns])
    if relations:
        print()
        print_table(list(relations[0]), [list(r.values()) for r in relations])
