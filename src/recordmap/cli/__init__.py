"""recordmap CLI: inspect record types and run reads against a SQLite database."""

from __future__ import annotations

from typing import Optional

import typer

from recordmap.cli import query, schema

app = typer.Typer(
    name="recordmap",
    help="recordmap CLI: inspect record types and run reads against a database.",
    no_args_is_help=True,
)


class _State:
    """Global CLI state shared across subcommands."""

    db: str = "recordmap.db"
    json_output: bool = False


state = _State()


def _version_callback(value: bool) -> None:
    if value:
        try:
            from importlib.metadata import version

            v = version("recordmap")
        except Exception:
            v = "unknown"
        print(f"recordmap {v}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    db: Optional[str] = typer.Option(
        None,
        "--db",
        envvar="RECORDMAP_DB",
        help="SQLite database file path (default: recordmap.db)",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output when supported"),
    version: bool = typer.Option(
        False, "--version", help="Show version", is_eager=True, callback=_version_callback
    ),
) -> None:
    """Global options for all recordmap commands."""
    state.db = db or "recordmap.db"
    state.json_output = json_output
    if ctx.invoked_subcommand is None and not version:
        print(ctx.get_help())
        raise typer.Exit()


app.command(name="describe")(schema.describe_cmd)
app.command(name="list")(query.list_cmd)
app.command(name="aggregate")(query.aggregate_cmd)


def main() -> None:
    """Entry point for the recordmap CLI."""
    app()
