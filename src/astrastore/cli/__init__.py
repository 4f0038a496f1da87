"""astra CLI: operator console for an astrastore record table."""

from __future__ import annotations

from typing import Optional

import typer

from astrastore.cli import info, init_cmd, migrate, records, truncate

app = typer.Typer(
    name="astra",
    help="astra - operator console for astrastore record tables.",
    no_args_is_help=True,
)


class _State:
    """Global CLI state shared across subcommands."""

    url: str | None = None
    token: str | None = None
    keyspace: str | None = None
    table: str | None = None
    json_output: bool = False


state = _State()


def _version_callback(value: bool) -> None:
    if value:
        try:
            from importlib.metadata import version

            v = version("astrastore")
        except Exception:
            v = "unknown"
        print(f"astra {v}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    url: Optional[str] = typer.Option(
        None, "--url", envvar="ASTRA_DB_URL", help="REST cql endpoint URL or memory://"
    ),
    token: Optional[str] = typer.Option(
        None, "--token", envvar="ASTRA_DB_TOKEN", help="Application token"
    ),
    keyspace: Optional[str] = typer.Option(
        None, "--keyspace", "-k", envvar="ASTRA_DB_KEYSPACE", help="Keyspace holding the table"
    ),
    table: Optional[str] = typer.Option(
        None, "--table", envvar="ASTRA_DB_TABLE", help="Record table name (default: data)"
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output when supported"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON"),
    version: bool = typer.Option(
        False, "--version", help="Show version", is_eager=True, callback=_version_callback
    ),
) -> None:
    """Global options for all astra commands."""
    from astrastore.log import configure_logging

    try:
        configure_logging(level=log_level, json_logs=json_logs)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level")

    state.url = url
    state.token = token
    state.keyspace = keyspace
    state.table = table
    state.json_output = json_output
    if ctx.invoked_subcommand is None and not version:
        print(ctx.get_help())
        raise typer.Exit()


app.add_typer(records.app, name="records", help="Read and delete records")

app.command(name="init")(init_cmd.init_cmd)
app.command(name="info")(info.info_cmd)
app.command(name="migrate")(migrate.migrate_cmd)
app.command(name="truncate")(truncate.truncate_cmd)


def main() -> None:
    """Entry point for the astra CLI."""
    app()
