"""astra truncate: delete every record in the table."""

from __future__ import annotations

import typer

from astrastore.cli import _exitcodes as ec
from astrastore.cli._output import print_error
from astrastore.cli._storage import open_cli_store
from astrastore.errors import AstraStoreError


def truncate_cmd(
    yes: bool = typer.Option(False, "--yes", help="Confirm the destructive truncate"),
) -> None:
    """Delete every record in the table. Requires --yes."""
    if not yes:
        print_error("truncate deletes every record in the table; pass --yes to confirm")
        raise typer.Exit(ec.USAGE_ERROR)

    store = open_cli_store()
    try:
        store.truncate_table()
    except AstraStoreError as e:
        print_error(str(e))
        raise typer.Exit(ec.BACKEND_ERROR)
    finally:
        store.close()
    print(f"Truncated {store.keyspace}.{store.table}")
