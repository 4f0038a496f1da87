"""astra init: create the record table."""

from __future__ import annotations

import typer

from astrastore.cli import _exitcodes as ec
from astrastore.cli._output import print_error, print_fields
from astrastore.cli._storage import open_cli_store
from astrastore.errors import AstraStoreError


def init_cmd() -> None:
    """Create the record table if it does not exist."""
    from astrastore.cli import state

    store = open_cli_store()
    try:
        store.ensure_table()
    except AstraStoreError as e:
        print_error(str(e))
        raise typer.Exit(ec.BACKEND_ERROR)
    finally:
        store.close()

    print_fields(
        {"keyspace": store.keyspace, "table": store.table, "status": "ready"},
        json_mode=state.json_output,
    )
