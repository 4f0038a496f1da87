"""astra records: read and delete records by partition and area."""

from __future__ import annotations

from typing import Any, Optional

import typer

from astrastore.cli import _exitcodes as ec
from astrastore.cli._filters import parse_cli_filters
from astrastore.cli._output import print_error, print_ids, print_record, print_records
from astrastore.cli._storage import open_cli_store
from astrastore.errors import AstraStoreError, DecodingError

app = typer.Typer(no_args_is_help=True)

Document = dict[str, Any]


def _filters_or_exit(tokens: Optional[list[str]]) -> dict[str, str] | None:
    try:
        return parse_cli_filters(tokens)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)


@app.command(name="get")
def get_cmd(
    partition: str = typer.Argument(..., help="Partition key"),
    area: str = typer.Argument(..., help="Area (collection) name"),
    key: str = typer.Argument(..., help="Record id"),
) -> None:
    """Print one record."""
    from astrastore.cli import state

    store = open_cli_store()
    try:
        doc = store.get(Document, partition, key, area)
    except DecodingError as e:
        print_error(f"Record is not a JSON object: {e}")
        raise typer.Exit(ec.GENERAL_ERROR)
    except AstraStoreError as e:
        print_error(str(e))
        raise typer.Exit(ec.BACKEND_ERROR)
    finally:
        store.close()

    if doc is None:
        print_error(f"Record not found: {partition}/{area}/{key}")
        raise typer.Exit(ec.GENERAL_ERROR)
    print_record(doc, json_mode=state.json_output)


@app.command(name="scan")
def scan_cmd(
    partition: str = typer.Argument(..., help="Partition key"),
    area: str = typer.Argument(..., help="Area (collection) name"),
    filter_args: Optional[list[str]] = typer.Option(
        None, "--filter", help="NAME=VALUE equality filter (repeatable, AND-combined)"
    ),
) -> None:
    """Print every record in a partition/area matching all filters."""
    from astrastore.cli import state

    filters = _filters_or_exit(filter_args)
    store = open_cli_store()
    try:
        docs = store.all(Document, partition, area, filters)
    except AstraStoreError as e:
        print_error(str(e))
        raise typer.Exit(ec.BACKEND_ERROR)
    finally:
        store.close()

    print_records(docs, json_mode=state.json_output)


@app.command(name="ids")
def ids_cmd(
    partition: str = typer.Argument(..., help="Partition key"),
    area: str = typer.Argument(..., help="Area (collection) name"),
    filter_args: Optional[list[str]] = typer.Option(
        None, "--filter", help="NAME=VALUE equality filter (repeatable, AND-combined)"
    ),
) -> None:
    """List record ids in a partition/area."""
    from astrastore.cli import state

    filters = _filters_or_exit(filter_args)
    store = open_cli_store()
    try:
        ids = store.ids(partition, area, filters)
    except AstraStoreError as e:
        print_error(str(e))
        raise typer.Exit(ec.BACKEND_ERROR)
    finally:
        store.close()

    print_ids(ids, json_mode=state.json_output)


@app.command(name="delete")
def delete_cmd(
    partition: str = typer.Argument(..., help="Partition key"),
    area: str = typer.Argument(..., help="Area (collection) name"),
    key: str = typer.Argument(..., help="Record id"),
) -> None:
    """Delete one record."""
    store = open_cli_store()
    try:
        store.delete(partition, key, area)
    except AstraStoreError as e:
        print_error(str(e))
        raise typer.Exit(ec.BACKEND_ERROR)
    finally:
        store.close()
    print(f"Deleted {partition}/{area}/{key}")


@app.command(name="purge")
def purge_cmd(
    partition: str = typer.Argument(..., help="Partition key"),
    area: str = typer.Argument(..., help="Area (collection) name"),
    yes: bool = typer.Option(False, "--yes", help="Confirm deleting every record in the area"),
) -> None:
    """Delete every record in a partition/area. Requires --yes."""
    if not yes:
        print_error(f"purge deletes every record in {partition}/{area}; pass --yes to confirm")
        raise typer.Exit(ec.USAGE_ERROR)

    store = open_cli_store()
    try:
        store.remove_all_records(partition, area)
    except AstraStoreError as e:
        print_error(str(e))
        raise typer.Exit(ec.BACKEND_ERROR)
    finally:
        store.close()
    print(f"Removed all records in {partition}/{area}")
