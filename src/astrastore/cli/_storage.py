"""CLI helpers for building the config and store from global options."""

from __future__ import annotations

import typer

from astrastore.cli import _exitcodes as ec
from astrastore.cli._output import print_error
from astrastore.config import AstraConfig
from astrastore.errors import ConfigurationError
from astrastore.storage import RecordStore, open_store


def config_from_state() -> AstraConfig:
    """Merge global CLI options over ``ASTRA_DB_*`` environment defaults."""
    from astrastore.cli import state

    return AstraConfig.from_env(
        url=state.url,
        token=state.token,
        keyspace=state.keyspace,
        table=state.table,
    )


def open_cli_store() -> RecordStore:
    """Open the record store selected by the global CLI options.

    Exits with a usage error when the options do not describe a usable backend.
    """
    try:
        return open_store(config_from_state())
    except (ConfigurationError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)
