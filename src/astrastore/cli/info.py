"""astra info: show the resolved backend target."""

from __future__ import annotations

from typing import Any

import typer

from astrastore.cli import _exitcodes as ec
from astrastore.cli._output import print_error, print_fields
from astrastore.cli._storage import config_from_state
from astrastore.config import parse_storage_target
from astrastore.errors import ConfigurationError


def info_cmd() -> None:
    """Show the backend, keyspace and table the other commands will use."""
    from astrastore.cli import state

    try:
        config = config_from_state()
        target = parse_storage_target(config.url)
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)

    data: dict[str, Any] = {
        "backend": target.backend,
        "url": target.url,
        "keyspace": config.keyspace,
        "table": config.table,
        "token": "set" if config.token else "unset",
        "request_timeout_s": config.request_timeout_s,
    }
    print_fields(data, json_mode=state.json_output)
