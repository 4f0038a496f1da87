"""Output formatting for records, ids and command summaries."""

from __future__ import annotations

import json
import sys
from collections.abc import Mapping, Sequence
from typing import Any


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def print_fields(data: Mapping[str, Any], *, json_mode: bool = False) -> None:
    """Print a flat summary as a JSON object or ``name: value`` lines."""
    if json_mode:
        print_json(dict(data))
        return
    for name, value in data.items():
        print(f"{name}: {value}")


def print_record(doc: Mapping[str, Any], *, json_mode: bool = False) -> None:
    """Print one stored document; text mode indents it for reading."""
    if json_mode:
        print(json.dumps(doc, default=str))
    else:
        print_json(doc)


def print_records(docs: Sequence[Mapping[str, Any]], *, json_mode: bool = False) -> None:
    """Print scanned documents as a JSON array, or one per line with a count."""
    if json_mode:
        print_json(list(docs))
        return
    for doc in docs:
        print(json.dumps(doc, default=str))
    print(f"{len(docs)} record(s)")


def print_ids(ids: Sequence[str], *, json_mode: bool = False) -> None:
    """Print record ids as ``[{"id": ...}]`` or one per line."""
    if json_mode:
        print_json([{"id": key} for key in ids])
        return
    for key in ids:
        print(key)


def print_error(msg: str) -> None:
    """Print an error message to stderr."""
    print(f"Error: {msg}", file=sys.stderr)
