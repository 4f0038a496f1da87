"""CLI filter token parser: converts ``name=value`` tokens to a filter map."""

from __future__ import annotations


def parse_cli_filters(tokens: list[str] | None) -> dict[str, str] | None:
    """Parse repeated ``--filter name=value`` tokens.

    Values are matched as stored text, so ``age=41`` finds records written
    with ``Filter.int("age", 41)`` and ``active=true`` finds ``Filter.bool``.
    """
    if not tokens:
        return None

    filters: dict[str, str] = {}
    for token in tokens:
        name, sep, value = token.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"Invalid filter '{token}': expected NAME=VALUE")
        filters[name] = value
    return filters
