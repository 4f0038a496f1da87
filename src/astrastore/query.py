"""Statement builder for the generic record table.

Statements are small immutable trees. ``compile_statement`` turns one into CQL
with ``?`` bind markers plus its parameter list; ``render_statement`` inlines
every parameter as an escaped CQL literal for endpoints that only accept
statement text.
"""

from __future__ import annotations

import datetime as dt
import re
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from astrastore.types import SchemaTag

__all__ = [
    "NOW",
    "Condition",
    "Statement",
    "StatementBuilder",
    "RECORD_COLUMNS",
    "compile_statement",
    "render_statement",
    "cql_literal",
]

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

RECORD_COLUMNS = ("partition", "area", "id", "value", "filter", "updated", "model", "version")
PRIMARY_KEY_COLUMNS = ("partition", "area", "id")


def _validate_identifier(name: str) -> str:
    if not isinstance(name, str) or not _IDENTIFIER_RE.match(name):
        raise ValueError(f"Invalid CQL identifier '{name}': must match [A-Za-z_][A-Za-z0-9_]*")
    return name


class _Now:
    """Server-side ``toTimestamp(now())`` placeholder."""

    def __repr__(self) -> str:
        return "NOW"


NOW = _Now()


@dataclass(frozen=True)
class Condition:
    """Equality condition ``column = value`` or, with ``key``, ``column[key] = value``."""

    column: str
    value: Any
    key: str | None = None


@dataclass(frozen=True)
class Statement:
    """One request against the record table."""

    op: str  # "CREATE", "INSERT", "SELECT", "DELETE", "TRUNCATE"
    keyspace: str
    table: str
    columns: tuple[str, ...] = ()
    values: tuple[Any, ...] = ()
    where: tuple[Condition, ...] = ()
    ttl: int | None = None
    allow_filtering: bool = False
    description: str = field(default="", compare=False)

    @property
    def qualified_table(self) -> str:
        return f"{self.keyspace}.{self.table}"

    @property
    def operation(self) -> str:
        """Short name used in logs and errors."""
        return self.description or self.op.lower()


def cql_literal(value: Any) -> str:
    """Render a Python value as a CQL literal, escaping text."""
    if value is None:
        return "null"
    if value is NOW:
        return "toTimestamp(now())"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (dt.date, dt.datetime)):
        return cql_literal(value.isoformat())
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    if isinstance(value, Mapping):
        entries = ", ".join(f"{cql_literal(k)}: {cql_literal(v)}" for k, v in value.items())
        return "{" + entries + "}"
    raise TypeError(f"Cannot render {type(value).__name__} as a CQL literal")


def _create_table_cql(stmt: Statement) -> str:
    return (
        f"CREATE TABLE IF NOT EXISTS {stmt.qualified_table} ("
        "partition TEXT, "
        "area TEXT, "
        "id TEXT, "
        "value TEXT, "
        "filter MAP<TEXT, TEXT>, "
        "updated TIMESTAMP, "
        "model TEXT, "
        "version INT, "
        "PRIMARY KEY ((partition, area), id))"
    )


def _compile_condition(cond: Condition, params: list[Any], *, inline: bool) -> str:
    if cond.key is None:
        if inline:
            return f"{cond.column} = {cql_literal(cond.value)}"
        params.append(cond.value)
        return f"{cond.column} = ?"
    if inline:
        return f"{cond.column}[{cql_literal(cond.key)}] = {cql_literal(cond.value)}"
    params.extend([cond.key, cond.value])
    return f"{cond.column}[?] = ?"


def _compile(stmt: Statement, *, inline: bool) -> tuple[str, list[Any]]:
    params: list[Any] = []
    if stmt.op == "CREATE":
        return _create_table_cql(stmt), params
    if stmt.op == "TRUNCATE":
        return f"TRUNCATE {stmt.qualified_table}", params

    if stmt.op == "INSERT":
        markers: list[str] = []
        for value in stmt.values:
            if value is NOW or inline:
                markers.append(cql_literal(value))
            else:
                markers.append("?")
                params.append(value)
        cql = (
            f"INSERT INTO {stmt.qualified_table} ({', '.join(stmt.columns)}) "
            f"VALUES ({', '.join(markers)})"
        )
        if stmt.ttl is not None:
            if inline:
                cql += f" USING TTL {int(stmt.ttl)}"
            else:
                cql += " USING TTL ?"
                params.append(int(stmt.ttl))
        return cql, params

    clauses = " AND ".join(_compile_condition(c, params, inline=inline) for c in stmt.where)
    if stmt.op == "SELECT":
        cql = f"SELECT {', '.join(stmt.columns)} FROM {stmt.qualified_table} WHERE {clauses}"
        if stmt.allow_filtering:
            cql += " ALLOW FILTERING"
        return cql, params
    if stmt.op == "DELETE":
        return f"DELETE FROM {stmt.qualified_table} WHERE {clauses}", params
    raise ValueError(f"Unknown statement op: {stmt.op}")


def compile_statement(stmt: Statement) -> tuple[str, list[Any]]:
    """Compile to CQL with bind markers and the ordered parameter list."""
    return _compile(stmt, inline=False)


def render_statement(stmt: Statement) -> str:
    """Compile to self-contained CQL text with every value inlined and escaped."""
    cql, _ = _compile(stmt, inline=True)
    return cql + ";"


class StatementBuilder:
    """Builds the statements the record store issues against one table."""

    def __init__(self, keyspace: str, table: str = "data") -> None:
        self.keyspace = _validate_identifier(keyspace)
        self.table = _validate_identifier(table)

    def _statement(self, op: str, **kwargs: Any) -> Statement:
        return Statement(op=op, keyspace=self.keyspace, table=self.table, **kwargs)

    def create_table(self) -> Statement:
        return self._statement("CREATE", description="create_table")

    def insert(
        self,
        *,
        partition: str,
        area: str,
        key: str,
        value: str,
        filters: Mapping[str, str],
        tag: SchemaTag | None = None,
        ttl: int | None = None,
    ) -> Statement:
        """Write one record. Only a positive ``ttl`` adds an expiry clause.

        ``ttl`` is whole seconds; any other type raises TypeError.
        """
        if ttl is not None and (isinstance(ttl, bool) or not isinstance(ttl, int)):
            raise TypeError(f"ttl must be an integer number of seconds, got {ttl!r}")
        return self._statement(
            "INSERT",
            columns=RECORD_COLUMNS,
            values=(
                partition,
                area,
                key,
                value,
                dict(filters),
                NOW,
                tag.name if tag is not None else None,
                tag.version if tag is not None else None,
            ),
            ttl=ttl if ttl is not None and ttl > 0 else None,
            description="put",
        )

    def select_one(
        self, *, partition: str, area: str, key: str, columns: tuple[str, ...] = ("value",)
    ) -> Statement:
        return self._statement(
            "SELECT",
            columns=columns,
            where=(
                Condition("partition", partition),
                Condition("area", area),
                Condition("id", key),
            ),
            description="get",
        )

    def select_scan(
        self,
        *,
        partition: str,
        area: str,
        filters: Mapping[str, str] | None = None,
        columns: tuple[str, ...] = ("value",),
    ) -> Statement:
        """Scan one partition/area; each filter adds ``filter[name] = value``."""
        filter_conditions = tuple(
            Condition("filter", value, key=name) for name, value in sorted((filters or {}).items())
        )
        return self._statement(
            "SELECT",
            columns=columns,
            where=(Condition("partition", partition), Condition("area", area))
            + filter_conditions,
            allow_filtering=bool(filter_conditions),
            description="scan",
        )

    def select_schema(self, tag: SchemaTag) -> Statement:
        """Broad scan over every partition for rows carrying ``tag``."""
        return self._statement(
            "SELECT",
            columns=("partition", "area", "id", "value"),
            where=(Condition("model", tag.name), Condition("version", tag.version)),
            allow_filtering=True,
            description="schema_scan",
        )

    def delete_one(self, *, partition: str, area: str, key: str) -> Statement:
        return self._statement(
            "DELETE",
            where=(
                Condition("partition", partition),
                Condition("area", area),
                Condition("id", key),
            ),
            description="delete",
        )

    def delete_area(self, *, partition: str, area: str) -> Statement:
        return self._statement(
            "DELETE",
            where=(Condition("partition", partition), Condition("area", area)),
            description="remove_all_records",
        )

    def truncate(self) -> Statement:
        return self._statement("TRUNCATE", description="truncate_table")
