"""In-memory transport that evaluates record-table statements locally.

It applies the same rules the wide-column backend does for this table: the
table has to be created first, scans must pin the full partition key
``(partition, area)`` unless ``ALLOW FILTERING`` is requested, conditions on
non-key columns need ``ALLOW FILTERING``, and TTL'd rows disappear once they
expire.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from astrastore.errors import TransportError
from astrastore.query import NOW, Condition, Statement
from astrastore.transport import Row

_PARTITION_KEY = ("partition", "area")
_KEY_COLUMNS = ("partition", "area", "id")

_Table = dict[tuple[str, str, str], dict[str, Any]]


class MemoryTransport:
    """Thread-safe dict-backed table store."""

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        history_size: int = 1000,
    ) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._tables: dict[str, _Table] = {}
        self.history: deque[Statement] = deque(maxlen=history_size)

    def execute(self, statement: Statement) -> list[Row]:
        with self._lock:
            self.history.append(statement)
            if statement.op == "CREATE":
                self._tables.setdefault(statement.qualified_table, {})
                return []
            table = self._table(statement)
            if statement.op == "INSERT":
                self._insert(table, statement)
                return []
            if statement.op == "SELECT":
                return self._select(table, statement)
            if statement.op == "DELETE":
                self._delete(table, statement)
                return []
            if statement.op == "TRUNCATE":
                table.clear()
                return []
        raise TransportError(statement.operation, f"Unsupported statement op '{statement.op}'")

    def close(self) -> None:
        pass

    def row_count(self, keyspace: str, table: str = "data") -> int:
        """Number of live rows, for diagnostics and tests."""
        with self._lock:
            rows = self._tables.get(f"{keyspace}.{table}", {})
            now = self._clock()
            return sum(1 for row in rows.values() if not self._expired(row, now))

    # --- internals ---

    def _table(self, statement: Statement) -> _Table:
        table = self._tables.get(statement.qualified_table)
        if table is None:
            raise TransportError(
                statement.operation,
                f"unconfigured table {statement.table} in keyspace {statement.keyspace}",
                400,
            )
        return table

    def _expired(self, row: dict[str, Any], now: float) -> bool:
        expires_at = row.get("_expires_at")
        return expires_at is not None and expires_at <= now

    def _insert(self, table: _Table, stmt: Statement) -> None:
        row: dict[str, Any] = {}
        for column, value in zip(stmt.columns, stmt.values):
            if value is NOW:
                value = datetime.now(timezone.utc)
            elif isinstance(value, dict):
                value = dict(value)
            row[column] = value
        if any(row.get(c) is None for c in _KEY_COLUMNS):
            raise TransportError(stmt.operation, "primary key columns may not be null", 400)
        row["_expires_at"] = self._clock() + stmt.ttl if stmt.ttl else None
        table[(row["partition"], row["area"], row["id"])] = row

    def _check_restrictions(self, stmt: Statement) -> None:
        columns = {c.column for c in stmt.where}
        needs_filtering = any(c.column not in _KEY_COLUMNS for c in stmt.where) or not set(
            _PARTITION_KEY
        ).issubset(columns)
        if needs_filtering and not stmt.allow_filtering:
            raise TransportError(
                stmt.operation,
                "Cannot execute this query as it might involve data filtering and thus may "
                "have unpredictable performance. If you want to execute this query despite "
                "the performance unpredictability, use ALLOW FILTERING",
                400,
            )

    def _matches(self, row: dict[str, Any], cond: Condition) -> bool:
        if cond.key is not None:
            entries = row.get(cond.column) or {}
            return entries.get(cond.key) == cond.value
        return row.get(cond.column) == cond.value

    def _select(self, table: _Table, stmt: Statement) -> list[Row]:
        self._check_restrictions(stmt)
        now = self._clock()
        results: list[Row] = []
        for key in sorted(table):
            row = table[key]
            if self._expired(row, now):
                continue
            if all(self._matches(row, cond) for cond in stmt.where):
                results.append({c: _cell(row.get(c)) for c in stmt.columns})
        return results

    def _delete(self, table: _Table, stmt: Statement) -> None:
        columns = {c.column for c in stmt.where}
        if not set(_PARTITION_KEY).issubset(columns) or not columns.issubset(_KEY_COLUMNS):
            raise TransportError(
                stmt.operation, "DELETE requires the full partition key and key columns only", 400
            )
        doomed = [k for k, row in table.items() if all(self._matches(row, c) for c in stmt.where)]
        for key in doomed:
            del table[key]


def _cell(value: Any) -> Any:
    if value is None or isinstance(value, (str, dict)):
        return value
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)
