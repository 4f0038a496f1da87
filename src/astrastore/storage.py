"""Record store: put/get/delete/scan over the generic ``(partition, area, id)`` table."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from astrastore.codec import decode, encode
from astrastore.config import AstraConfig, parse_storage_target
from astrastore.errors import DecodingError, EncodingError, TransportError
from astrastore.filters import FilterInput, normalize_filters, resolve_put_filters
from astrastore.query import Statement, StatementBuilder
from astrastore.transport import Row, StatementStats, Transport
from astrastore.types import Key, SchemaTag, normalize_key, schema_tag

logger = logging.getLogger(__name__)

T = TypeVar("T")

__all__ = ["RecordStore", "StoredRow", "open_store"]


@dataclass(frozen=True)
class StoredRow:
    """Raw row selected by a schema scan."""

    partition: str
    area: str
    key: str
    value: str


def _stored_key(key: Key) -> str:
    try:
        return normalize_key(key)
    except (TypeError, ValueError) as e:
        raise EncodingError("key", str(e)) from e


def _stored_filters(filters: FilterInput) -> dict[str, str]:
    try:
        return normalize_filters(filters)
    except (TypeError, ValueError) as e:
        raise EncodingError("filters", str(e)) from e


class RecordStore:
    """Typed access to one record table.

    Every operation is a single blocking statement round trip. Failures raise
    typed errors: ``EncodingError`` when the object, its key or its filters
    cannot be turned into a statement, ``DecodingError`` when a point read
    hits a corrupt payload, and ``TransportError`` when the backend call
    fails. ``get`` returns None only when the record does not exist.

    ``remove_all_records``, ``truncate_table`` and migration touch many rows
    and are not atomic as a whole; a failure part way leaves a mixed table.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        keyspace: str,
        table: str = "data",
        stats: StatementStats | None = None,
    ) -> None:
        self.transport = transport
        self.statements = StatementBuilder(keyspace, table)
        self.stats = stats or StatementStats()

    @property
    def keyspace(self) -> str:
        return self.statements.keyspace

    @property
    def table(self) -> str:
        return self.statements.table

    def _execute(self, statement: Statement) -> list[Row]:
        self.stats.record(statement)
        return self.transport.execute(statement)

    def close(self) -> None:
        self.transport.close()

    # --- writes ---

    def ensure_table(self) -> None:
        """Create the record table if it does not exist yet."""
        self._execute(self.statements.create_table())
        logger.info("Table %s.%s ready", self.keyspace, self.table)

    def put(
        self,
        partition: str,
        key: Key,
        area: str,
        obj: Any,
        *,
        ttl: int | None = None,
        filters: FilterInput = None,
    ) -> None:
        """Write ``obj`` under ``(partition, area, key)``, replacing any existing record.

        Caller ``filters`` are stored when given; otherwise the object's own
        filter predicates are. A positive integer ``ttl`` (seconds) lets the backend
        expire the record.
        """
        value = encode(obj)
        try:
            statement = self.statements.insert(
                partition=partition,
                area=area,
                key=normalize_key(key),
                value=value,
                filters=resolve_put_filters(filters, obj),
                tag=schema_tag(type(obj)),
                ttl=ttl,
            )
        except (TypeError, ValueError) as e:
            raise EncodingError(type(obj).__name__, str(e)) from e
        self._execute(statement)

    def delete(self, partition: str, key: Key, area: str) -> None:
        self._execute(
            self.statements.delete_one(partition=partition, area=area, key=_stored_key(key))
        )

    def remove_all_records(self, partition: str, area: str) -> None:
        """Delete every record in ``(partition, area)``; filters never narrow this."""
        self._execute(self.statements.delete_area(partition=partition, area=area))

    def truncate_table(self) -> None:
        """Delete every record in the table."""
        logger.warning("Truncating table %s.%s", self.keyspace, self.table)
        self._execute(self.statements.truncate())

    # --- reads ---

    def get(self, as_type: type[T], partition: str, key: Key, area: str) -> T | None:
        rows = self._execute(
            self.statements.select_one(partition=partition, area=area, key=_stored_key(key))
        )
        if not rows or rows[0].get("value") is None:
            return None
        return decode(rows[0]["value"], as_type)

    def _scan(
        self,
        partition: str,
        area: str,
        filters: FilterInput,
        columns: tuple[str, ...],
    ) -> list[Row]:
        statement = self.statements.select_scan(
            partition=partition,
            area=area,
            filters=_stored_filters(filters),
            columns=columns,
        )
        return self._execute(statement)

    def all(
        self,
        as_type: type[T],
        partition: str,
        area: str,
        filters: FilterInput = None,
    ) -> list[T]:
        """Decode every record in ``(partition, area)`` that matches all ``filters``.

        A record that fails to decode is logged and left out; the rest of the
        scan is still returned.
        """
        results: list[T] = []
        for row in self._scan(partition, area, filters, ("id", "value")):
            payload = row.get("value")
            if payload is None:
                continue
            try:
                results.append(decode(payload, as_type))
            except DecodingError as e:
                logger.warning(
                    "Skipping corrupt record %s/%s/%s: %s", partition, area, row.get("id"), e
                )
        return results

    def query(
        self,
        as_type: type[T],
        partition: str,
        area: str,
        predicate: Callable[[T], bool],
        filters: FilterInput = None,
    ) -> list[T]:
        """``all`` narrowed by storage-side ``filters``, then by ``predicate`` in process."""
        return [obj for obj in self.all(as_type, partition, area, filters) if predicate(obj)]

    def iterate(
        self,
        as_type: type[T],
        partition: str,
        area: str,
        callback: Callable[[T], None],
        filters: FilterInput = None,
    ) -> None:
        """Load the matching records eagerly, then call ``callback`` for each."""
        for obj in self.all(as_type, partition, area, filters):
            callback(obj)

    def ids(self, partition: str, area: str, filters: FilterInput = None) -> list[str]:
        rows = self._scan(partition, area, filters, ("id",))
        return [row["id"] for row in rows if row.get("id") is not None]

    def schema_rows(self, tag: SchemaTag) -> list[StoredRow]:
        """Every row in the table written with schema tag ``tag``."""
        rows = self._execute(self.statements.select_schema(tag))
        selected: list[StoredRow] = []
        for row in rows:
            try:
                selected.append(
                    StoredRow(
                        partition=row["partition"],
                        area=row["area"],
                        key=row["id"],
                        value=row["value"],
                    )
                )
            except KeyError as e:
                raise TransportError("schema_scan", f"Row is missing column {e}") from e
        return selected


def open_store(config: AstraConfig, *, transport: Transport | None = None) -> RecordStore:
    """Build a RecordStore for the backend named by ``config.url``."""
    if transport is None:
        target = parse_storage_target(config.url)
        if target.backend == "memory":
            from astrastore.memory import MemoryTransport

            transport = MemoryTransport()
        else:
            from astrastore.transport import HttpTransport

            transport = HttpTransport(config)
    return RecordStore(transport, keyspace=config.keyspace, table=config.table)
