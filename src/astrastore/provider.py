"""Host-facing data provider that absorbs failures into plain return values."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Optional, TypeVar

from astrastore.config import AstraConfig
from astrastore.errors import AstraStoreError, MigrationError
from astrastore.filters import FilterInput
from astrastore.migration import MigrationResult, Migrator, Transform
from astrastore.storage import RecordStore, open_store
from astrastore.transport import Transport
from astrastore.types import Key

logger = logging.getLogger(__name__)

T = TypeVar("T")
S = TypeVar("S")
D = TypeVar("D")

ErrorCallback = Callable[[str, AstraStoreError], None]


class AstraProvider:
    """Data provider over a RecordStore for hosts that expect non-raising calls.

    Every public operation converts failures into a neutral value: ``False``
    for writes, ``None`` for ``get`` and an empty list for scans. Such values
    are ambiguous here by contract (``None`` may mean missing, corrupt or
    unreachable). The cause is logged and passed to ``on_error``; callers that
    need to tell the cases apart should use ``provider.store`` directly.

    A partition of None (or empty) falls back to ``config.default_partition``.
    """

    def __init__(
        self,
        config: AstraConfig | None = None,
        *,
        store: RecordStore | None = None,
        transport: Transport | None = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self.config = config or AstraConfig()
        self.store = store or open_store(self.config, transport=transport)
        self.on_error = on_error

    def __enter__(self) -> AstraProvider:
        self.open()
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _partition(self, partition: str | None) -> str:
        return partition or self.config.default_partition

    def _report(self, operation: str, error: AstraStoreError) -> None:
        logger.warning("%s failed: %s", operation, error)
        if self.on_error is not None:
            self.on_error(operation, error)

    # --- lifecycle ---

    def open(self) -> bool:
        """Prepare the backend table when ``config.create_table`` is set."""
        if not self.config.create_table:
            return True
        try:
            self.store.ensure_table()
        except AstraStoreError as e:
            self._report("open", e)
            return False
        return True

    def close(self) -> None:
        self.store.close()

    def transact(self, mode: Any = None) -> bool:
        """The backend has no transactions; accepted and ignored."""
        return True

    # --- operations ---

    def put(
        self,
        partition: str | None,
        key: Key,
        area: str,
        obj: Any,
        *,
        ttl: int | None = None,
        filters: FilterInput = None,
    ) -> bool:
        try:
            self.store.put(self._partition(partition), key, area, obj, ttl=ttl, filters=filters)
        except AstraStoreError as e:
            self._report("put", e)
            return False
        return True

    def get(self, as_type: type[T], partition: str | None, key: Key, area: str) -> T | None:
        try:
            return self.store.get(as_type, self._partition(partition), key, area)
        except AstraStoreError as e:
            self._report("get", e)
            return None

    def delete(self, partition: str | None, key: Key, area: str) -> bool:
        try:
            self.store.delete(self._partition(partition), key, area)
        except AstraStoreError as e:
            self._report("delete", e)
            return False
        return True

    def all(
        self, as_type: type[T], partition: str | None, area: str, filters: FilterInput = None
    ) -> list[T]:
        try:
            return self.store.all(as_type, self._partition(partition), area, filters)
        except AstraStoreError as e:
            self._report("all", e)
            return []

    def query(
        self,
        as_type: type[T],
        partition: str | None,
        area: str,
        predicate: Callable[[T], bool],
        filters: FilterInput = None,
    ) -> list[T]:
        return [obj for obj in self.all(as_type, partition, area, filters) if predicate(obj)]

    def iterate(
        self,
        as_type: type[T],
        partition: str | None,
        area: str,
        callback: Callable[[T], None],
        filters: FilterInput = None,
    ) -> None:
        for obj in self.all(as_type, partition, area, filters):
            callback(obj)

    def ids(self, partition: str | None, area: str, filters: FilterInput = None) -> list[str]:
        try:
            return self.store.ids(self._partition(partition), area, filters)
        except AstraStoreError as e:
            self._report("ids", e)
            return []

    def remove_all_records(self, partition: str | None, area: str) -> bool:
        try:
            self.store.remove_all_records(self._partition(partition), area)
        except AstraStoreError as e:
            self._report("remove_all_records", e)
            return False
        return True

    def truncate_table(self) -> bool:
        try:
            self.store.truncate_table()
        except AstraStoreError as e:
            self._report("truncate_table", e)
            return False
        return True

    def migrate(
        self,
        from_type: type[S],
        to_type: type[D],
        transform: Transform[S, D],
    ) -> MigrationResult:
        """Run one migration pass; failures come back as an unsuccessful result.

        A pass that stopped part way returns its partial counts.
        """
        try:
            return Migrator(self.store).migrate(from_type, to_type, transform)
        except MigrationError as e:
            self._report("migrate", e)
            if isinstance(e.result, MigrationResult):
                return e.result
            return MigrationResult(errors=[str(e)])
        except AstraStoreError as e:
            self._report("migrate", e)
            return MigrationResult(errors=[str(e)])

    def statement_counts(self) -> dict[str, int]:
        """Executed statements by compiled CQL, for diagnostics."""
        return self.store.stats.snapshot()
