"""Schema migration: rewrite every record of one schema generation into the next."""

from __future__ import annotations

import importlib
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Optional, TypeVar

from astrastore.codec import decode
from astrastore.errors import (
    DecodingError,
    EncodingError,
    MigrationError,
    SchemaUnavailableError,
    TransportError,
)
from astrastore.storage import RecordStore
from astrastore.types import SchemaTag, schema_tag

logger = logging.getLogger(__name__)

S = TypeVar("S")
D = TypeVar("D")

Transform = Callable[[S], Optional[D]]

__all__ = [
    "migration",
    "load_migrations",
    "MigrationSpec",
    "MigrationResult",
    "Migrator",
]


# --- Migration decorator ---


@dataclass(frozen=True)
class MigrationSpec:
    """A registered transform from one schema-tagged type to another."""

    from_type: type[Any]
    to_type: type[Any]
    transform: Callable[[Any], Any]

    @property
    def source(self) -> SchemaTag:
        return _require_tag(self.from_type)

    @property
    def target(self) -> SchemaTag:
        return _require_tag(self.to_type)


def migration(from_type: type[Any], to_type: type[Any]) -> Callable[..., Any]:
    """Decorator marking a function as the transform from ``from_type`` to ``to_type``.

    The function receives a decoded ``from_type`` and returns a ``to_type``, or
    None to retire the record.

    Example::

        @migration(PersonV1, PersonV2)
        def split_name(old: PersonV1) -> PersonV2 | None:
            forename, _, surname = (old.name or "").partition(" ")
            return PersonV2(id=old.id, forename=forename, surname=surname, age=old.age)
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        _require_distinct_tags(from_type, to_type)
        spec = MigrationSpec(from_type, to_type, func)
        func._astrastore_migration = spec  # type: ignore[attr-defined]
        return func

    return decorator


def load_migrations(module_path: str) -> dict[SchemaTag, MigrationSpec]:
    """Import a module and collect all @migration-decorated functions.

    Returns a dict keyed by source schema tag.
    Raises MigrationError when two transforms claim the same source tag.
    """
    module = importlib.import_module(module_path)
    registry: dict[SchemaTag, MigrationSpec] = {}

    for attr_name in dir(module):
        spec = getattr(getattr(module, attr_name), "_astrastore_migration", None)
        if not isinstance(spec, MigrationSpec):
            continue
        existing = registry.get(spec.source)
        if existing is not None and existing.transform is not spec.transform:
            raise MigrationError(
                f"Duplicate migration for {spec.source}: "
                f"{existing.transform.__qualname__} and {spec.transform.__qualname__}"
            )
        registry[spec.source] = spec

    return registry


def _require_tag(as_type: type[Any]) -> SchemaTag:
    tag = schema_tag(as_type)
    if tag is None:
        raise SchemaUnavailableError(getattr(as_type, "__name__", repr(as_type)))
    return tag


def _require_distinct_tags(from_type: type[Any], to_type: type[Any]) -> tuple[SchemaTag, SchemaTag]:
    source = _require_tag(from_type)
    target = _require_tag(to_type)
    if source == target:
        raise MigrationError(
            f"Migration source and target share schema tag {source}; "
            "migrated rows would be selected again"
        )
    return source, target


# --- Results ---


@dataclass
class MigrationResult:
    """Outcome of one migration pass."""

    source: SchemaTag | None = None
    target: SchemaTag | None = None
    selected: int = 0
    migrated: int = 0
    retired: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    duration_s: float = 0.0

    @property
    def success(self) -> bool:
        return self.failed == 0 and not self.errors


# --- Engine ---


class Migrator:
    """Runs migrations over a RecordStore.

    One pass selects every record tagged with the source schema, decodes it,
    applies the transform and writes the result back under the same
    ``(partition, area, id)``. The new record carries the target tag, so a
    rerun of the same migration does not see it again. Records that fail to
    decode are skipped; a backend failure on one record is counted and the
    pass moves on. A transform that returns the wrong type stops the pass
    with a MigrationError whose ``result`` holds the counts so far. The pass
    as a whole is not atomic.
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def preview(self, from_type: type[Any]) -> int:
        """Number of records the next migration from ``from_type`` would select."""
        return len(self.store.schema_rows(_require_tag(from_type)))

    def migrate(
        self,
        from_type: type[S],
        to_type: type[D],
        transform: Transform[S, D],
    ) -> MigrationResult:
        source, target = _require_distinct_tags(from_type, to_type)
        started = time.monotonic()
        result = MigrationResult(source=source, target=target)

        rows = self.store.schema_rows(source)
        result.selected = len(rows)
        logger.info("Migrating %d record(s) from %s to %s", len(rows), source, target)

        for row in rows:
            if row.value is None:
                result.skipped += 1
                continue
            try:
                old = decode(row.value, from_type)
            except DecodingError as e:
                logger.warning(
                    "Skipping undecodable %s record %s/%s/%s: %s",
                    source,
                    row.partition,
                    row.area,
                    row.key,
                    e,
                )
                result.skipped += 1
                continue

            new = transform(old)
            if new is not None and not isinstance(new, to_type):
                message = (
                    f"Migration to {to_type.__name__} returned {type(new).__name__} "
                    f"for record {row.partition}/{row.area}/{row.key}"
                )
                result.failed += 1
                result.errors.append(message)
                result.duration_s = time.monotonic() - started
                raise MigrationError(message, result)

            try:
                if new is None:
                    self.store.delete(row.partition, row.key, row.area)
                    result.retired += 1
                else:
                    # no caller filters, so the new object's own are stored
                    self.store.put(row.partition, row.key, row.area, new, ttl=None)
                    result.migrated += 1
            except (TransportError, EncodingError) as e:
                logger.warning(
                    "Failed to migrate record %s/%s/%s: %s", row.partition, row.area, row.key, e
                )
                result.failed += 1
                result.errors.append(f"{row.partition}/{row.area}/{row.key}: {e}")

        result.duration_s = time.monotonic() - started
        logger.info(
            "Migration %s -> %s done: %d migrated, %d retired, %d skipped, %d failed",
            source,
            target,
            result.migrated,
            result.retired,
            result.skipped,
            result.failed,
        )
        return result

    def run_all(self, registry: dict[SchemaTag, MigrationSpec]) -> list[MigrationResult]:
        """Apply registered migrations ordered by source ``(name, version)``.

        Chains such as v1 -> v2 -> v3 finish in one call because each step
        runs after the one that produces its input.
        """
        ordered = sorted(registry.values(), key=lambda s: (s.source.name, s.source.version))
        return [self.migrate(s.from_type, s.to_type, s.transform) for s in ordered]
