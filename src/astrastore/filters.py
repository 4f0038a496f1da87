"""Filter predicates: named, typed values stored in the record's filter map."""

from __future__ import annotations

import datetime as dt
import uuid
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, Union, runtime_checkable

__all__ = [
    "Filter",
    "FilterKind",
    "Filterable",
    "FilterInput",
    "normalize_filters",
    "object_filters",
    "resolve_put_filters",
]


class FilterKind(str, Enum):
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    UUID = "uuid"
    DATE = "date"


def _matches_kind(kind: FilterKind, value: Any) -> bool:
    if kind is FilterKind.BOOL:
        return isinstance(value, bool)
    if kind is FilterKind.INT:
        return isinstance(value, int) and not isinstance(value, bool)
    if kind is FilterKind.FLOAT:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if kind is FilterKind.STRING:
        return isinstance(value, str)
    if kind is FilterKind.UUID:
        return isinstance(value, uuid.UUID)
    return isinstance(value, (dt.date, dt.datetime))


@dataclass(frozen=True)
class Filter:
    """A named, typed predicate value.

    Used at write time to tag a record and at read time as an equality
    condition. Every kind collapses to a string before it reaches storage::

        Filter.bool("active", True).storage_value() == "true"
        Filter.int("age", 41).storage_value() == "41"
    """

    name: str
    kind: FilterKind
    value: Any

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("Filter name must be a non-empty string")
        if not _matches_kind(self.kind, self.value):
            raise TypeError(
                f"Filter '{self.name}' of kind {self.kind.value} "
                f"cannot hold {type(self.value).__name__} value {self.value!r}"
            )

    @classmethod
    def string(cls, name: str, value: str) -> Filter:
        return cls(name, FilterKind.STRING, value)

    @classmethod
    def int(cls, name: str, value: int) -> Filter:
        return cls(name, FilterKind.INT, value)

    @classmethod
    def float(cls, name: str, value: float) -> Filter:
        return cls(name, FilterKind.FLOAT, value)

    @classmethod
    def bool(cls, name: str, value: bool) -> Filter:
        return cls(name, FilterKind.BOOL, value)

    @classmethod
    def uuid(cls, name: str, value: uuid.UUID) -> Filter:
        return cls(name, FilterKind.UUID, value)

    @classmethod
    def date(cls, name: str, value: dt.date) -> Filter:
        return cls(name, FilterKind.DATE, value)

    @classmethod
    def of(cls, name: str, value: Any) -> Filter:
        """Build a filter, inferring the kind from the Python value."""
        if isinstance(value, Filter):
            return cls(name, value.kind, value.value)
        if isinstance(value, bool):
            return cls(name, FilterKind.BOOL, value)
        if isinstance(value, int):
            return cls(name, FilterKind.INT, value)
        if isinstance(value, float):
            return cls(name, FilterKind.FLOAT, value)
        if isinstance(value, str):
            return cls(name, FilterKind.STRING, value)
        if isinstance(value, uuid.UUID):
            return cls(name, FilterKind.UUID, value)
        if isinstance(value, (dt.date, dt.datetime)):
            return cls(name, FilterKind.DATE, value)
        raise TypeError(f"Unsupported filter value type for '{name}': {type(value).__name__}")

    def storage_value(self) -> str:
        """Render the value as it is written to and matched in the filter map."""
        if self.kind is FilterKind.BOOL:
            return "true" if self.value else "false"
        if self.kind is FilterKind.FLOAT:
            return repr(float(self.value))
        if self.kind is FilterKind.DATE:
            return self.value.isoformat()
        return str(self.value)


FilterInput = Union[Mapping[str, Any], Iterable[Filter], None]


@runtime_checkable
class Filterable(Protocol):
    """Objects that describe themselves with filter predicates."""

    def filter_predicates(self) -> Sequence[Filter]: ...


def normalize_filters(filters: FilterInput) -> dict[str, str]:
    """Collapse caller filters into the stored ``name -> string`` map.

    Accepts a mapping of names to plain values or Filter objects, or an
    iterable of Filter. A repeated name keeps its last value.
    """
    if filters is None:
        return {}
    if isinstance(filters, Mapping):
        predicates = [Filter.of(name, value) for name, value in filters.items()]
    else:
        predicates = list(filters)
    result: dict[str, str] = {}
    for predicate in predicates:
        if not isinstance(predicate, Filter):
            raise TypeError(f"Expected Filter, got {type(predicate).__name__}")
        result[predicate.name] = predicate.storage_value()
    return result


def object_filters(obj: Any) -> dict[str, str]:
    """Self-declared filters of an object; empty when it is not Filterable."""
    if isinstance(obj, Filterable):
        return normalize_filters(obj.filter_predicates())
    return {}


def resolve_put_filters(caller_filters: FilterInput, obj: Any) -> dict[str, str]:
    """Caller filters win when supplied; otherwise the object's own filters are stored."""
    if caller_filters is not None:
        return normalize_filters(caller_filters)
    return object_filters(obj)
