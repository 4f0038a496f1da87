"""Schema tags, capability protocols and key helpers."""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Protocol, Union

KeyPart = Union[str, int, uuid.UUID]
Key = Union[KeyPart, Sequence[KeyPart]]

COMPOSITE_KEY_SEPARATOR = "."


@dataclass(frozen=True)
class SchemaTag:
    """On-disk schema generation of a type: object name plus integer version."""

    name: str
    version: int

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise TypeError("SchemaTag name must be a non-empty string")
        if isinstance(self.version, bool) or not isinstance(self.version, int):
            raise TypeError("SchemaTag version must be an integer")

    def __str__(self) -> str:
        return f"{self.name}@v{self.version}"


class SchemaVersioned(Protocol):
    """Types that declare their stored schema generation.

    Example::

        class PersonV1(BaseModel):
            schema_version: ClassVar[SchemaTag] = SchemaTag("Person", 1)
            name: str
    """

    schema_version: ClassVar[SchemaTag]


def schema_tag(as_type: type[Any]) -> SchemaTag | None:
    """Return the declared schema tag of a type, or None when it declares none.

    A ``(name, version)`` tuple is accepted in place of a SchemaTag.
    """
    declared = getattr(as_type, "schema_version", None)
    if declared is None:
        return None
    if isinstance(declared, SchemaTag):
        return declared
    if isinstance(declared, tuple) and len(declared) == 2:
        return SchemaTag(declared[0], declared[1])
    raise TypeError(
        f"{getattr(as_type, '__name__', as_type)}.schema_version must be a SchemaTag "
        f"or a (name, version) tuple, got {declared!r}"
    )


def _key_part(part: KeyPart) -> str:
    if isinstance(part, bool):
        raise TypeError("Boolean values cannot be used as key parts")
    if isinstance(part, uuid.UUID):
        return str(part)
    if isinstance(part, (str, int)):
        return str(part)
    raise TypeError(f"Unsupported key part type: {type(part).__name__}")


def composite_key(*parts: KeyPart) -> str:
    """Join key parts into one stored id."""
    if not parts:
        raise ValueError("A composite key needs at least one part")
    return COMPOSITE_KEY_SEPARATOR.join(_key_part(p) for p in parts)


def normalize_key(key: Key) -> str:
    """Convert a single or composite key into the stored id string."""
    if isinstance(key, (str, int, uuid.UUID)):
        return _key_part(key)
    return composite_key(*key)
