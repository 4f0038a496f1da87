"""JSON codec for stored objects, built on pydantic TypeAdapters."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, TypeVar

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from astrastore.errors import DecodingError, EncodingError
from astrastore.types import SchemaTag, schema_tag

__all__ = ["encode", "decode", "schema_tag", "SchemaTag"]

T = TypeVar("T")


@lru_cache(maxsize=256)
def _adapter(as_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(as_type)


def _type_name(as_type: Any) -> str:
    return getattr(as_type, "__name__", None) or repr(as_type)


def encode(obj: Any) -> str:
    """Serialize an object to compact JSON text.

    Fields are emitted in declaration order, so equal objects encode to equal text.
    """
    obj_type = type(obj)
    try:
        return _adapter(obj_type).dump_json(obj).decode("utf-8")
    except (PydanticSchemaGenerationError, PydanticSerializationError, TypeError) as e:
        raise EncodingError(_type_name(obj_type), str(e)) from e


def decode(text: str | bytes, as_type: type[T]) -> T:
    """Parse JSON text into ``as_type``, validating it on the way."""
    try:
        adapter = _adapter(as_type)
    except PydanticSchemaGenerationError as e:
        raise DecodingError(_type_name(as_type), str(e)) from e
    try:
        return adapter.validate_json(text)
    except ValidationError as e:
        raise DecodingError(_type_name(as_type), str(e)) from e
