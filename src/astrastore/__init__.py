"""astrastore: a partitioned document store over a wide-column table."""

__version__ = "0.1.0"

from astrastore.codec import decode, encode
from astrastore.config import AstraConfig
from astrastore.errors import (
    AstraStoreError,
    ConfigurationError,
    DecodingError,
    EncodingError,
    MigrationError,
    SchemaUnavailableError,
    TransportError,
)
from astrastore.filters import Filter, Filterable, FilterKind
from astrastore.memory import MemoryTransport
from astrastore.migration import MigrationResult, Migrator, load_migrations, migration
from astrastore.provider import AstraProvider
from astrastore.storage import RecordStore, open_store
from astrastore.transport import HttpTransport, Transport
from astrastore.types import SchemaTag, SchemaVersioned, composite_key, schema_tag

__all__ = [
    "__version__",
    "AstraConfig",
    "AstraProvider",
    "RecordStore",
    "open_store",
    "Transport",
    "HttpTransport",
    "MemoryTransport",
    "Filter",
    "FilterKind",
    "Filterable",
    "SchemaTag",
    "SchemaVersioned",
    "schema_tag",
    "composite_key",
    "encode",
    "decode",
    "migration",
    "load_migrations",
    "Migrator",
    "MigrationResult",
    "AstraStoreError",
    "ConfigurationError",
    "EncodingError",
    "DecodingError",
    "TransportError",
    "SchemaUnavailableError",
    "MigrationError",
]
