"""Configuration for astrastore providers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlparse

from astrastore.errors import ConfigurationError

MEMORY_URL = "memory://"


@dataclass
class AstraConfig:
    """Connection and table settings, fixed at construction."""

    url: str = MEMORY_URL
    token: str | None = None
    keyspace: str = "astrastore"
    table: str = "data"
    request_timeout_s: float = 10.0
    default_partition: str = "default"
    create_table: bool = True

    @classmethod
    def from_env(cls, **overrides: object) -> AstraConfig:
        """Build a config from ``ASTRA_DB_*`` environment variables.

        Keyword overrides that are not ``None`` win over the environment.
        """
        values: dict[str, object] = {}
        url = os.getenv("ASTRA_DB_URL")
        if url:
            values["url"] = url
        token = os.getenv("ASTRA_DB_TOKEN")
        if token:
            values["token"] = token
        keyspace = os.getenv("ASTRA_DB_KEYSPACE")
        if keyspace:
            values["keyspace"] = keyspace
        table = os.getenv("ASTRA_DB_TABLE")
        if table:
            values["table"] = table
        timeout = os.getenv("ASTRA_DB_TIMEOUT")
        if timeout:
            try:
                values["request_timeout_s"] = float(timeout)
            except ValueError as e:
                raise ConfigurationError(f"Invalid ASTRA_DB_TIMEOUT '{timeout}'") from e
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)  # type: ignore[arg-type]


@dataclass(frozen=True)
class StorageTarget:
    """Resolved backend for a configured URL."""

    backend: str
    url: str


def parse_storage_target(url: str) -> StorageTarget:
    """Resolve ``http(s)://`` URLs to the REST backend and ``memory://`` to the in-memory one."""
    parsed = urlparse(url)
    if parsed.scheme == "memory":
        return StorageTarget(backend="memory", url=url)
    if parsed.scheme in ("http", "https"):
        if not parsed.netloc:
            raise ConfigurationError(f"Invalid backend URL: {url}")
        return StorageTarget(backend="rest", url=url)
    raise ConfigurationError(f"Unsupported backend URL scheme '{parsed.scheme}' for '{url}'")
