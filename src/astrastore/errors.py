"""Structured error types for astrastore."""

from __future__ import annotations

from typing import Any


class AstraStoreError(Exception):
    """Base error for all astrastore errors."""


class ConfigurationError(AstraStoreError):
    """Raised when the store configuration or storage target is invalid."""


class EncodingError(AstraStoreError):
    """Raised when an object cannot be serialized to its stored text form."""

    def __init__(self, type_name: str, detail: str) -> None:
        self.type_name = type_name
        self.detail = detail
        super().__init__(f"Cannot encode {type_name}: {detail}")


class DecodingError(AstraStoreError):
    """Raised when a stored payload is malformed or does not match the requested type."""

    def __init__(self, type_name: str, detail: str) -> None:
        self.type_name = type_name
        self.detail = detail
        super().__init__(f"Cannot decode {type_name}: {detail}")


class TransportError(AstraStoreError):
    """Raised when a statement round trip to the backend fails."""

    def __init__(self, operation: str, detail: str, status_code: int | None = None) -> None:
        self.operation = operation
        self.detail = detail
        self.status_code = status_code
        status = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"Backend error during {operation}{status}: {detail}")


class SchemaUnavailableError(AstraStoreError):
    """Raised when a migration is requested for a type without a schema tag."""

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name
        super().__init__(
            f"Type '{type_name}' does not declare a schema_version; "
            "migration is unavailable for it."
        )


class MigrationError(AstraStoreError):
    """Raised when a migration is misconfigured or its transform misbehaves.

    When a pass stops part way, ``result`` holds the counts up to that point.
    """

    def __init__(self, message: str, result: Any = None) -> None:
        self.result = result
        super().__init__(message)
