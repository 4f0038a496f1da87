"""Statement transports: the Transport contract and the Astra REST implementation."""

from __future__ import annotations

import logging
import threading
from typing import Any, Protocol, runtime_checkable

import httpx

from astrastore.config import AstraConfig
from astrastore.errors import TransportError
from astrastore.query import Statement, compile_statement, render_statement

logger = logging.getLogger(__name__)

Row = dict[str, Any]

__all__ = ["Row", "Transport", "StatementStats", "HttpTransport"]


@runtime_checkable
class Transport(Protocol):
    """Executes one statement per call and blocks until the backend answers.

    Implementations raise TransportError on any failure and return the result
    rows (empty for writes).
    """

    def execute(self, statement: Statement) -> list[Row]: ...

    def close(self) -> None: ...


class StatementStats:
    """Thread-safe count of executed statements keyed by their compiled CQL."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: dict[str, int] = {}

    def record(self, statement: Statement) -> None:
        cql, _ = compile_statement(statement)
        with self._lock:
            self._counts[cql] = self._counts.get(cql, 0) + 1

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counts)

    def total(self) -> int:
        with self._lock:
            return sum(self._counts.values())


def _coerce_cell(value: Any) -> Any:
    """Row cells come back as text; maps stay maps."""
    if value is None or isinstance(value, (str, dict)):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def parse_rows(payload: Any) -> list[Row]:
    """Extract rows from a ``{"count": n, "data": [...]}`` response body."""
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object, got {type(payload).__name__}")
    count = payload.get("count", 0)
    data = payload.get("data") or []
    if not count or not isinstance(data, list):
        return []
    rows: list[Row] = []
    for item in data:
        if isinstance(item, dict):
            rows.append({str(k): _coerce_cell(v) for k, v in item.items()})
    return rows


class HttpTransport:
    """Posts rendered CQL to an Astra REST ``cql`` endpoint."""

    def __init__(
        self,
        config: AstraConfig,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self.url = config.url
        headers = {"Content-Type": "text/plain"}
        if config.token:
            headers["x-cassandra-token"] = config.token
        self._client = client or httpx.Client(timeout=config.request_timeout_s)
        self._headers = headers

    def execute(self, statement: Statement) -> list[Row]:
        body = render_statement(statement)
        operation = statement.operation
        logger.debug("Executing %s: %s", operation, body)
        try:
            response = self._client.post(
                self.url, content=body.encode("utf-8"), headers=self._headers
            )
        except httpx.HTTPError as e:
            raise TransportError(operation, str(e)) from e

        if response.status_code > 299:
            detail = response.text.strip() or "request failed"
            raise TransportError(operation, detail, response.status_code)

        if statement.op != "SELECT":
            return []
        try:
            return parse_rows(response.json())
        except ValueError as e:
            raise TransportError(
                operation, f"Malformed response body: {e}", response.status_code
            ) from e

    def close(self) -> None:
        self._client.close()
