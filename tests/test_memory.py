"""Tests for the in-memory transport's table rules."""

from __future__ import annotations

import pytest

from astrastore.errors import TransportError
from astrastore.memory import MemoryTransport
from astrastore.query import Condition, Statement, StatementBuilder
from astrastore.transport import Transport
from tests.conftest import KEYSPACE


@pytest.fixture
def statements():
    return StatementBuilder(KEYSPACE)


@pytest.fixture
def ready(transport, statements):
    transport.execute(statements.create_table())
    return transport


def _insert(transport, statements, key="k1", ttl=None, filters=None):
    transport.execute(
        statements.insert(
            partition="p",
            area="a",
            key=key,
            value=f'{{"key":"{key}"}}',
            filters=filters or {},
            ttl=ttl,
        )
    )


def test_satisfies_transport_protocol(transport):
    assert isinstance(transport, Transport)


def test_unconfigured_table(transport, statements):
    with pytest.raises(TransportError) as exc_info:
        transport.execute(statements.select_scan(partition="p", area="a"))
    assert exc_info.value.status_code == 400
    assert "unconfigured table" in str(exc_info.value)


def test_create_table_is_idempotent(ready, statements):
    _insert(ready, statements)
    ready.execute(statements.create_table())
    assert ready.row_count(KEYSPACE) == 1


def test_insert_replaces_existing_row(ready, statements):
    _insert(ready, statements, filters={"v": "1"})
    _insert(ready, statements, filters={"v": "2"})
    assert ready.row_count(KEYSPACE) == 1
    rows = ready.execute(statements.select_scan(partition="p", area="a", filters={"v": "2"}))
    assert len(rows) == 1


def test_select_returns_requested_columns(ready, statements):
    _insert(ready, statements)
    rows = ready.execute(statements.select_one(partition="p", area="a", key="k1"))
    assert rows == [{"value": '{"key":"k1"}'}]


def test_updated_is_set(ready, statements):
    _insert(ready, statements)
    stmt = statements.select_one(partition="p", area="a", key="k1", columns=("updated",))
    [row] = ready.execute(stmt)
    assert isinstance(row["updated"], str)


def test_filter_condition_requires_allow_filtering(ready):
    stmt = Statement(
        op="SELECT",
        keyspace=KEYSPACE,
        table="data",
        columns=("value",),
        where=(Condition("partition", "p"), Condition("area", "a"), Condition("filter", "1", "v")),
    )
    with pytest.raises(TransportError, match="ALLOW FILTERING"):
        ready.execute(stmt)


def test_partial_partition_key_requires_allow_filtering(ready):
    stmt = Statement(
        op="SELECT",
        keyspace=KEYSPACE,
        table="data",
        columns=("value",),
        where=(Condition("partition", "p"),),
    )
    with pytest.raises(TransportError, match="ALLOW FILTERING"):
        ready.execute(stmt)


def test_delete_requires_partition_key(ready):
    stmt = Statement(op="DELETE", keyspace=KEYSPACE, table="data", where=(Condition("id", "k1"),))
    with pytest.raises(TransportError):
        ready.execute(stmt)


def test_ttl_rows_expire(ready, statements, clock):
    _insert(ready, statements, key="short", ttl=5)
    _insert(ready, statements, key="forever")
    assert ready.row_count(KEYSPACE) == 2

    clock.advance(4)
    assert ready.row_count(KEYSPACE) == 2
    clock.advance(2)
    assert ready.row_count(KEYSPACE) == 1
    rows = ready.execute(statements.select_scan(partition="p", area="a", columns=("id",)))
    assert rows == [{"id": "forever"}]


def test_truncate_clears_rows(ready, statements):
    _insert(ready, statements, key="a")
    _insert(ready, statements, key="b")
    ready.execute(statements.truncate())
    assert ready.row_count(KEYSPACE) == 0


def test_history_is_bounded():
    transport = MemoryTransport(history_size=2)
    statements = StatementBuilder(KEYSPACE)
    for _ in range(3):
        transport.execute(statements.create_table())
    assert len(transport.history) == 2
