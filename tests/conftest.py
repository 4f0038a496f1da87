"""Shared test fixtures for astrastore tests."""

from __future__ import annotations

import uuid

import pytest

from astrastore import AstraConfig, AstraProvider, MemoryTransport, RecordStore

KEYSPACE = "tests"


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport(clock):
    """In-memory transport driven by the fake clock."""
    return MemoryTransport(clock=clock)


@pytest.fixture
def store(transport):
    """RecordStore with its table created."""
    s = RecordStore(transport, keyspace=KEYSPACE)
    s.ensure_table()
    yield s
    s.close()


@pytest.fixture
def provider(transport):
    """Opened AstraProvider over the in-memory transport."""
    p = AstraProvider(AstraConfig(keyspace=KEYSPACE), transport=transport)
    assert p.open()
    yield p
    p.close()


@pytest.fixture
def partition():
    """A fresh partition name per test."""
    return uuid.uuid4().hex[:8]
