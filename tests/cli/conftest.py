"""Shared fixtures for CLI tests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from astrastore import MemoryTransport, RecordStore
from astrastore.cli import app

# Reuse the record types from the main test package
from tests.conftest import KEYSPACE
from tests.models import Person, PersonV1

if TYPE_CHECKING:
    from click.testing import Result


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("URL", "TOKEN", "KEYSPACE", "TABLE", "TIMEOUT"):
        monkeypatch.delenv(f"ASTRA_DB_{name}", raising=False)


@pytest.fixture(autouse=True)
def drop_cli_log_handler():
    """The CLI installs a stderr handler bound to the runner's stream."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if handler.name == "default":
            root.removeHandler(handler)


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def opened_configs():
    return []


@pytest.fixture
def cli_store(monkeypatch, opened_configs):
    """In-memory store every CLI command in the test shares."""
    store = RecordStore(MemoryTransport(), keyspace=KEYSPACE)

    def fake_open_store(config, **kwargs):
        opened_configs.append(config)
        return store

    monkeypatch.setattr("astrastore.cli._storage.open_store", fake_open_store)
    return store


@pytest.fixture
def seeded_store(cli_store):
    """Store with a few people in partition ``team`` / area ``person``."""
    cli_store.ensure_table()
    people = [
        ("adrian", Person(name="Adrian", age=41), {"senior": True, "age": 41}),
        ("neil", Person(name="Neil", age=38), {"senior": True, "age": 38}),
        ("sarah", Person(name="Sarah", age=28), {"senior": False, "age": 28}),
    ]
    for key, person, filters in people:
        cli_store.put("team", key, "person", person, filters=filters)
    cli_store.put("team", "legacy", "person", PersonV1(name="Legacy Person", age=60))
    return cli_store


def invoke(runner: CliRunner, args: list[str], url: str | None = "memory://") -> "Result":
    """Invoke CLI with a backend URL injected before the subcommand."""
    if url:
        args = ["--url", url, "--keyspace", KEYSPACE] + args
    result = runner.invoke(app, args, catch_exceptions=False)
    return result
