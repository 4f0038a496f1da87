"""Tests for astra truncate command."""

from tests.cli.conftest import invoke


def test_truncate_requires_yes(runner, seeded_store):
    result = invoke(runner, ["truncate"])
    assert result.exit_code == 2
    assert "--yes" in result.output
    assert seeded_store.transport.row_count("tests") == 4


def test_truncate(runner, seeded_store):
    result = invoke(runner, ["truncate", "--yes"])
    assert result.exit_code == 0
    assert "Truncated tests.data" in result.output
    assert seeded_store.transport.row_count("tests") == 0


def test_truncate_backend_error(runner, cli_store):
    result = invoke(runner, ["truncate", "--yes"])
    assert result.exit_code == 3
