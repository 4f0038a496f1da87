"""Tests for CLI filter token parsing."""

import pytest

from astrastore.cli._filters import parse_cli_filters


def test_no_tokens():
    assert parse_cli_filters(None) is None
    assert parse_cli_filters([]) is None


def test_pairs():
    assert parse_cli_filters(["age=41", "senior=true"]) == {"age": "41", "senior": "true"}


def test_value_may_contain_equals():
    assert parse_cli_filters(["expr=a=b"]) == {"expr": "a=b"}


def test_empty_value_allowed():
    assert parse_cli_filters(["name="]) == {"name": ""}


def test_last_repeat_wins():
    assert parse_cli_filters(["age=1", "age=2"]) == {"age": "2"}


@pytest.mark.parametrize("token", ["age", "=41", " =x"])
def test_invalid(token):
    with pytest.raises(ValueError, match="NAME=VALUE"):
        parse_cli_filters([token])
