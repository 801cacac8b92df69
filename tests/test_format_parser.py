"""Tests for tag-format input parsing."""

import pytest

from common.errors import ConfigurationError
from versioning.format_parser import parse_tag_format


def test_empty_values():
    assert parse_tag_format(None) is None
    assert parse_tag_format("") is None
    assert parse_tag_format("   ") is None
    assert parse_tag_format([]) is None


def test_single_pattern():
    assert parse_tag_format(" X.X.X ") == ["X.X.X"]


def test_json_array():
    assert parse_tag_format('["X.X.X", "X.X", ""]') == ["X.X.X", "X.X"]


def test_list_input_flattens_json_entries():
    assert parse_tag_format(["vX.X.X", '["X.X.X", "X.X"]']) == ["vX.X.X", "X.X.X", "X.X"]


def test_bracket_regex_is_kept_as_pattern():
    assert parse_tag_format("[0-9]+\\.[0-9]+") == ["[0-9]+\\.[0-9]+"]


def test_json_array_must_hold_strings():
    with pytest.raises(ConfigurationError):
        parse_tag_format("[1, 2]")


def test_non_string_value_rejected():
    with pytest.raises(ConfigurationError):
        parse_tag_format(42)
