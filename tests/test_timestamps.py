"""Tests for ISO-8601 timestamp parsing."""

import pytest

from common.timestamps import epoch_ms_from_iso8601


@pytest.mark.parametrize("value,expected", [
    # GitHub
    ("1970-01-01T00:00:01Z", 1000),
    ("1970-01-01T00:00:01z", 1000),
    # git for-each-ref creatordate:iso-strict
    ("1970-01-01T01:00:00+01:00", 0),
    ("1969-12-31T19:00:05-05:00", 5000),
    # Bitbucket
    ("1970-01-01T00:00:01.250000+00:00", 1250),
    ("1970-01-01T00:00:00.500Z", 500),
    # naive values are UTC
    ("1970-01-01T00:00:00", 0),
    ("1970-01-02", 86_400_000),
])
def test_parses_platform_formats(value, expected):
    assert epoch_ms_from_iso8601(value) == expected


@pytest.mark.parametrize("value", [None, "", "   ", "yesterday", "2024-13-01T00:00:00Z", 42])
def test_unparseable_values(value):
    assert epoch_ms_from_iso8601(value) is None


def test_offsets_order_by_instant():
    later_local = epoch_ms_from_iso8601("2024-01-01T10:00:00+02:00")
    earlier_utc = epoch_ms_from_iso8601("2024-01-01T09:00:00Z")
    assert later_local < earlier_utc
