"""Tests for semver helpers on tag names."""

from versioning.semver import is_semver, parse_semver, sort_tags_by_semver


def test_is_semver_accepts_optional_v_prefix():
    assert is_semver("1.2.3")
    assert is_semver("v1.2.3")
    assert is_semver("V1.2.3")
    assert is_semver("1.2.3-alpha.1+build.5")


def test_is_semver_rejects_partial_and_extended_versions():
    assert not is_semver("1.2")
    assert not is_semver("1.2.3.4")
    assert not is_semver("3.23-bae0df8a-ls3")
    assert not is_semver("release-1")
    assert not is_semver("")


def test_parse_semver_strips_prefix():
    version = parse_semver("v2.0.1")
    assert version is not None
    assert (version.major, version.minor, version.patch) == (2, 0, 1)


def test_sort_by_precedence_descending():
    tags = ["1.2.3", "1.10.0", "v2.0.0", "2.0.0-rc.1", "1.2.3-alpha"]
    assert sort_tags_by_semver(tags) == ["v2.0.0", "2.0.0-rc.1", "1.10.0", "1.2.3", "1.2.3-alpha"]


def test_sort_drops_non_semver_names():
    assert sort_tags_by_semver(["edge", "1.0.0", "3.23-ls3"]) == ["1.0.0"]


def test_sort_ties_keep_input_order():
    """Build metadata does not affect precedence; input order breaks ties."""
    assert sort_tags_by_semver(["1.0.0+b", "v1.0.0", "1.0.0+a"]) == ["1.0.0+b", "v1.0.0", "1.0.0+a"]
