"""Tests for repository reference parsing."""

import os

import pytest

from repository.url_normalize import is_remote_url, parse_repository, to_https_url, url_origin


@pytest.mark.parametrize("value,expected", [
    ("https://github.com/o/r", True),
    ("http://gitea.local/o/r", True),
    ("git@github.com:o/r.git", True),
    ("o/r", False),
    ("/srv/repo", False),
])
def test_is_remote_url(value, expected):
    assert is_remote_url(value) is expected


def test_to_https_url():
    assert to_https_url("git@gitea.example.com:team/app.git") == "https://gitea.example.com/team/app.git"
    assert to_https_url("https://github.com/o/r") == "https://github.com/o/r"


def test_url_origin():
    assert url_origin("https://git.example.com:3000/o/r.git") == "https://git.example.com:3000"
    assert url_origin("git@github.com:o/r.git") == "https://github.com"
    assert url_origin("not a url") is None


class TestParseRepository:
    """parse_repository."""

    def test_https_url(self):
        info = parse_repository("https://github.com/octo/widgets.git")
        assert (info.owner, info.repo, info.url, info.path) == (
            "octo", "widgets", "https://github.com/octo/widgets.git", None
        )
        assert info.platform == "auto"

    def test_ssh_url(self):
        info = parse_repository("git@bitbucket.org:acme/tool.git")
        assert (info.owner, info.repo) == ("acme", "tool")
        assert info.url == "git@bitbucket.org:acme/tool.git"

    def test_url_without_repo_path(self):
        assert parse_repository("https://github.com/onlyowner") is None

    def test_owner_repo(self):
        info = parse_repository("octo/widgets")
        assert (info.owner, info.repo, info.url, info.path) == ("octo", "widgets", None, None)

    def test_relative_path(self, tmp_path):
        info = parse_repository("./checkout", cwd=str(tmp_path))
        assert info.path == os.path.join(str(tmp_path), "checkout")
        assert info.is_local_only

    def test_absolute_path(self):
        info = parse_repository("/srv/git/repo")
        assert info.path == "/srv/git/repo"
        assert not info.owner

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty(self, value):
        assert parse_repository(value) is None
