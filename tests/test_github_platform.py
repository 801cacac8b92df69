"""Tests for the GitHub data source."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from conftest import FakeHttp, ok
from common.http_client import HttpResponse
from constants import Platform
from repository.errors import PlatformError
from repository.models import ItemInfo, ItemType, PlatformConfig, RepositoryInfo
from repository.platforms.github import GitHubAPI, parse_next_link
from versioning.models import DatedItem

REPO = "/repos/octo/widgets"
TAG_SHA = "a" * 40
COMMIT_SHA = "b" * 40


def _api(routes, url=None, token=None):
    http = FakeHttp(routes)
    info = RepositoryInfo(owner="octo", repo="widgets", url=url, platform=Platform.GITHUB)
    api = GitHubAPI(info, PlatformConfig(platform=Platform.GITHUB, token=token), http=http)
    return api, http


def test_parse_next_link():
    header = (
        '<https://api.github.com/repositories/1/tags?per_page=100&page=2>; rel="next", '
        '<https://api.github.com/repositories/1/tags?per_page=100&page=5>; rel="last"'
    )
    assert parse_next_link(header) == "https://api.github.com/repositories/1/tags?per_page=100&page=2"
    assert parse_next_link('<https://x/y?page=1>; rel="prev"') is None
    assert parse_next_link(None) is None


def test_auth_headers_and_default_base():
    api, _ = _api({})
    assert api.base_url == "https://api.github.com"
    assert api.auth_headers("tkn")["Authorization"] == "Bearer tkn"
    assert "Authorization" not in api.auth_headers(None)


class TestTagInfo:
    """get_tag_info."""

    def test_lightweight_tag(self):
        api, _ = _api({f"{REPO}/git/ref/tags/v1.0.0": ok({"object": {"sha": COMMIT_SHA, "type": "commit"}})})
        info = asyncio.run(api.get_tag_info("v1.0.0"))
        assert info == ItemInfo(exists=True, name="v1.0.0", item_sha=COMMIT_SHA, commit_sha=COMMIT_SHA)

    def test_annotated_tag(self):
        api, http = _api({
            f"{REPO}/git/ref/tags/v2.0.0": ok({"object": {"sha": TAG_SHA, "type": "tag"}}),
            f"{REPO}/git/tags/{TAG_SHA}": ok({
                "object": {"sha": COMMIT_SHA, "type": "commit"},
                "message": "Release 2.0.0\n",
                "verification": {"verified": True},
            }),
        })
        info = asyncio.run(api.get_tag_info("v2.0.0"))
        assert info.item_type is ItemType.TAG
        assert info.item_sha == TAG_SHA
        assert info.commit_sha == COMMIT_SHA
        assert info.details == "Release 2.0.0\n"
        assert info.verified is True
        assert http.paths() == [f"{REPO}/git/ref/tags/v2.0.0", f"{REPO}/git/tags/{TAG_SHA}"]

    def test_missing_tag_without_url(self):
        api, _ = _api({})
        info = asyncio.run(api.get_tag_info("nope"))
        assert info == ItemInfo.missing("nope")

    def test_missing_tag_uses_ls_remote(self):
        api, _ = _api({}, url="https://github.com/octo/widgets.git")
        found = ItemInfo(exists=True, name="v9", item_sha=COMMIT_SHA, commit_sha=COMMIT_SHA)
        with patch("repository.platforms.github.ls_remote_tag", new=AsyncMock(return_value=found)) as fallback:
            info = asyncio.run(api.get_tag_info("v9"))
        assert info is found
        fallback.assert_awaited_once()
        assert fallback.await_args.args[:2] == ("v9", "https://github.com/octo/widgets.git")

    def test_server_error_raises(self):
        api, _ = _api({f"{REPO}/git/ref/tags/v1": HttpResponse(status=500, text="boom")})
        with pytest.raises(PlatformError) as excinfo:
            asyncio.run(api.get_tag_info("v1"))
        assert excinfo.value.status == 500
        assert str(excinfo.value).startswith("Failed to get tag info from GitHub: GitHub API error: 500")


class TestReleaseInfo:
    """get_release_info."""

    def test_latest_release(self):
        api, http = _api({
            f"{REPO}/releases/latest": ok({"tag_name": "v3.0.0", "body": "notes", "draft": False, "prerelease": True}),
            f"{REPO}/git/ref/tags/v3.0.0": ok({"object": {"sha": COMMIT_SHA, "type": "commit"}}),
        })
        info = asyncio.run(api.get_release_info("latest"))
        assert info.exists
        assert info.name == "v3.0.0"
        assert info.item_type is ItemType.RELEASE
        assert info.item_sha == COMMIT_SHA
        assert info.commit_sha == COMMIT_SHA
        assert info.details == "notes"
        assert info.is_prerelease is True
        assert info.is_draft is False
        assert http.paths()[0] == f"{REPO}/releases/latest"

    def test_release_without_ref_has_empty_shas(self):
        api, _ = _api({f"{REPO}/releases/tags/v1": ok({"tag_name": "v1", "body": None})})
        info = asyncio.run(api.get_release_info("v1"))
        assert info.exists
        assert info.item_sha == ""
        assert info.commit_sha == ""
        assert info.details == ""

    def test_missing_release(self):
        api, _ = _api({})
        info = asyncio.run(api.get_release_info("v404"))
        assert info == ItemInfo.missing("v404", ItemType.RELEASE)


class TestListings:
    """Paginated listings."""

    def test_tag_names_follow_link_header(self):
        page2 = "https://api.github.com/repositories/1/tags?per_page=100&page=2"
        api, http = _api({
            f"{REPO}/tags": ok([{"name": "v1"}, {"name": "v2"}], {"Link": f'<{page2}>; rel="next"'}),
            page2: ok([{"name": "v3"}, {"name": ""}]),
        })
        assert asyncio.run(api.get_all_tag_names()) == ["v1", "v2", "v3"]
        assert http.calls[0] == (f"{REPO}/tags", {"per_page": 100})
        assert http.calls[1] == (page2, None)

    def test_tags_with_commit_dates(self):
        api, _ = _api({
            f"{REPO}/tags": ok([
                {"name": "v1", "commit": {"sha": "c1"}},
                {"name": "v2", "commit": {"sha": "c2"}},
                {"name": "v3"},
            ]),
            f"{REPO}/git/commits/c1": ok({"committer": {"date": "2023-01-01T00:00:00Z"}}),
            f"{REPO}/git/commits/c2": HttpResponse(status=500, text="err"),
        })
        assert asyncio.run(api.get_all_tags()) == [
            DatedItem("v1", "2023-01-01T00:00:00Z"),
            DatedItem("v2", ""),
            DatedItem("v3", ""),
        ]

    def test_releases_with_dates(self):
        api, _ = _api({
            f"{REPO}/releases": ok([
                {"tag_name": "v2", "published_at": "2024-02-01T00:00:00Z", "created_at": "2024-01-01T00:00:00Z"},
                {"tag_name": "v1", "published_at": None, "created_at": "2023-01-01T00:00:00Z"},
                {"tag_name": None},
            ]),
        })
        assert asyncio.run(api.get_all_releases()) == [
            DatedItem("v2", "2024-02-01T00:00:00Z"),
            DatedItem("v1", "2023-01-01T00:00:00Z"),
        ]
        assert asyncio.run(api.get_all_release_names()) == ["v2", "v1"]

    def test_listing_error_is_wrapped(self):
        api, _ = _api({f"{REPO}/tags": HttpResponse(status=401, text="Bad credentials")})
        with pytest.raises(PlatformError, match="Failed to get tag names from GitHub"):
            asyncio.run(api.get_all_tag_names())


def test_aclose_closes_transport():
    api, http = _api({})
    asyncio.run(api.aclose())
    assert http.closed
