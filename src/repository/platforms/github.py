"""GitHub REST data source (github.com and GitHub Enterprise ``/api/v3``)."""
from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

from constants import Constants, Platform
from repository.errors import PlatformError
from repository.git_cli import ls_remote_tag
from repository.models import ItemInfo, ItemType
from repository.providers import RemotePlatformAPI
from versioning.models import DatedItem

_LINK_NEXT_RE = re.compile(r'<([^>]+)>\s*;\s*rel="?next"?')


def parse_next_link(link_header: Optional[str]) -> Optional[str]:
    """Extract the ``rel="next"`` URL from a Link header."""
    if not link_header:
        return None
    for part in link_header.split(","):
        match = _LINK_NEXT_RE.search(part)
        if match:
            return match.group(1)
    return None


class GitHubAPI(RemotePlatformAPI):
    """Tags and releases through the GitHub REST API."""

    platform_name = Platform.GITHUB.value
    display_name = "GitHub"
    default_base_url = Constants.GITHUB_API_BASE
    ref_path = "git/ref/tags"

    def auth_headers(self, token: Optional[str]) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    @property
    def repo_path(self) -> str:
        return f"/repos/{self.repo_info.owner}/{self.repo_info.repo}"

    def _tag_ref_url(self, tag_name: str) -> str:
        return f"{self.repo_path}/{self.ref_path}/{quote(tag_name, safe='/')}"

    async def _get_ref_object(self, tag_name: str, what: str) -> Optional[Dict[str, Any]]:
        """The ``object`` of a tag ref (``sha`` and ``type``), or None when missing."""
        response = await self._get(self._tag_ref_url(tag_name), what, allow_missing=True)
        if response is None:
            return None
        data = response.data
        # Gitea answers the refs endpoint with a list of prefix matches
        if isinstance(data, list):
            wanted = f"refs/tags/{tag_name}"
            data = next((ref for ref in data if isinstance(ref, dict) and ref.get("ref") == wanted), None)
        if not isinstance(data, dict):
            return None
        return data.get("object") or None

    async def _get_tag_object(self, sha: str) -> Optional[Dict[str, Any]]:
        """Annotated tag object, or None when it cannot be fetched."""
        try:
            response = await self.http.get_json(f"{self.repo_path}/git/tags/{sha}")
        except PlatformError as exc:
            self.log.debug("Could not fetch tag object %s: %s", sha, exc)
            return None
        if response.ok and isinstance(response.data, dict):
            return response.data
        self.log.debug("Could not fetch tag object %s (status %s)", sha, response.status)
        return None

    async def _resolve_shas(self, ref_object: Dict[str, Any]) -> Tuple[str, str, Optional[Dict[str, Any]]]:
        """(item sha, commit sha, tag object) for a ref object."""
        item_sha = ref_object.get("sha") or ""
        commit_sha = item_sha
        tag_object = None
        if ref_object.get("type") == "tag" and item_sha:
            tag_object = await self._get_tag_object(item_sha)
            if tag_object:
                commit_sha = (tag_object.get("object") or {}).get("sha") or item_sha
        return item_sha, commit_sha, tag_object

    def _tag_verified(self, tag_object: Dict[str, Any]) -> bool:
        return bool((tag_object.get("verification") or {}).get("verified"))

    async def get_tag_info(self, tag_name: str) -> ItemInfo:
        ref_object = await self._get_ref_object(tag_name, "get tag info")
        if ref_object is None:
            fallback = await ls_remote_tag(tag_name, self.repo_info.url, self.log)
            return fallback or ItemInfo.missing(tag_name)

        item_sha, commit_sha, tag_object = await self._resolve_shas(ref_object)
        if tag_object is None:
            return ItemInfo(exists=True, name=tag_name, item_sha=item_sha, commit_sha=commit_sha)

        return ItemInfo(
            exists=True,
            name=tag_name,
            item_sha=item_sha,
            item_type=ItemType.TAG,
            commit_sha=commit_sha,
            details=tag_object.get("message") or "",
            verified=self._tag_verified(tag_object),
        )

    def _release_url(self, tag_name: str) -> str:
        if tag_name.lower() == Constants.LATEST:
            return f"{self.repo_path}/releases/latest"
        return f"{self.repo_path}/releases/tags/{quote(tag_name, safe='/')}"

    def _release_body(self, release: Dict[str, Any]) -> str:
        return release.get("body") or ""

    def _release_flags(self, release: Dict[str, Any]) -> Tuple[bool, bool]:
        return bool(release.get("draft")), bool(release.get("prerelease"))

    async def get_release_info(self, tag_name: str) -> ItemInfo:
        response = await self._get(self._release_url(tag_name), "get release info", allow_missing=True)
        if response is None or not isinstance(response.data, dict):
            return ItemInfo.missing(tag_name, ItemType.RELEASE)

        release = response.data
        release_tag = release.get("tag_name") or tag_name
        item_sha = commit_sha = ""
        ref_object = await self._get_ref_object(release_tag, "get release tag")
        if ref_object is not None:
            item_sha, commit_sha, _ = await self._resolve_shas(ref_object)

        is_draft, is_prerelease = self._release_flags(release)
        return ItemInfo(
            exists=True,
            name=release_tag,
            item_sha=item_sha,
            item_type=ItemType.RELEASE,
            commit_sha=commit_sha,
            details=self._release_body(release),
            is_draft=is_draft,
            is_prerelease=is_prerelease,
        )

    async def _get_paginated_results(self, path: str, what: str) -> List[Dict[str, Any]]:
        """Fetch every page of a list endpoint by following Link headers."""
        results: List[Dict[str, Any]] = []
        next_url: Optional[str] = path
        params: Optional[Dict[str, Any]] = {"per_page": Constants.REPO_API_PER_PAGE}

        while next_url:
            response = await self._get(next_url, what, params=params)
            if not isinstance(response.data, list) or not response.data:
                break
            results.extend(item for item in response.data if isinstance(item, dict))
            next_url = parse_next_link(response.header("Link"))
            # the next link already carries the query string
            params = None

        return results

    async def _list_tags(self, what: str) -> List[Dict[str, Any]]:
        return await self._get_paginated_results(f"{self.repo_path}/tags", what)

    async def _list_releases(self, what: str) -> List[Dict[str, Any]]:
        return await self._get_paginated_results(f"{self.repo_path}/releases", what)

    async def get_all_tag_names(self) -> List[str]:
        tags = await self._list_tags("get tag names")
        return [tag["name"] for tag in tags if tag.get("name")]

    async def _tag_date(self, tag: Dict[str, Any]) -> str:
        """Committer date of the tagged commit, or an empty string."""
        commit_sha = (tag.get("commit") or {}).get("sha")
        if not commit_sha:
            return ""
        try:
            response = await self.http.get_json(f"{self.repo_path}/git/commits/{commit_sha}")
        except PlatformError as exc:
            self.log.debug("Could not fetch commit %s: %s", commit_sha, exc)
            return ""
        if not response.ok or not isinstance(response.data, dict):
            return ""
        return (response.data.get("committer") or {}).get("date") or ""

    async def get_all_tags(self) -> List[DatedItem]:
        tags = await self._list_tags("get tags")
        items = []
        for tag in tags:
            name = tag.get("name")
            if name:
                items.append(DatedItem(name, await self._tag_date(tag)))
        return items

    async def get_all_release_names(self) -> List[str]:
        releases = await self._list_releases("get release names")
        return [release["tag_name"] for release in releases if release.get("tag_name")]

    async def get_all_releases(self) -> List[DatedItem]:
        releases = await self._list_releases("get releases")
        return [
            DatedItem(release["tag_name"], release.get("published_at") or release.get("created_at") or "")
            for release in releases
            if release.get("tag_name")
        ]
