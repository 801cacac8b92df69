"""Gitea REST data source.

Gitea mirrors the GitHub API closely; only auth, the refs path,
pagination and a few field names differ.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from common.errors import ConfigurationError
from constants import Constants, Platform
from repository.platforms.github import GitHubAPI
from versioning.models import DatedItem


class GiteaAPI(GitHubAPI):
    """Tags and releases through the Gitea ``/api/v1`` REST API."""

    platform_name = Platform.GITEA.value
    display_name = "Gitea"
    ref_path = "git/refs/tags"

    def api_base_url(self, base_url: Optional[str]) -> str:
        if not base_url:
            raise ConfigurationError("Gitea base URL is required")
        api_base = base_url.rstrip("/")
        if not api_base.endswith(Constants.GITEA_API_SUFFIX):
            api_base = f"{api_base}{Constants.GITEA_API_SUFFIX}"
        return api_base

    def auth_headers(self, token: Optional[str]) -> Dict[str, str]:
        if token:
            return {"Authorization": f"token {token}"}
        return {}

    def _tag_verified(self, tag_object: Dict[str, Any]) -> bool:
        # verification is not exposed the same way as on GitHub
        return False

    def _release_body(self, release: Dict[str, Any]) -> str:
        return release.get("note") or release.get("body") or ""

    def _release_flags(self, release: Dict[str, Any]) -> Tuple[bool, bool]:
        is_draft = release.get("is_draft", release.get("draft"))
        is_prerelease = release.get("is_prerelease", release.get("prerelease"))
        return bool(is_draft), bool(is_prerelease)

    async def _get_paginated_results(self, path: str, what: str) -> List[Dict[str, Any]]:
        """Fetch pages with ``limit``/``page`` until a short or empty page."""
        results: List[Dict[str, Any]] = []
        page = 1
        limit = Constants.REPO_API_PER_PAGE

        while True:
            response = await self._get(path, what, params={"limit": limit, "page": page})
            data = response.data
            if not isinstance(data, list) or not data:
                break
            results.extend(item for item in data if isinstance(item, dict))
            if len(data) < limit:
                break
            page += 1

        return results

    async def _tag_date(self, tag: Dict[str, Any]) -> str:
        commit = tag.get("commit") or {}
        return commit.get("created") or commit.get("timestamp") or ""
