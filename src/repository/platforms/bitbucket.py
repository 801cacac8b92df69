"""Bitbucket Cloud / Server data source.

Bitbucket has no releases API; releases are served from tags and
reported with ``item_type=release``.
"""
from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from constants import Constants, Platform
from repository.models import ItemInfo, ItemType
from repository.providers import RemotePlatformAPI
from versioning.models import DatedItem


class BitbucketAPI(RemotePlatformAPI):
    """Tags through the Bitbucket 2.0 REST API."""

    platform_name = Platform.BITBUCKET.value
    display_name = "Bitbucket"
    default_base_url = Constants.BITBUCKET_API_BASE

    def auth_headers(self, token: Optional[str]) -> Dict[str, str]:
        if not token:
            return {}
        # app passwords / access tokens go in Basic auth with an empty user
        credentials = base64.b64encode(f":{token}".encode("utf-8")).decode("ascii")
        return {"Authorization": f"Basic {credentials}"}

    @property
    def tags_path(self) -> str:
        return f"/repositories/{self.repo_info.owner}/{self.repo_info.repo}/refs/tags"

    async def get_tag_info(self, tag_name: str) -> ItemInfo:
        response = await self._get(
            f"{self.tags_path}/{quote(tag_name, safe='')}", "get tag info", allow_missing=True
        )
        if response is None or not isinstance(response.data, dict):
            return ItemInfo.missing(tag_name)

        data = response.data
        # tags point straight at commits; there is no separate tag object SHA
        target_hash = (data.get("target") or {}).get("hash") or ""
        return ItemInfo(
            exists=True,
            name=tag_name,
            item_sha=target_hash,
            item_type=ItemType.TAG if data.get("type") == "tag" else ItemType.COMMIT,
            commit_sha=target_hash,
            details=data.get("message") or "",
        )

    async def get_release_info(self, tag_name: str) -> ItemInfo:
        return (await self.get_tag_info(tag_name)).as_release()

    async def _get_paginated_results(self, what: str) -> List[Dict[str, Any]]:
        """Follow ``next`` links of the tags listing."""
        results: List[Dict[str, Any]] = []
        next_url: Optional[str] = self.tags_path
        params: Optional[Dict[str, Any]] = {"pagelen": Constants.REPO_API_PER_PAGE}

        while next_url:
            response = await self._get(next_url, what, params=params)
            data = response.data if isinstance(response.data, dict) else {}
            values = data.get("values") or []
            if not values:
                break
            results.extend(value for value in values if isinstance(value, dict))
            next_url = data.get("next")
            params = None

        return results

    async def get_all_tag_names(self) -> List[str]:
        tags = await self._get_paginated_results("get tag names")
        return [tag["name"] for tag in tags if tag.get("name")]

    async def get_all_tags(self) -> List[DatedItem]:
        tags = await self._get_paginated_results("get tags")
        return [
            DatedItem(tag["name"], (tag.get("target") or {}).get("date") or tag.get("date") or "")
            for tag in tags
            if tag.get("name")
        ]

    async def get_all_release_names(self) -> List[str]:
        return await self.get_all_tag_names()

    async def get_all_releases(self) -> List[DatedItem]:
        return await self.get_all_tags()
