"""Platform data source interface and the shared base for HTTP-backed sources.

Every source (GitHub, Gitea, Bitbucket, local git) exposes the same
coroutine API so the resolver and the CLI never branch on platform.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from common.http_client import HttpClient, HttpResponse
from repository.errors import PlatformError
from repository.models import ItemInfo, PlatformConfig, RepositoryInfo
from versioning.models import DatedItem

logger = logging.getLogger(__name__)


class PlatformAPI:
    """Base class for platform data sources."""

    platform_name = "unknown"
    display_name = "Unknown"

    async def get_tag_info(self, tag_name: str) -> ItemInfo:
        """Metadata of one tag; ``exists=False`` when it is missing."""
        raise NotImplementedError

    async def get_release_info(self, tag_name: str) -> ItemInfo:
        """Metadata of one release (``latest`` selects the platform's latest)."""
        raise NotImplementedError

    async def get_all_tag_names(self) -> List[str]:
        """All tag names, without dates."""
        raise NotImplementedError

    async def get_all_tags(self) -> List[DatedItem]:
        """All tags with their dates (empty string when unknown)."""
        raise NotImplementedError

    async def get_all_release_names(self) -> List[str]:
        """All release tag names, without dates."""
        raise NotImplementedError

    async def get_all_releases(self) -> List[DatedItem]:
        """All releases with their dates (empty string when unknown)."""
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release network resources."""

    async def __aenter__(self) -> "PlatformAPI":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


class RemotePlatformAPI(PlatformAPI):
    """Shared plumbing for sources that talk to a REST API."""

    default_base_url = ""

    def __init__(
        self,
        repo_info: RepositoryInfo,
        config: PlatformConfig,
        http: Optional[HttpClient] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.repo_info = repo_info
        self.config = config
        self.log = log or logger
        self.base_url = self.api_base_url(config.base_url)
        self.http = http or HttpClient(
            self.base_url,
            platform=self.platform_name,
            headers=self.auth_headers(config.token),
            ignore_cert_errors=config.ignore_cert_errors,
            log=self.log,
        )

    def api_base_url(self, base_url: Optional[str]) -> str:
        """Normalized API root for this platform."""
        return (base_url or self.default_base_url).rstrip("/")

    def auth_headers(self, token: Optional[str]) -> Dict[str, str]:
        """Authorization headers for the token (none when unset)."""
        raise NotImplementedError

    async def aclose(self) -> None:
        await self.http.aclose()

    async def _get(
        self,
        path: str,
        what: str,
        params: Optional[Mapping[str, Any]] = None,
        allow_missing: bool = False,
    ) -> Optional[HttpResponse]:
        """GET a JSON resource.

        Args:
            path: API path or absolute URL
            what: Action label for error messages ("get tags")
            params: Optional query parameters
            allow_missing: Return None instead of raising on 404

        Raises:
            PlatformError: transport failure or unexpected status
        """
        try:
            response = await self.http.get_json(path, params)
        except PlatformError as exc:
            raise PlatformError(
                self.platform_name, f"Failed to {what} from {self.display_name}: {exc}"
            ) from exc

        if response.status == 404 and allow_missing:
            return None
        if not response.ok:
            raise PlatformError(
                self.platform_name,
                f"Failed to {what} from {self.display_name}: "
                f"{self.display_name} API error: {response.status} - {response.text[:200]}",
                status=response.status,
            )
        return response
