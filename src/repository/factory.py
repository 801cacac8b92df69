"""Selects and builds the platform data source for a repository.

Detection runs over candidate URLs (the repository URL, the checkout's
``origin`` remote and CI server variables): first by hostname, then by
probing well-known API endpoints, defaulting to GitHub.
"""
from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple, Type, Union
from urllib.parse import urlparse

from common.errors import ConfigurationError
from common.http_client import endpoint_responds
from constants import AUTO_PLATFORM, Constants, Platform
from repository.git_cli import try_git
from repository.models import PlatformConfig, RepositoryInfo
from repository.platforms import BitbucketAPI, GiteaAPI, GitHubAPI, LocalGitAPI
from repository.providers import PlatformAPI, RemotePlatformAPI
from repository.url_normalize import to_https_url, url_origin

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlatformProvider:
    """Detection hints and implementation for one platform."""
    platform: Platform
    hostname_markers: Tuple[str, ...]
    detection_paths: Tuple[str, ...]
    api_class: Type[RemotePlatformAPI]


# detection order matters: Gitea instances often mimic GitHub endpoints
PROVIDERS: Tuple[PlatformProvider, ...] = (
    PlatformProvider(Platform.GITEA, ("gitea",), ("/api/v1/version",), GiteaAPI),
    PlatformProvider(Platform.GITHUB, ("github.com",), ("/api/v3", "/api"), GitHubAPI),
    PlatformProvider(Platform.BITBUCKET, ("bitbucket",), ("/2.0/repositories",), BitbucketAPI),
)


@dataclass
class PlatformSelection:
    """The chosen data source; ``platform`` is None for a local checkout."""
    platform: Optional[Platform]
    api: PlatformAPI
    base_url: Optional[str] = None

    @property
    def label(self) -> str:
        return self.platform.value if self.platform else "local"


def _provider_for(platform: Platform) -> PlatformProvider:
    for provider in PROVIDERS:
        if provider.platform is platform:
            return provider
    raise ConfigurationError(f"Unsupported platform: {platform}")


def _hostname(url: str) -> Optional[str]:
    try:
        return (urlparse(to_https_url(url)).hostname or "").lower() or None
    except ValueError:
        return None


def _path_segments(url: str) -> List[str]:
    try:
        return [part for part in urlparse(to_https_url(url)).path.split("/") if part]
    except ValueError:
        return []


def detect_from_hostname(url: str) -> Optional[Platform]:
    """Platform implied by the URL's hostname, if any."""
    hostname = _hostname(url)
    if not hostname:
        return None
    for provider in PROVIDERS:
        if any(marker in hostname for marker in provider.hostname_markers):
            return provider.platform
    return None


def detect_from_endpoints(url: str, verify: bool = True) -> Optional[Platform]:
    """Platform whose API endpoint answers on the URL's origin, if any."""
    origin = url_origin(url)
    if not origin:
        return None
    for provider in PROVIDERS:
        for path in provider.detection_paths:
            if endpoint_responds(f"{origin}{path}", verify=verify):
                logger.debug("Detected platform %s from API endpoint: %s%s", provider.platform.value, origin, path)
                return provider.platform
    return None


async def collect_candidate_urls(
    repo_info: RepositoryInfo,
    cwd: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> List[str]:
    """Repository URL, origin remote URL and CI server URLs, de-duplicated."""
    env = os.environ if env is None else env
    urls: List[str] = []

    def _add(url: Optional[str]) -> None:
        if url and url not in urls:
            urls.append(url)

    _add(repo_info.url)
    origin = await try_git(["config", "--get", "remote.origin.url"], cwd=repo_info.path or cwd)
    if origin:
        logger.debug("Added origin URL: %s", origin)
    _add(origin)
    for name in (Constants.ENV_GITHUB_SERVER_URL, Constants.ENV_GITEA_SERVER_URL, Constants.ENV_GITEA_API_URL):
        _add(env.get(name))
    return urls


async def resolve_platform(
    repo_info: RepositoryInfo,
    explicit_platform: Union[Platform, str, None],
    candidate_urls: Sequence[str],
    ignore_cert_errors: bool = False,
) -> Platform:
    """Pick the platform: explicit choice, then hostname, then API endpoints, then GitHub."""
    for choice in (explicit_platform, repo_info.platform):
        if isinstance(choice, Platform):
            return choice
        if choice and choice != AUTO_PLATFORM:
            try:
                return Platform(choice.lower())
            except ValueError as exc:
                raise ConfigurationError(
                    f"Unsupported platform: {choice}. Supported: {', '.join(Constants.SUPPORTED_PLATFORMS)}"
                ) from exc

    for url in candidate_urls:
        detected = detect_from_hostname(url)
        if detected:
            logger.debug("Detected platform %s from hostname (URL: %s)", detected.value, url)
            return detected

    for url in candidate_urls:
        detected = await asyncio.to_thread(detect_from_endpoints, url, not ignore_cert_errors)
        if detected:
            return detected

    logger.debug("Could not detect platform, defaulting to GitHub")
    return Platform.GITHUB


def determine_base_url(platform: Platform, urls: Sequence[str]) -> Optional[str]:
    """API base URL for a platform from the candidate URLs (explicit base URL first)."""
    urls = [url for url in urls if url]

    if platform is Platform.GITHUB:
        for url in urls:
            if "api" in _path_segments(url):
                return url.rstrip("/")
        hostnames = [_hostname(url) for url in urls]
        if urls and hostnames[0] and not any("github.com" in (h or "") for h in hostnames):
            # GitHub Enterprise Server
            return f"{url_origin(urls[0])}/api/v3"
        return Constants.GITHUB_API_BASE

    if platform is Platform.GITEA:
        if urls and "api" in _path_segments(urls[0]):
            return urls[0].rstrip("/")
        for url in urls:
            origin = url_origin(url)
            if origin:
                return f"{origin}{Constants.GITEA_API_SUFFIX}"
        return None

    if platform is Platform.BITBUCKET:
        if urls:
            segments = _path_segments(urls[0])
            if "2.0" in segments or "api" in segments:
                return urls[0].rstrip("/")
        for url in urls:
            hostname = _hostname(url)
            if hostname and hostname.endswith("bitbucket.org"):
                return Constants.BITBUCKET_API_BASE
            origin = url_origin(url)
            if origin:
                return f"{origin}/2.0"
        return Constants.BITBUCKET_API_BASE

    raise ConfigurationError(f"Unsupported platform: {platform}")


async def create_platform_api(
    repo_info: RepositoryInfo,
    platform: Union[Platform, str, None] = None,
    token: Optional[str] = None,
    base_url: Optional[str] = None,
    ignore_cert_errors: bool = False,
    cwd: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    log: Optional[logging.Logger] = None,
) -> PlatformSelection:
    """Build the data source for a repository.

    A checkout known only by its local path is read with git directly;
    everything else goes through the detected platform's REST API.
    """
    if repo_info.is_local_only:
        logger.debug("Local repository detected, using git CLI")
        return PlatformSelection(None, LocalGitAPI(repo_info, log=log))

    candidates = await collect_candidate_urls(repo_info, cwd=cwd, env=env)
    resolved = await resolve_platform(repo_info, platform, candidates, ignore_cert_errors)
    provider = _provider_for(resolved)
    api_base = determine_base_url(resolved, [base_url, *candidates] if base_url else candidates)

    config = PlatformConfig(
        platform=resolved,
        base_url=api_base,
        token=token,
        ignore_cert_errors=ignore_cert_errors,
    )
    api = provider.api_class(repo_info, config, log=log)
    return PlatformSelection(resolved, api, api.base_url)
