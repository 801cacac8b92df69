"""Repository discovery from explicit inputs, the local checkout or CI environment."""
from __future__ import annotations

import logging
import os
from typing import Mapping, Optional, Tuple

from common.errors import ConfigurationError
from constants import AUTO_PLATFORM, Constants, Platform
from repository.git_cli import try_git
from repository.models import RepositoryInfo
from repository.url_normalize import parse_repository

logger = logging.getLogger(__name__)


def _split_slug(slug: str) -> Tuple[str, str]:
    owner, _, repo = slug.partition("/")
    return owner, repo


async def get_local_repository_info(cwd: Optional[str] = None) -> Optional[RepositoryInfo]:
    """Describe the git checkout containing cwd, or None outside a repository.

    When the checkout has an ``origin`` remote its owner/repo/url are
    filled in as well as the local path.
    """
    repo_path = await try_git(["rev-parse", "--show-toplevel"], cwd=cwd)
    if not repo_path:
        logger.debug("Not in a Git repository")
        return None

    remote_url = await try_git(["config", "--get", "remote.origin.url"], cwd=repo_path)
    if remote_url:
        parsed = parse_repository(remote_url)
        if parsed is not None and parsed.owner and parsed.repo:
            parsed.path = repo_path
            return parsed

    logger.debug("No remote origin found, will use local git")
    return RepositoryInfo(path=repo_path, platform=AUTO_PLATFORM)


def repository_from_environment(env: Optional[Mapping[str, str]] = None) -> Optional[RepositoryInfo]:
    """Repository named by CI environment variables.

    Gitea Actions also sets ``GITHUB_REPOSITORY``, so Gitea hints are
    checked first and a non-github ``GITHUB_SERVER_URL`` leaves the
    platform to detection.
    """
    env = os.environ if env is None else env
    gitea_repo = env.get(Constants.ENV_GITEA_REPOSITORY)
    gitea_server = env.get(Constants.ENV_GITEA_SERVER_URL) or env.get(Constants.ENV_GITEA_API_URL)
    github_server = env.get(Constants.ENV_GITHUB_SERVER_URL)
    github_repo = env.get(Constants.ENV_GITHUB_REPOSITORY)

    if gitea_repo:
        owner, repo = _split_slug(gitea_repo)
        logger.debug("Using %s: %s/%s", Constants.ENV_GITEA_REPOSITORY, owner, repo)
        return RepositoryInfo(owner=owner, repo=repo, platform=AUTO_PLATFORM)

    if gitea_server or (github_server and "github.com" not in github_server):
        if github_repo:
            owner, repo = _split_slug(github_repo)
            logger.debug("Using %s with a non-GitHub server URL: %s/%s", Constants.ENV_GITHUB_REPOSITORY, owner, repo)
            return RepositoryInfo(owner=owner, repo=repo, platform=AUTO_PLATFORM)
        return None

    if github_repo:
        owner, repo = _split_slug(github_repo)
        logger.debug("Using %s: %s/%s", Constants.ENV_GITHUB_REPOSITORY, owner, repo)
        return RepositoryInfo(owner=owner, repo=repo, platform=Platform.GITHUB)

    return None


async def get_repository_info(
    repository: Optional[str] = None,
    platform: Optional[str] = None,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    cwd: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> RepositoryInfo:
    """Work out which repository to query.

    Order: explicit platform+owner+repo, the ``repository`` reference,
    the local checkout, then CI environment variables.

    Raises:
        ConfigurationError: unsupported platform or nothing discoverable
    """
    info: Optional[RepositoryInfo] = None

    if platform and platform.lower() != AUTO_PLATFORM and owner and repo:
        try:
            platform_value = Platform(platform.lower())
        except ValueError as exc:
            raise ConfigurationError(
                f"Unsupported platform: {platform}. Supported: {', '.join(Constants.SUPPORTED_PLATFORMS)}"
            ) from exc
        info = RepositoryInfo(owner=owner, repo=repo, platform=platform_value)
        logger.debug("Using separate inputs: %s/%s on %s", owner, repo, platform_value.value)
    elif repository:
        info = parse_repository(repository, cwd=cwd)
    elif owner and repo:
        info = RepositoryInfo(owner=owner, repo=repo, platform=AUTO_PLATFORM)

    if info is None:
        info = await get_local_repository_info(cwd)

    if info is None:
        info = repository_from_environment(env)

    if info is None:
        raise ConfigurationError(
            "Could not determine repository information. "
            "Please provide --repository or run in a Git repository."
        )

    logger.info("Repository: %s", info.display_name())
    return info
