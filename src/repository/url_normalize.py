"""Repository reference parsing.

Turns user input (``https://host/owner/repo.git``, ``git@host:owner/repo``,
``owner/repo`` or a filesystem path) into a RepositoryInfo.
"""
from __future__ import annotations

import logging
import os
import re
from typing import Optional
from urllib.parse import urlparse

from constants import AUTO_PLATFORM
from repository.models import RepositoryInfo

logger = logging.getLogger(__name__)

_SCP_LIKE_RE = re.compile(r"^git@([^:]+):(.+)$")


def is_remote_url(value: str) -> bool:
    """True for http(s) and scp-style ``git@`` references."""
    return value.startswith(("http://", "https://", "git@"))


def to_https_url(value: str) -> str:
    """Rewrite ``git@host:owner/repo`` as ``https://host/owner/repo``."""
    match = _SCP_LIKE_RE.match(value)
    if match:
        return f"https://{match.group(1)}/{match.group(2)}"
    return value


def url_origin(value: str) -> Optional[str]:
    """``scheme://host[:port]`` of a URL, or None when it does not parse."""
    try:
        parsed = urlparse(to_https_url(value))
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    host = parsed.hostname or ""
    port = f":{parsed.port}" if parsed.port else ""
    return f"{parsed.scheme}://{host}{port}"


def parse_repository(value: Optional[str], cwd: Optional[str] = None) -> Optional[RepositoryInfo]:
    """Parse a repository reference.

    Args:
        value: URL, ``owner/repo`` or local path
        cwd: Base directory for relative paths (defaults to the process cwd)

    Returns:
        RepositoryInfo with ``platform="auto"``, or None for empty or
        unparseable remote input
    """
    if not value or not value.strip():
        return None
    value = value.strip()
    logger.debug("Parsing repository: %s", value)

    if is_remote_url(value):
        try:
            parsed = urlparse(to_https_url(value))
        except ValueError:
            parsed = None
        if parsed is not None:
            parts = [part for part in parsed.path.split("/") if part]
            if len(parts) >= 2:
                owner = parts[0]
                repo = parts[1][:-4] if parts[1].endswith(".git") else parts[1]
                logger.debug("Parsed URL: %s -> %s/%s", value, owner, repo)
                return RepositoryInfo(owner=owner, repo=repo, url=value, platform=AUTO_PLATFORM)
        logger.warning("Could not parse repository format: %s", value)
        return None

    parts = value.split("/")
    if len(parts) == 2 and all(parts) and not os.path.isabs(value) and not value.startswith("."):
        logger.debug("Parsed as owner/repo format: %s/%s", parts[0], parts[1])
        return RepositoryInfo(owner=parts[0], repo=parts[1], platform=AUTO_PLATFORM)

    path = value if os.path.isabs(value) else os.path.abspath(os.path.join(cwd or os.getcwd(), value))
    logger.debug("Detected local repository path: %s", path)
    return RepositoryInfo(path=path, platform=AUTO_PLATFORM)
