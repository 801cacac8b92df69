"""Thin async wrapper around the ``git`` executable."""
from __future__ import annotations

import asyncio
import logging
import re
from typing import Optional, Sequence

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, Timer
from repository.errors import PlatformError
from repository.models import ItemInfo, ItemType

logger = logging.getLogger(__name__)

_SHA1_RE = re.compile(r"^[0-9a-f]{40}$")


async def run_git(
    args: Sequence[str],
    cwd: Optional[str] = None,
    timeout: float = Constants.GIT_TIMEOUT,
) -> str:
    """Run ``git <args>`` and return its stripped stdout.

    Raises:
        PlatformError: git is missing, timed out or exited non-zero
    """
    command = " ".join(["git", *args])
    with Timer() as t:
        try:
            proc = await asyncio.create_subprocess_exec(
                "git",
                *args,
                cwd=cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, NotADirectoryError, PermissionError) as exc:
            raise PlatformError("git", f"Git command failed: {command} - {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError as exc:
            proc.kill()
            await proc.wait()
            raise PlatformError(
                "git", f"Git command timed out after {timeout} seconds: {command}"
            ) from exc

    if is_debug_enabled(logger):
        logger.debug(
            "git command finished",
            extra=extra_context(
                event="subprocess",
                component="git_cli",
                action=args[0] if args else None,
                exit_code=proc.returncode,
                duration_ms=t.duration_ms(),
                cwd=cwd,
            ),
        )

    if proc.returncode != 0:
        message = stderr.decode("utf-8", errors="replace").strip()
        raise PlatformError(
            "git", f"Git command failed: {command} - {message or f'exit code {proc.returncode}'}"
        )
    return stdout.decode("utf-8", errors="replace").strip()


async def try_git(args: Sequence[str], cwd: Optional[str] = None) -> Optional[str]:
    """Run git and return stdout, or None on any failure."""
    try:
        return await run_git(args, cwd=cwd)
    except PlatformError as exc:
        logger.debug("%s", exc)
        return None


async def ls_remote_tag(
    tag_name: str,
    repo_url: Optional[str],
    log: Optional[logging.Logger] = None,
) -> Optional[ItemInfo]:
    """Look a tag up on the remote with ``git ls-remote``.

    Used when a platform API reports a tag as missing. Returns an
    ItemInfo for a lightweight tag when the remote lists a valid SHA,
    otherwise None.
    """
    log = log or logger
    if not repo_url:
        log.debug("No repository URL available for git ls-remote fallback")
        return None

    remote_url = repo_url[:-4] if repo_url.endswith(".git") else repo_url
    log.debug("Attempting git ls-remote fallback for tag: %s", tag_name)
    try:
        output = await run_git(["ls-remote", "--tags", remote_url, f"refs/tags/{tag_name}"])
    except PlatformError as exc:
        log.debug("git ls-remote fallback failed: %s", exc)
        return None

    if not output:
        log.debug("Fallback returned empty result for tag: %s", tag_name)
        return None

    sha = output.split()[0]
    if not _SHA1_RE.match(sha):
        log.debug("Fallback returned invalid SHA format: %s", sha)
        return None

    log.debug("Fallback successful: tag %s found via git ls-remote (SHA: %s)", tag_name, sha)
    return ItemInfo(
        exists=True,
        name=tag_name,
        item_sha=sha,
        item_type=ItemType.COMMIT,
        commit_sha=sha,
    )
