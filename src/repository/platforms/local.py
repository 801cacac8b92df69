"""Local git checkout data source."""
from __future__ import annotations

import logging
from typing import List, Optional

from repository.errors import PlatformError, UnsupportedOperationError
from repository.git_cli import run_git, try_git
from repository.models import ItemInfo, ItemType, RepositoryInfo
from repository.providers import PlatformAPI
from versioning.models import DatedItem

logger = logging.getLogger(__name__)

_FOR_EACH_REF_SEP = "\t"


class LocalGitAPI(PlatformAPI):
    """Reads tags straight from a local repository with the git CLI.

    Releases are a hosting-platform concept and are not supported.
    """

    platform_name = "local"
    display_name = "local git"

    def __init__(self, repo_info: RepositoryInfo, log: Optional[logging.Logger] = None):
        if not repo_info.path:
            raise PlatformError(self.platform_name, "Local repository path is required")
        self.repo_info = repo_info
        self.path = repo_info.path
        self.log = log or logger

    async def _git(self, *args: str) -> str:
        return await run_git(args, cwd=self.path)

    async def get_tag_info(self, tag_name: str) -> ItemInfo:
        ref = f"refs/tags/{tag_name}"
        if await try_git(["rev-parse", "--verify", "--quiet", ref], cwd=self.path) is None:
            return ItemInfo.missing(tag_name)

        item_sha = await self._git("rev-parse", ref)
        commit_sha = await try_git(["rev-parse", f"{ref}^{{commit}}"], cwd=self.path) or item_sha
        annotated = await try_git(["cat-file", "-t", ref], cwd=self.path) == "tag"

        details = ""
        if annotated:
            details = await try_git(["tag", "-l", "--format=%(contents)", tag_name], cwd=self.path) or ""

        # verify-tag exits non-zero for unsigned or unverifiable tags
        verified = await try_git(["verify-tag", tag_name], cwd=self.path) is not None

        return ItemInfo(
            exists=True,
            name=tag_name,
            item_sha=item_sha,
            item_type=ItemType.TAG if annotated else ItemType.COMMIT,
            commit_sha=commit_sha,
            details=details,
            verified=verified,
        )

    async def get_release_info(self, tag_name: str) -> ItemInfo:
        raise UnsupportedOperationError(
            self.platform_name,
            "Releases are not supported for local repositories. "
            "Use --tag-type tags or query a remote repository.",
        )

    async def get_all_tag_names(self) -> List[str]:
        output = await self._git("tag", "-l")
        return [line.strip() for line in output.splitlines() if line.strip()]

    async def get_all_tags(self) -> List[DatedItem]:
        output = await self._git(
            "for-each-ref",
            f"--format=%(refname:strip=2){_FOR_EACH_REF_SEP}%(creatordate:iso-strict)",
            "refs/tags",
        )
        items = []
        for line in output.splitlines():
            if not line.strip():
                continue
            name, _, date = line.partition(_FOR_EACH_REF_SEP)
            items.append(DatedItem(name.strip(), date.strip()))
        return items

    async def get_all_release_names(self) -> List[str]:
        raise UnsupportedOperationError(self.platform_name, "Releases are not supported for local repositories")

    async def get_all_releases(self) -> List[DatedItem]:
        raise UnsupportedOperationError(self.platform_name, "Releases are not supported for local repositories")
