"""Data models for repositories and the items fetched from them."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from constants import AUTO_PLATFORM, Platform


class ItemType(Enum):
    """What a resolved item points at."""
    COMMIT = "commit"  # lightweight tag
    TAG = "tag"  # annotated tag
    RELEASE = "release"  # platform release


@dataclass
class ItemInfo:
    """Normalized metadata of a tag or release."""
    exists: bool
    name: str
    item_sha: str = ""
    item_type: ItemType = ItemType.COMMIT
    commit_sha: str = ""
    details: str = ""
    verified: bool = False
    is_draft: bool = False
    is_prerelease: bool = False

    @classmethod
    def missing(cls, name: str, item_type: ItemType = ItemType.COMMIT) -> "ItemInfo":
        """Placeholder for an item that does not exist."""
        return cls(exists=False, name=name, item_type=item_type)

    def as_release(self) -> "ItemInfo":
        """Copy of this item reported as a release."""
        return replace(self, item_type=ItemType.RELEASE, is_draft=False, is_prerelease=False)


@dataclass
class RepositoryInfo:
    """Where the repository lives: remote owner/repo, a URL, a local path, or a mix."""
    owner: str = ""
    repo: str = ""
    url: Optional[str] = None
    path: Optional[str] = None
    platform: Union[Platform, str] = AUTO_PLATFORM

    @property
    def is_local_only(self) -> bool:
        """True when only a local checkout is known."""
        return bool(self.path) and not (self.owner and self.repo)

    def display_name(self) -> str:
        """Human-readable repository label for logs."""
        return f"{self.owner or 'local'}/{self.repo or self.path or 'unknown'}"


@dataclass
class PlatformConfig:
    """Connection settings for a platform data source."""
    platform: Optional[Platform] = None
    base_url: Optional[str] = None
    token: Optional[str] = None
    ignore_cert_errors: bool = False
