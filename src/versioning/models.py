"""Data models for tag format matching and "latest" resolution."""

from dataclasses import dataclass
from enum import Enum


class ItemKind(Enum):
    """Kind of item being resolved."""
    TAGS = "tags"
    RELEASE = "release"

    @property
    def label(self) -> str:
        """Singular label used in log and error messages."""
        return "release" if self is ItemKind.RELEASE else "tag"


class FormatKind(Enum):
    """Classification of a user-supplied format pattern."""
    SIMPLE = "simple"
    REGEX = "regex"
    LITERAL = "literal"


@dataclass(frozen=True)
class DatedItem:
    """A candidate tag or release name with its timestamp (empty when unknown)."""
    name: str
    date: str = ""
