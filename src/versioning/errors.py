"""Errors raised while resolving the "latest" tag or release."""

from __future__ import annotations

from typing import Sequence

from common.errors import TagInfoError


class ResolutionError(TagInfoError):
    """Base class for resolution failures."""


class EmptySourceError(ResolutionError):
    """The data source returned no candidates at all."""

    def __init__(self, item_label: str):
        self.item_label = item_label
        super().__init__(f"No {item_label}s found in repository")


class PatternExhaustedError(ResolutionError):
    """Every configured format pattern matched zero candidates.

    Treated as a configuration problem: the resolver never retries
    through another fetch path when this is raised.
    """

    def __init__(self, patterns: Sequence[str]):
        self.patterns = list(patterns)
        patterns_list = ", ".join(f'"{p}"' for p in self.patterns)
        super().__init__(
            f"No tags found matching any format pattern: [{patterns_list}]. "
            f"Tried {len(self.patterns)} pattern(s) in fallback order."
        )
