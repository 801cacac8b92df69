"""Resolve the "latest" tag or release of a repository.

Strategy: semver precedence first (using the cheap name-only listing when
resolving tags), then the most recent date, then the alphabetically last
name as a last resort. Optional format patterns restrict the candidates
before ordering; when several are given they are tried in order and the
first one matching anything wins.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence, Union

from common.logging_utils import extra_context, is_debug_enabled
from common.timestamps import epoch_ms_from_iso8601
from .errors import EmptySourceError, PatternExhaustedError
from .format_matcher import filter_tags_by_format
from .models import DatedItem, ItemKind
from .semver import is_semver, sort_tags_by_semver

if TYPE_CHECKING:
    from repository.providers import PlatformAPI

TagFormat = Union[str, Sequence[str], None]

logger = logging.getLogger(__name__)


def normalize_tag_format(tag_format: TagFormat) -> Optional[List[str]]:
    """Normalize a single pattern or a pattern list; None means no filtering."""
    if tag_format is None:
        return None
    if isinstance(tag_format, str):
        return [tag_format] if tag_format else None
    patterns = [p for p in tag_format if p]
    return patterns or None


def filter_tags_with_fallback(
    tag_names: Sequence[str],
    patterns: Sequence[str],
    context: str,
    log: Optional[logging.Logger] = None,
) -> List[str]:
    """Filter tag names with the first pattern that matches anything.

    Args:
        tag_names: Candidate names
        patterns: Format patterns in fallback order
        context: Label for log messages (e.g. "optimized path")
        log: Logger to report progress on

    Returns:
        Names matching the first successful pattern

    Raises:
        PatternExhaustedError: if no pattern matches any name
    """
    log = log or logger
    attempted: List[str] = []

    for index, pattern in enumerate(patterns):
        filtered = filter_tags_by_format(tag_names, pattern)
        log.info(
            'Format filtering (%s): pattern "%s" matches %d of %d tags',
            context, pattern, len(filtered), len(tag_names),
        )
        if filtered:
            if index > 0:
                log.info(
                    'Using fallback pattern "%s" (pattern %d of %d); previous patterns matched no tags',
                    pattern, index + 1, len(patterns),
                )
            return filtered

        attempted.append(pattern)
        if index < len(patterns) - 1:
            log.info('Pattern "%s" matched no tags, trying next pattern', pattern)

    raise PatternExhaustedError(attempted)


def _latest_by_date(items: Sequence[DatedItem]) -> str:
    """Most recent item name; unparseable dates sort last."""
    def _key(item: DatedItem) -> int:
        parsed = epoch_ms_from_iso8601(item.date)
        return parsed if parsed is not None else -1

    return sorted(items, key=_key, reverse=True)[0].name


class LatestResolver:
    """Picks the single "latest" item name from a platform data source.

    Each call to ``resolve`` works on freshly fetched lists; the resolver
    keeps no state between calls.
    """

    def __init__(self, platform_api: "PlatformAPI", log: Optional[logging.Logger] = None):
        self.platform_api = platform_api
        self.log = log or logger

    async def resolve(
        self,
        tag_format: TagFormat = None,
        item_kind: Union[ItemKind, str] = ItemKind.TAGS,
    ) -> str:
        """Resolve the latest tag or release name.

        Args:
            tag_format: A format pattern, a list of fallback patterns, or None
            item_kind: ItemKind.TAGS or ItemKind.RELEASE (or their string values)

        Returns:
            The winning name

        Raises:
            EmptySourceError: the data source has no items
            PatternExhaustedError: no format pattern matched any item
            PlatformError: the dated listing failed
        """
        kind = ItemKind(item_kind)
        patterns = normalize_tag_format(tag_format)
        label = kind.label
        self.log.info("Resolving latest %s...", label)

        if patterns:
            if len(patterns) == 1:
                self.log.info("Filtering tags by format: %s", patterns[0])
            else:
                self.log.info(
                    "Filtering tags by format patterns (fallback order): %s",
                    ", ".join(patterns),
                )

        if kind is ItemKind.TAGS:
            latest = await self._resolve_from_names(patterns, label)
            if latest is not None:
                return latest

        return await self._resolve_from_dated_items(kind, patterns, label)

    async def _resolve_from_names(self, patterns: Optional[List[str]], label: str) -> Optional[str]:
        """Name-only fast path; returns None when the dated listing is needed."""
        try:
            names = await self.platform_api.get_all_tag_names()
            if not names:
                raise EmptySourceError(label)

            if patterns:
                names = filter_tags_with_fallback(names, patterns, "optimized path", self.log)

            semver_names = [name for name in names if is_semver(name)]
            if semver_names:
                self.log.info(
                    "Found %d semver %ss, using semver comparison (no date fetching needed)",
                    len(semver_names), label,
                )
                latest = sort_tags_by_semver(semver_names)[0]
                self.log.info("Latest semver %s: %s", label, latest)
                return latest

            self.log.info("No semver %ss found, falling back to date-based sorting", label)
            return None
        except PatternExhaustedError:
            raise
        except Exception as exc:  # pylint: disable=broad-exception-caught
            self.log.warning(
                "Optimized %s name fetch failed, using full %s fetch: %s", label, label, exc
            )
            if is_debug_enabled(self.log):
                self.log.debug(
                    "Fast path degraded",
                    extra=extra_context(
                        event="fallback",
                        component="latest_resolver",
                        action="get_all_tag_names",
                        outcome="degraded",
                        error=type(exc).__name__,
                    ),
                )
            return None

    async def _resolve_from_dated_items(
        self, kind: ItemKind, patterns: Optional[List[str]], label: str
    ) -> str:
        """Full listing with dates: semver, then date, then alphabetical."""
        if kind is ItemKind.TAGS:
            items = await self.platform_api.get_all_tags()
        else:
            items = await self.platform_api.get_all_releases()

        if not items:
            raise EmptySourceError(label)

        if patterns:
            surviving = set(
                filter_tags_with_fallback(
                    [item.name for item in items], patterns, f"full {label} fetch path", self.log
                )
            )
            items = [item for item in items if item.name in surviving]

        semver_names = [item.name for item in items if is_semver(item.name)]
        if semver_names:
            self.log.info("Found %d semver %ss, using semver comparison", len(semver_names), label)
            latest = sort_tags_by_semver(semver_names)[0]
            self.log.info("Latest semver %s: %s", label, latest)
            return latest

        self.log.info("No semver %ss found, falling back to date-based sorting", label)
        dated = [item for item in items if item.date]
        if dated:
            latest = _latest_by_date(dated)
            self.log.info("Latest %s by date: %s", label, latest)
            return latest

        self.log.warning("No date information available, using alphabetical order")
        return sorted(item.name for item in items)[-1]


async def resolve_latest_tag(
    platform_api: "PlatformAPI",
    tag_format: TagFormat = None,
    item_kind: Union[ItemKind, str] = ItemKind.TAGS,
    log: Optional[logging.Logger] = None,
) -> str:
    """Convenience wrapper around LatestResolver.resolve."""
    return await LatestResolver(platform_api, log).resolve(tag_format, item_kind)
