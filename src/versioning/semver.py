"""Semantic version helpers for tag names.

Tag names are semver-like when, after an optional ``v``/``V`` prefix,
they parse as a strict SemVer 2.0.0 version (``MAJOR.MINOR.PATCH`` with
optional pre-release and build parts).
"""

from typing import Iterable, List, Optional

import semantic_version


def parse_semver(tag_name: str) -> Optional[semantic_version.Version]:
    """Safely parse a tag name as a semantic version."""
    if not tag_name:
        return None
    text = tag_name[1:] if tag_name[0] in ("v", "V") else tag_name
    try:
        return semantic_version.Version(text)
    except ValueError:
        return None


def is_semver(tag_name: str) -> bool:
    """Return True if the tag name is semver-like."""
    return parse_semver(tag_name) is not None


def sort_tags_by_semver(tag_names: Iterable[str]) -> List[str]:
    """Sort semver-like tag names by precedence, highest first.

    Names that do not parse are dropped. Names of equal precedence keep
    their input order.
    """
    parsed = []
    for name in tag_names:
        version = parse_semver(name)
        if version is not None:
            parsed.append((version, name))
    # build metadata carries no precedence
    parsed.sort(key=lambda item: item[0].truncate("prerelease").precedence_key, reverse=True)
    return [name for _, name in parsed]
