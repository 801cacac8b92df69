"""Tag format matching utilities.

Classifies user-supplied format patterns and filters tag names against
them. Three pattern forms are understood, checked in this order:

- simple placeholder patterns such as ``X.X`` or ``vX.X.X`` where each
  ``X`` stands for a group of digits;
- regular expressions (leading ``^`` or ``/``, or any regex metacharacter);
- literal names, matched by exact equality.

Simple and regex patterns also match on the numeric prefix of a name so
that build-tagged names like ``3.23-bae0df8a-ls3`` satisfy ``X.X``.
"""
from __future__ import annotations

import re
from typing import List, Optional, Pattern, Sequence

from .models import FormatKind

_SIMPLE_PATTERN_RE = re.compile(r"^v?X(\.X)+$", re.IGNORECASE)
_REGEX_SPECIAL_CHARS_RE = re.compile(r"[()\[\]{}*+?|\\]")
_NUMERIC_PREFIX_RE = re.compile(r"^(v?\d+(?:\.\d+)*)", re.ASCII)


def is_simple_pattern(fmt: str) -> bool:
    """Return True for placeholder patterns like ``X.X`` or ``vX.X.X``."""
    return bool(fmt) and bool(_SIMPLE_PATTERN_RE.match(fmt))


def is_regex_pattern(fmt: str) -> bool:
    """Return True when the format looks like a regular expression."""
    if not fmt:
        return False
    if fmt.startswith("^") or fmt.startswith("/"):
        return True
    return bool(_REGEX_SPECIAL_CHARS_RE.search(fmt))


def classify_format(fmt: str) -> FormatKind:
    """Classify a format pattern (simple, then regex, then literal)."""
    if is_simple_pattern(fmt):
        return FormatKind.SIMPLE
    if is_regex_pattern(fmt):
        return FormatKind.REGEX
    return FormatKind.LITERAL


def convert_simple_pattern_to_regex(fmt: str) -> Pattern[str]:
    """Compile a simple pattern into an anchored regex.

    ``X.X`` -> ``^\\d+\\.\\d+$``; ``vX.X.X`` -> ``^v\\d+\\.\\d+\\.\\d+$``.
    The ``v`` prefix is kept as written, so matching it is case-sensitive.
    Only ASCII digits match.
    """
    parts = []
    for char in fmt:
        if char in ("X", "x"):
            parts.append(r"\d+")
        else:
            parts.append(re.escape(char))
    return re.compile("^" + "".join(parts) + "$", re.ASCII)


def convert_regex_pattern(fmt: str) -> Optional[Pattern[str]]:
    """Strip ``/`` delimiters, anchor the pattern and compile it.

    Returns None when the expression does not compile.
    """
    regex_str = fmt
    if regex_str.startswith("/"):
        regex_str = regex_str[1:]
    if regex_str.endswith("/"):
        regex_str = regex_str[:-1]
    if not regex_str.startswith("^"):
        regex_str = f"^{regex_str}"
    if not regex_str.endswith("$"):
        regex_str = f"{regex_str}$"
    try:
        return re.compile(regex_str, re.ASCII)
    except re.error:
        return None


def extract_numeric_prefix(tag_name: str) -> str:
    """Return the leading ``v?N(.N)*`` part of a tag name, or an empty string.

    ``3.23-bae0df8a-ls3`` -> ``3.23``; ``v1.2.3-alpha`` -> ``v1.2.3``.
    """
    match = _NUMERIC_PREFIX_RE.match(tag_name)
    return match.group(1) if match else ""


def match_tag_format(tag_name: str, fmt: str) -> bool:
    """Check whether a tag name satisfies a format pattern.

    Args:
        tag_name: Tag or release name to test
        fmt: Format pattern (simple, regex or literal)

    Returns:
        True if the full name, or for simple/regex patterns its numeric
        prefix, matches the pattern
    """
    if not fmt or not tag_name:
        return False

    kind = classify_format(fmt)
    if kind is FormatKind.LITERAL:
        return tag_name == fmt

    if kind is FormatKind.SIMPLE:
        regex = convert_simple_pattern_to_regex(fmt)
    else:
        regex = convert_regex_pattern(fmt)
        if regex is None:
            return False

    if regex.search(tag_name):
        return True

    prefix = extract_numeric_prefix(tag_name)
    return bool(prefix) and bool(regex.search(prefix))


def filter_tags_by_format(tag_names: Sequence[str], fmt: str) -> List[str]:
    """Return the tag names matching fmt, preserving order.

    An empty format is a no-op and returns the names unchanged.
    """
    if not fmt:
        return list(tag_names)
    return [name for name in tag_names if match_tag_format(name, fmt)]
