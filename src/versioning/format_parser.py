"""Parsing of tag-format inputs from the CLI and config files."""

import json
import logging
from typing import Any, List, Optional

from common.errors import ConfigurationError

logger = logging.getLogger(__name__)


def parse_tag_format(value: Any) -> Optional[List[str]]:
    """Turn a raw tag-format input into an ordered pattern list.

    Accepts None, a list of patterns, a JSON array string
    (``'["X.X.X", "X.X"]'``) or a single pattern string. A string that
    starts with ``[`` but is not valid JSON (e.g. ``[0-9]+\\.[0-9]+``) is
    kept as one regex pattern. Blank entries are dropped; an input with
    no patterns yields None (no filtering).
    """
    if value is None:
        return None

    if isinstance(value, (list, tuple)):
        patterns: List[str] = []
        for item in value:
            parsed = parse_tag_format(item)
            if parsed:
                patterns.extend(parsed)
        return patterns or None

    if not isinstance(value, str):
        raise ConfigurationError(f"Invalid tag-format value: {value!r}")

    text = value.strip()
    if not text:
        return None

    if text.startswith("["):
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            logger.debug("tag-format %r is not a JSON array, using it as a pattern", text)
            return [text]
        if not isinstance(data, list) or not all(isinstance(p, str) for p in data):
            raise ConfigurationError("tag-format JSON must be an array of strings")
        return [p.strip() for p in data if p.strip()] or None

    return [text]
