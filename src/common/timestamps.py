"""Timestamp parsing helpers shared by the resolver and platform clients."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def epoch_ms_from_iso8601(value: Optional[str]) -> Optional[int]:
    """Parse an ISO-8601 string into epoch milliseconds.

    Accepts date-only values, fractional seconds, UTC offsets and a
    trailing ``Z``; naive timestamps are taken as UTC.
    Returns None for empty or unparseable input.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        if text.endswith(("Z", "z")):
            parsed = datetime.fromisoformat(text[:-1]).replace(tzinfo=timezone.utc)
        else:
            parsed = datetime.fromisoformat(text)
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
        return int(parsed.timestamp() * 1000)
    except (ValueError, TypeError):
        return None
