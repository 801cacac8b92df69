"""Errors raised by platform data sources."""

from __future__ import annotations

from typing import Optional

from common.errors import TagInfoError


class PlatformError(TagInfoError):
    """A platform call failed (network, non-2xx status, bad payload, git failure)."""

    def __init__(self, platform: str, message: str, status: Optional[int] = None):
        self.platform = platform
        self.status = status
        super().__init__(message)


class UnsupportedOperationError(PlatformError):
    """The data source cannot perform the requested operation."""
