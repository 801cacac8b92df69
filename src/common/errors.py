"""Base exception types shared across the project."""


class TagInfoError(Exception):
    """Base class for expected, user-reportable failures."""


class ConfigurationError(TagInfoError):
    """Invalid command-line or config-file input, or undiscoverable repository."""
