"""Runtime settings for the CLI.

Merges command-line arguments, an optional YAML/JSON config file and
``TAGINFO_*`` environment variables. Precedence, highest first: CLI,
config file, environment, built-in defaults.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union
from urllib.parse import urlparse

import yaml

from common.errors import ConfigurationError
from constants import AUTO_PLATFORM, Constants, Platform
from versioning.format_parser import parse_tag_format

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}

# setting name -> argparse dest
_CLI_DESTS = {
    "tag_type": "TAG_TYPE",
    "repository": "REPOSITORY",
    "platform": "PLATFORM",
    "owner": "OWNER",
    "repo": "REPO",
    "base_url": "BASE_URL",
    "token": "TOKEN",
    "skip_certificate_check": "SKIP_CERT_CHECK",
    "tag_format": "TAG_FORMAT",
    "output": "OUTPUT",
    "output_format": "OUTPUT_FORMAT",
}

# settings that may come from TAGINFO_<NAME>; tokens use the platform variables instead
_ENV_SETTINGS = (
    "tag_type",
    "repository",
    "platform",
    "owner",
    "repo",
    "base_url",
    "skip_certificate_check",
    "tag_format",
    "output_format",
)


@dataclass
class Settings:  # pylint: disable=too-many-instance-attributes
    """Validated settings for one taginfo run."""
    tag_name: str
    tag_type: str = "tags"
    repository: Optional[str] = None
    platform: str = AUTO_PLATFORM
    owner: Optional[str] = None
    repo: Optional[str] = None
    base_url: Optional[str] = None
    token: Optional[str] = None
    ignore_cert_errors: bool = False
    tag_format: Optional[List[str]] = None
    output: Optional[str] = None
    output_format: str = "json"

    @property
    def wants_latest(self) -> bool:
        return self.tag_name.lower() == Constants.LATEST


def _read_config(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as fh:
        if path.lower().endswith(".json"):
            data = json.load(fh)
        else:
            data = yaml.safe_load(fh)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return {str(key).replace("-", "_"): value for key, value in data.items()}


def load_config_file(path: Optional[str] = None) -> Dict[str, Any]:
    """Load settings from a YAML or JSON config file.

    An explicit path must exist and parse. Without one, the first
    existing default location is used; none existing yields ``{}``.

    Raises:
        ConfigurationError: explicit file missing, or any file unparseable
    """
    if path:
        if not os.path.isfile(path):
            raise ConfigurationError(f"Config file not found: {path}")
        candidates = [path]
    else:
        candidates = [
            os.path.expanduser(p) for p in Constants.DEFAULT_CONFIG_FILES
            if os.path.isfile(os.path.expanduser(p))
        ][:1]

    for candidate in candidates:
        try:
            data = _read_config(candidate)
        except (OSError, ValueError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Failed to load config file {candidate}: {exc}") from exc
        logger.debug("Loaded config file: %s", candidate)
        return data
    return {}


def _to_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}")


def _clean(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def build_settings(
    args: Any,
    config: Optional[Mapping[str, Any]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Merge CLI arguments, config values and environment into Settings.

    Raises:
        ConfigurationError: on invalid values
    """
    config = config or {}
    env = os.environ if env is None else env

    def _pick(name: str) -> Any:
        value = _clean(getattr(args, _CLI_DESTS[name], None))
        if value is not None:
            return value
        value = _clean(config.get(name))
        if value is not None:
            return value
        if name in _ENV_SETTINGS:
            return _clean(env.get(f"{Constants.ENV_PREFIX}{name.upper()}"))
        return None

    tag_name = _clean(getattr(args, "TAG_NAME", None))
    if not tag_name:
        raise ConfigurationError("tag-name is required and cannot be empty")

    tag_type = str(_pick("tag_type") or "tags").lower()
    if tag_type not in Constants.ITEM_KINDS:
        raise ConfigurationError(f"Invalid tag type: {tag_type}. Must be 'tags' or 'release'")

    platform = str(_pick("platform") or AUTO_PLATFORM).lower()
    if platform != AUTO_PLATFORM and platform not in Constants.SUPPORTED_PLATFORMS:
        raise ConfigurationError(
            f"Unsupported platform: {platform}. Supported: {', '.join(Constants.SUPPORTED_PLATFORMS)}"
        )

    base_url = _pick("base_url")
    if base_url:
        parsed = urlparse(base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ConfigurationError(f"Invalid base URL format: {base_url}")

    output_format = str(_pick("output_format") or "json").lower()
    if output_format not in Constants.OUTPUT_FORMATS:
        raise ConfigurationError(f"Invalid output format: {output_format}")

    skip_cert = _pick("skip_certificate_check")

    return Settings(
        tag_name=tag_name,
        tag_type=tag_type,
        repository=_pick("repository"),
        platform=platform,
        owner=_pick("owner"),
        repo=_pick("repo"),
        base_url=base_url,
        token=_pick("token"),
        ignore_cert_errors=_to_bool(skip_cert, "skip-certificate-check") if skip_cert is not None else False,
        tag_format=parse_tag_format(_pick("tag_format")),
        output=_pick("output"),
        output_format=output_format,
    )


def resolve_token(
    token: Optional[str],
    platform: Union[Platform, str, None],
    env: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """Explicit token, else the platform's token environment variable.

    Gitea Actions also provides GITHUB_TOKEN, so Gitea falls back to it.
    For ``auto`` the first of the GitHub, Gitea and Bitbucket variables wins.
    """
    if token:
        return token
    env = os.environ if env is None else env
    value = platform.value if isinstance(platform, Platform) else (platform or AUTO_PLATFORM)

    if value == Platform.GITHUB.value:
        names = [Constants.ENV_GITHUB_TOKEN]
    elif value == Platform.GITEA.value:
        names = [Constants.ENV_GITEA_TOKEN, Constants.ENV_GITHUB_TOKEN]
    elif value == Platform.BITBUCKET.value:
        names = [Constants.ENV_BITBUCKET_TOKEN]
    else:
        names = [Constants.ENV_GITHUB_TOKEN, Constants.ENV_GITEA_TOKEN, Constants.ENV_BITBUCKET_TOKEN]

    for name in names:
        if env.get(name):
            return env[name]
    return None
