"""taginfo - tag and release lookup for GitHub, Gitea, Bitbucket and local git

    Resolves "latest" when asked, fetches the item's metadata and prints it
    as JSON or key=value lines.

    Returns:
        int: Exit code
"""
import asyncio
import json
import logging
import os
import sys
import uuid
from typing import Any, Dict, Optional

from args import parse_args
from cli_config import Settings, build_settings, load_config_file, resolve_token
from common.errors import ConfigurationError, TagInfoError
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import AUTO_PLATFORM, Constants, ExitCodes
from repository.errors import PlatformError, UnsupportedOperationError
from repository.factory import create_platform_api
from repository.models import ItemInfo
from repository.repo_info import get_repository_info
from versioning.errors import ResolutionError
from versioning.latest import resolve_latest_tag
from versioning.models import ItemKind

logger = logging.getLogger(__name__)


def _setup_logging(args: Any) -> None:
    """Configure logging from --loglevel and --logfile."""
    configure_logging(getattr(args, "LOG_LEVEL", None))

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def _short_sha(value: str) -> str:
    return value[:Constants.SHORT_SHA_LENGTH] if value else ""


def build_outputs(item: ItemInfo) -> Dict[str, Any]:
    """Output names and values for an item."""
    return {
        "exists": item.exists,
        "name": item.name,
        "item-sha": item.item_sha,
        "item-sha-short": _short_sha(item.item_sha),
        "item-type": item.item_type.value,
        "commit-sha": item.commit_sha,
        "commit-sha-short": _short_sha(item.commit_sha),
        "details": item.details,
        "verified": item.verified,
        "is-draft": item.is_draft,
        "is-prerelease": item.is_prerelease,
    }


def _env_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render_env(outputs: Dict[str, Any]) -> str:
    """``key=value`` lines; multi-line values use the ``key<<DELIMITER`` form."""
    lines = []
    for key, value in outputs.items():
        text = _env_value(value)
        if "\n" in text:
            delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
            lines.extend([f"{key}<<{delimiter}", text, delimiter])
        else:
            lines.append(f"{key}={text}")
    return "\n".join(lines) + "\n"


def render_outputs(outputs: Dict[str, Any], output_format: str) -> str:
    """Render outputs as JSON or env lines."""
    if output_format == "env":
        return render_env(outputs)
    return json.dumps(outputs, ensure_ascii=False, indent=4) + "\n"


def write_outputs(outputs: Dict[str, Any], settings: Settings) -> None:
    """Print or save the outputs, and append them to $GITHUB_OUTPUT when set."""
    text = render_outputs(outputs, settings.output_format)
    if settings.output:
        with open(settings.output, "w", encoding="utf-8") as fh:
            fh.write(text)
        logger.info("Outputs written to: %s", settings.output)
    else:
        sys.stdout.write(text)

    github_output = os.environ.get(Constants.ENV_GITHUB_OUTPUT)
    if github_output:
        with open(github_output, "a", encoding="utf-8") as fh:
            fh.write(render_env(outputs))


async def run(settings: Settings) -> ItemInfo:
    """Discover the repository, resolve the item name and fetch its info."""
    if settings.ignore_cert_errors:
        logger.warning(
            "SSL certificate validation is disabled. This is a security risk and should only "
            "be used with self-hosted instances with self-signed certificates."
        )

    logger.info("Detecting repository configuration...")
    repo_info = await get_repository_info(
        settings.repository, settings.platform, settings.owner, settings.repo
    )
    token = resolve_token(
        settings.token,
        settings.platform if settings.platform != AUTO_PLATFORM else repo_info.platform,
    )

    selection = await create_platform_api(
        repo_info,
        settings.platform,
        token=token,
        base_url=settings.base_url,
        ignore_cert_errors=settings.ignore_cert_errors,
    )
    kind = ItemKind(settings.tag_type)
    logger.info(
        "Repository: %s, Platform: %s, Item type: %s",
        repo_info.display_name(), selection.label, kind.value,
    )

    async with selection.api as api:
        name = settings.tag_name
        if settings.wants_latest:
            name = await resolve_latest_tag(api, settings.tag_format, kind)
            logger.info("Resolved latest %s: %s", kind.label, name)

        logger.info("Fetching %s information for: %s", kind.label, name)
        if kind is ItemKind.RELEASE:
            item = await api.get_release_info(name)
        else:
            item = await api.get_tag_info(name)

    label = kind.label.capitalize()
    if item.exists:
        logger.info('%s "%s" found successfully', label, name)
    else:
        logger.warning('%s "%s" does not exist in the repository', label, name)
    return item


def _exit_code_for(exc: TagInfoError) -> ExitCodes:
    if isinstance(exc, (ConfigurationError, UnsupportedOperationError)):
        return ExitCodes.CONFIG_ERROR
    if isinstance(exc, ResolutionError):
        return ExitCodes.RESOLUTION_ERROR
    if isinstance(exc, PlatformError):
        return ExitCodes.CONNECTION_ERROR
    return ExitCodes.RESOLUTION_ERROR


def main(argv: Optional[list] = None) -> None:
    """Main function of the program."""
    args = parse_args(argv)
    try:
        _setup_logging(args)
    except OSError as exc:
        logger.error("Log file couldn't be opened: %s", exc)
        sys.exit(ExitCodes.FILE_ERROR.value)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    try:
        config = load_config_file(getattr(args, "CONFIG", None))
        settings = build_settings(args, config)
        item = asyncio.run(run(settings))
    except TagInfoError as exc:
        logger.error("%s", exc)
        sys.exit(_exit_code_for(exc).value)

    try:
        write_outputs(build_outputs(item), settings)
    except OSError as exc:
        logger.error("Outputs couldn't be written to disk: %s", exc)
        sys.exit(ExitCodes.FILE_ERROR.value)

    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
