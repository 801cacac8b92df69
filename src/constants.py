"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    RESOLUTION_ERROR = 3
    CONFIG_ERROR = 4


class Platform(Enum):
    """Git hosting platforms supported by the program.

    Args:
        Enum (string): Platform identifiers accepted on the command line.
    """

    GITHUB = "github"
    GITEA = "gitea"
    BITBUCKET = "bitbucket"


AUTO_PLATFORM = "auto"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    SUPPORTED_PLATFORMS = [
        Platform.GITHUB.value,
        Platform.GITEA.value,
        Platform.BITBUCKET.value,
    ]
    ITEM_KINDS = ["tags", "release"]
    OUTPUT_FORMATS = ["json", "env"]
    LATEST = "latest"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "TAGINFO_LOG_LEVEL"
    ENV_PREFIX = "TAGINFO_"  # TAGINFO_<SETTING> environment overrides
    SHORT_SHA_LENGTH = 7

    # Transport tunables
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    DETECTION_TIMEOUT = 2  # Timeout in seconds for platform detection requests
    GIT_TIMEOUT = 60  # Timeout in seconds for git subprocess calls
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    RATE_LIMIT_RETRIES = 2
    RATE_LIMIT_MAX_WAIT_SEC = 60
    REPO_API_PER_PAGE = 100
    USER_AGENT = "taginfo"

    # Platform API constants
    GITHUB_API_BASE = "https://api.github.com"
    BITBUCKET_API_BASE = "https://api.bitbucket.org/2.0"
    GITEA_API_SUFFIX = "/api/v1"

    # Token environment variables
    ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
    ENV_GITEA_TOKEN = "GITEA_TOKEN"
    ENV_BITBUCKET_TOKEN = "BITBUCKET_TOKEN"

    # CI environment variables used for repository discovery
    ENV_GITHUB_REPOSITORY = "GITHUB_REPOSITORY"
    ENV_GITEA_REPOSITORY = "GITEA_REPOSITORY"
    ENV_GITHUB_SERVER_URL = "GITHUB_SERVER_URL"
    ENV_GITEA_SERVER_URL = "GITEA_SERVER_URL"
    ENV_GITEA_API_URL = "GITEA_API_URL"
    ENV_GITHUB_OUTPUT = "GITHUB_OUTPUT"

    DEFAULT_CONFIG_FILES = [
        "taginfo.yml",
        ".taginfo.yml",
        "~/.config/taginfo/config.yml",
    ]
