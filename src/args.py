"""Argument parsing functionality for taginfo."""

import argparse
from constants import AUTO_PLATFORM, Constants


def build_parser() -> argparse.ArgumentParser:
    """Builds the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="taginfo",
        description=(
            "taginfo - Look up a tag or release (or resolve the latest one) "
            "on GitHub, Gitea, Bitbucket or a local git repository"
        ),
        add_help=True,
    )

    parser.add_argument("TAG_NAME",
                        help="Tag or release name to look up, or 'latest'",
                        action="store",
                        type=str)

    parser.add_argument("--tag-type",
                        dest="TAG_TYPE",
                        help="Look up tags or releases (default: tags)",
                        action="store",
                        type=str.lower,
                        choices=Constants.ITEM_KINDS)
    parser.add_argument("--repository",
                        dest="REPOSITORY",
                        help="Repository URL, owner/repo, or local path (default: current checkout)",
                        action="store",
                        type=str)
    parser.add_argument("--platform",
                        dest="PLATFORM",
                        help="Hosting platform (default: auto-detect)",
                        action="store",
                        type=str.lower,
                        choices=[AUTO_PLATFORM] + Constants.SUPPORTED_PLATFORMS)
    parser.add_argument("--owner",
                        dest="OWNER",
                        help="Repository owner (used with --repo)",
                        action="store",
                        type=str)
    parser.add_argument("--repo",
                        dest="REPO",
                        help="Repository name (used with --owner)",
                        action="store",
                        type=str)
    parser.add_argument("--base-url",
                        dest="BASE_URL",
                        help="API base URL for self-hosted instances",
                        action="store",
                        type=str)
    parser.add_argument("--token",
                        dest="TOKEN",
                        help="API token (default: platform token environment variable)",
                        action="store",
                        type=str)
    parser.add_argument("--skip-certificate-check",
                        dest="SKIP_CERT_CHECK",
                        help="Disable TLS certificate verification (self-signed instances only)",
                        action="store_true",
                        default=None)
    parser.add_argument("--tag-format",
                        dest="TAG_FORMAT",
                        help=("Format filter for 'latest' (e.g. X.X.X, ^v\\d+$). "
                              "Repeat, or pass a JSON array, for fallback patterns"),
                        action="append",
                        type=str)

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Write outputs to this file instead of stdout",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (json or env). Default: json",
                        action="store",
                        type=str.lower,
                        choices=Constants.OUTPUT_FORMATS)

    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
