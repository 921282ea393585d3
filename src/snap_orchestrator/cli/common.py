"""Shared CLI utilities and argument parsers."""

import argparse
import os

CONFIG_ENV = "SNAP_CONFIGURATION"


def create_global_parser() -> argparse.ArgumentParser:
    """Create a parser with global options that can be used as a parent."""
    parser = argparse.ArgumentParser(add_help=False)
    add_verbosity_args(parser)
    add_config_args(parser)
    return parser


def add_verbosity_args(parser: argparse.ArgumentParser) -> None:
    """Add verbosity-related arguments to a parser."""
    group = parser.add_argument_group("Output options")
    group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only show warnings and errors",
    )
    group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug output",
    )


def add_config_args(parser: argparse.ArgumentParser) -> None:
    """Add configuration and artifact store arguments to a parser."""
    group = parser.add_argument_group("Configuration options")
    group.add_argument(
        "-c",
        "--config",
        "--configuration",
        dest="config",
        metavar="PATH",
        default=os.environ.get(CONFIG_ENV),
        help=(
            "Configuration file, or a directory containing snap.json "
            f"(default: ${CONFIG_ENV} or ./snap.json)"
        ),
    )
    group.add_argument(
        "--artifact-dir",
        metavar="DIR",
        help="Artifact store (default: ArtifactDirectory property, "
        "$SNAP_ARTIFACT_DIR or ~/.local/share/snap)",
    )


def get_log_level(args: argparse.Namespace) -> str:
    """Determine log level from parsed arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Log level string (DEBUG, INFO, WARNING)
    """
    if getattr(args, "debug", False) or getattr(args, "verbose", False):
        return "DEBUG"
    elif getattr(args, "quiet", False):
        return "WARNING"
    else:
        return "INFO"
