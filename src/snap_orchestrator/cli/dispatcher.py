"""CLI dispatcher.

Parses the positional verbs and global options and hands off to the run
command. This is the only place where fatal errors become exit codes.
"""

import argparse
import logging
import sys

from .. import __version__
from ..__logger__ import create_logger
from ..__util__ import UsageError
from ..config.loader import generate_example_config
from ..core.orchestrator import Verb, parse_verbs
from .common import create_global_parser, get_log_level
from .run import execute_run

logger = logging.getLogger(__name__)

VERBS = ("pack", "unpack", "restore", "clean", "help")

EPILOG = """\
examples:
  snap pack                      pack every target with pack enabled
  snap clean unpack -c ./env     wipe, then restore from the stored artifacts
  snap pack --dry-run            show what would be packed
"""


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="snap",
        description="Pack, restore and clean snapshots of backing services",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
        parents=[create_global_parser()],
    )

    parser.add_argument(
        "verbs",
        nargs="*",
        metavar="COMMAND",
        help="pack, unpack (or restore), clean or help; "
        "clean and unpack may be combined",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="store_true",
        help="Show version and exit",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without running any target",
    )
    parser.add_argument(
        "--example-config",
        action="store_true",
        help="Print an example snap.json and exit",
    )
    return parser


def verbs_from_args(args: argparse.Namespace) -> Verb:
    """Translate positional verbs into a Verb set.

    Raises:
        UsageError: For missing or conflicting verbs
    """
    requested = {verb.lower() for verb in args.verbs or []}
    unknown = sorted(requested - set(VERBS))
    if unknown:
        raise UsageError(f"Unknown command '{unknown[0]}'")
    return parse_verbs(
        pack="pack" in requested,
        unpack=bool(requested & {"unpack", "restore"}),
        clean="clean" in requested,
        help="help" in requested,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the snap CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"snap-orchestrator {__version__}")
        return 0

    if args.example_config:
        print(generate_example_config(), end="")
        return 0

    create_logger(get_log_level(args))

    try:
        verbs = verbs_from_args(args)
    except UsageError as e:
        logger.error("%s", e)
        parser.print_usage(sys.stderr)
        return 1

    if verbs & Verb.HELP:
        parser.print_help()
        return 0

    return execute_run(args, verbs)
