#!/usr/bin/env python3
"""
loggit: keep CHANGELOG.md in step with commit trailers.

Commits carrying a ``log:`` trailer become changelog entries. When a
commit message starts with "Bump version", every entry since the
previous bump commit is written as a new section at the top of the
changelog, and the version is tagged.

Usage:
    # As a commit-msg hook (git passes the message file)
    loggit .git/COMMIT_EDITMSG

    # Don't tag the new version
    loggit -no-tag .git/COMMIT_EDITMSG

    # Write <branch>-CHANGELOG.md for the current branch
    loggit -branch

    # Use a specific config file
    loggit -config ci/loggit.json .git/COMMIT_EDITMSG

Exit codes:
    0 - Success, or the commit declares no new version
    1 - Any failure (bad config, git error, malformed version, I/O)
    2 - Invalid command line
"""

import argparse
import sys
from pathlib import Path

from loggit import __version__
from loggit.changelog.orchestrator import append_to_changelog, write_branch_changelog
from loggit.git.client import GitClient
from loggit.shared.colors import Colors
from loggit.shared.config import load_config
from loggit.shared.errors import LoggitError
from loggit.shared.logging_config import configure_file_logging, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='loggit',
        description='Generate changelog sections from commit trailers',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    loggit .git/COMMIT_EDITMSG
    loggit -no-tag .git/COMMIT_EDITMSG
    loggit -branch
        """
    )
    parser.add_argument(
        'commit_msg_file',
        nargs='?',
        type=Path,
        help='Commit message file (required unless -branch is given)'
    )
    parser.add_argument(
        '-branch', '--branch',
        action='store_true',
        help='Use all commits from the current branch'
    )
    parser.add_argument(
        '-config', '--config',
        type=Path,
        default=None,
        help='Path to the configuration file'
    )
    parser.add_argument(
        '-no-tag', '--no-tag',
        action='store_true',
        help='Do not tag the new version, whatever AlsoTag says'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Show debug output')
    parser.add_argument('-q', '--quiet', action='store_true', help='Only show warnings and errors')
    parser.add_argument('--no-color', action='store_true', help='Disable colored output')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.branch and args.commit_msg_file is None:
        parser.error("Please provide the commit message file or specify branch mode with -branch")

    if args.no_color:
        Colors.disable()
    else:
        Colors.auto(sys.stderr)

    logger = setup_logging('loggit', verbose=args.verbose, quiet=args.quiet)

    git = GitClient()
    try:
        config = load_config(args.config, git=git)
        configure_file_logging(config.logging)

        if args.branch:
            write_branch_changelog(config, git)
        else:
            also_tag = config.also_tag and not args.no_tag
            append_to_changelog(config, git, args.commit_msg_file, also_tag)
    except LoggitError as e:
        logger.error("%s", e)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
