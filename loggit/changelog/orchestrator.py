"""The two loggit flows: append-and-tag, and per-branch changelog."""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional, TextIO

from loggit.changelog.commits import (
    append_range,
    collect_log_messages,
    find_branch_start_commit,
    find_previous_bump_commit,
    resolve_current_branch,
)
from loggit.changelog.version import build_version_header, extract_version, read_commit_message
from loggit.changelog.writer import (
    branch_changelog_path,
    prepend_to_changelog,
    write_branch_changelog_file,
)
from loggit.shared.config import LoggitConfig
from loggit.shared.errors import NoVersionError

logger = logging.getLogger(__name__)


def append_to_changelog(
    config: LoggitConfig,
    git,
    commit_msg_path: Path,
    also_tag: bool,
    today: Optional[date] = None,
) -> Optional[str]:
    """Prepend a section for the version declared in a bump commit.

    Meant to run from a commit-msg hook: ``commit_msg_path`` is the file
    git passes to the hook, and HEAD is still the previous commit.

    Args:
        config: Effective configuration.
        git: Git client.
        commit_msg_path: File holding the commit message being made.
        also_tag: Create a tag named after the version afterwards.
        today: Date for the section header (defaults to today).

    Returns:
        The new version, or None when the commit is not a bump commit
        and nothing was changed.

    Raises:
        LoggitError: On any failure; the changelog is either fully
            rewritten or left as it was.
    """
    message = read_commit_message(commit_msg_path)
    try:
        version = extract_version(message, config.bump_marker, config.version_pattern)
    except NoVersionError as e:
        logger.info("%s", e)
        return None

    header = build_version_header(config.section_header_template, version, today)
    if git.has_commits():
        previous = find_previous_bump_commit(git, config.bump_marker)
        entries = collect_log_messages(
            git, append_range(previous), config.trailer_marker, config.use_subject_sentinel,
        )
    else:
        logger.info("No commits yet, the first section has no entries")
        entries = []

    prepend_to_changelog(Path(config.changelog_path), header, entries)

    if also_tag:
        git.create_tag(version)
        logger.info("Tagged version %s", version)

    return version


def write_branch_changelog(config: LoggitConfig, git, out: Optional[TextIO] = None) -> Path:
    """Write the log entries of the current branch to ``<branch>-CHANGELOG.md``.

    Each line is also echoed to ``out`` (stdout by default).
    """
    out = out if out is not None else sys.stdout
    branch = resolve_current_branch(git)
    start = find_branch_start_commit(git, branch, config.base_branch_name)
    entries = collect_log_messages(
        git, append_range(start), config.trailer_marker, config.use_subject_sentinel,
    )

    path = branch_changelog_path(config.changelog_path, branch)
    for line in write_branch_changelog_file(path, entries):
        out.write(line)
    logger.info("Wrote %d entries to %s", len(entries), path)
    return path
