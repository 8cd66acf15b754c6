"""Detect version-bump commit messages and build changelog headers."""

from datetime import date
from pathlib import Path
from typing import Optional, Pattern

from loggit.shared.errors import CommitMessageError, MalformedVersionError, NoVersionError


def read_commit_message(path: Path) -> str:
    """Read the commit message file git hands to a commit-msg hook."""
    try:
        return Path(path).read_text(encoding="utf-8", errors="surrogateescape")
    except OSError as e:
        raise CommitMessageError(f"Could not read the commit message file {path}: {e}") from e


def extract_version(message: str, bump_marker: str, version_pattern: Pattern) -> str:
    """Extract the new version from a bump commit message.

    Args:
        message: Full commit message.
        bump_marker: Prefix that marks a bump commit (case-sensitive).
        version_pattern: Compiled version regex.

    Returns:
        The leftmost version match; later matches are ignored.

    Raises:
        NoVersionError: If the message does not start with ``bump_marker``.
        MalformedVersionError: If it does, but holds no version.
    """
    if not message or not message.startswith(bump_marker):
        raise NoVersionError("No new version in this commit")

    match = version_pattern.search(message)
    if match is None:
        raise MalformedVersionError(
            f"Invalid format for new version in this commit "
            f"(expected a match for {version_pattern.pattern!r})"
        )
    return match.group(0)


def build_version_header(template: str, version: str, today: Optional[date] = None) -> str:
    """Return e.g. ``"# Version 1.2.0 - 2024-01-01"``."""
    today = today or date.today()
    return f"{template}{version} - {today.isoformat()}"
