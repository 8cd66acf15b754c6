"""Write changelog files.

Every write goes to a temp file in the target's directory, is fsync'd,
and is then renamed over the target, so readers see either the old file
or the complete new one.
"""

import logging
import os
import stat
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Sequence, TextIO

from loggit.shared.errors import ChangelogWriteError

logger = logging.getLogger(__name__)

DEFAULT_CHANGELOG_NAME = "CHANGELOG.md"
NEW_FILE_MODE = 0o644
BULLET = "* "


@contextmanager
def atomic_replace(path: Path) -> Iterator[TextIO]:
    """Yield a text handle whose content replaces ``path`` on success.

    On any exception inside the block, or while syncing and renaming,
    the temp file is removed and ``path`` is left untouched. OS errors
    are re-raised as ``ChangelogWriteError``.
    """
    path = Path(path)
    directory = path.parent
    tmp_fd = None
    tmp_path = None
    try:
        tmp_fd = tempfile.NamedTemporaryFile(
            mode='w', dir=directory, prefix='.loggit-', suffix='.tmp',
            encoding='utf-8', errors='surrogateescape', newline='', delete=False,
        )
        tmp_path = Path(tmp_fd.name)
        yield tmp_fd
        tmp_fd.flush()
        os.fsync(tmp_fd.fileno())
        tmp_fd.close()
        tmp_fd = None

        if path.exists():
            mode = stat.S_IMODE(path.stat().st_mode)
        else:
            mode = NEW_FILE_MODE
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as e:
        raise ChangelogWriteError(f"Could not write {path}: {e}") from e
    finally:
        if tmp_fd is not None:
            tmp_fd.close()
        if tmp_path is not None:
            try:
                tmp_path.unlink()
            except OSError:
                logger.warning("Could not remove temporary file %s", tmp_path)


def atomic_write(path: Path, content: str) -> None:
    with atomic_replace(path) as f:
        f.write(content)


def render_section(header: str, entries: Sequence[str]) -> str:
    """Render a section: header line, one bullet per entry, blank line."""
    lines = [header]
    lines.extend(BULLET + entry for entry in entries)
    return "\n".join(lines) + "\n\n"


def read_changelog(path: Path) -> str:
    """Return the current changelog content, or "" if there is none yet."""
    try:
        with open(path, encoding='utf-8', errors='surrogateescape', newline='') as f:
            return f.read()
    except FileNotFoundError:
        return ""
    except OSError as e:
        raise ChangelogWriteError(f"Could not read the changelog {path}: {e}") from e


def prepend_to_changelog(path: Path, header: str, entries: Sequence[str]) -> None:
    """Put a new section in front of the existing changelog content.

    The previous content is kept byte for byte after the new section.

    Raises:
        ChangelogWriteError: If reading or replacing the file fails.
    """
    path = Path(path)
    old_content = read_changelog(path)
    atomic_write(path, render_section(header, entries) + old_content)
    logger.info("Added %d entries to %s", len(entries), path)


def branch_changelog_path(changelog_path: str, branch: str) -> Path:
    """Return ``<branch>-<changelog file name>`` in the current directory.

    Slashes in branch names (``feature/x``) become dashes so the log
    stays a single file.
    """
    name = Path(changelog_path).name or DEFAULT_CHANGELOG_NAME
    safe_branch = branch.replace("/", "-")
    return Path(f"{safe_branch}-{name}")


def write_branch_changelog_file(path: Path, entries: Sequence[str]) -> List[str]:
    """Write one bullet line per entry to ``path``, replacing it.

    Returns:
        The written lines, each ending in a newline.
    """
    lines = [f"{BULLET}{entry}\n" for entry in entries]
    atomic_write(path, "".join(lines))
    return lines
