"""Select the commits to scan and turn their trailers into log entries.

Two ranges are supported:

* append mode scans everything after the most recent bump commit
  (or the whole history when there is none);
* branch mode scans everything after the point where the current
  branch left the base branch.

In both cases the lower bound is exclusive: ``<hash>..HEAD``.
"""

import logging
from typing import List, Optional

from loggit.shared.errors import GitError, InconsistentLogError, RangeError

logger = logging.getLogger(__name__)

HEAD = "HEAD"


def find_previous_bump_commit(git, bump_marker: str) -> Optional[str]:
    """Return the hash of the most recent bump commit, or None."""
    try:
        hashes = git.query_log(HEAD, "%H", grep=bump_marker, max_count=1)
    except GitError as e:
        raise RangeError(f"Could not read the previous bump-commit hash: {e}") from e

    if not hashes or not hashes[0].strip():
        logger.debug("No previous bump commit, scanning the whole history")
        return None
    return hashes[0].strip()


def append_range(previous_hash: Optional[str]) -> str:
    if previous_hash:
        return f"{previous_hash}..{HEAD}"
    return HEAD


def resolve_current_branch(git) -> str:
    try:
        branch = git.current_branch()
    except GitError as e:
        raise RangeError(f"Could not get the current git branch: {e}") from e
    if not branch:
        raise RangeError("Could not get the current git branch (detached HEAD?)")
    return branch


def find_branch_start_commit(git, branch: str, base_branch: str) -> str:
    """Return the exclusive lower bound for the branch changelog.

    Lists ``<base>~..<branch>`` and takes the oldest commit. When the
    branch was cut from the tip of ``base_branch`` that commit is the
    fork point itself, so everything after it belongs to the branch.

    Raises:
        RangeError: If the base branch cannot be resolved, or the branch
            has no commits after the boundary.
    """
    interval = f"{base_branch}~..{branch}"
    try:
        hashes = [h.strip() for h in git.query_log(interval, "%H") if h.strip()]
    except GitError as e:
        raise RangeError(f"Could not list the commits of {interval}: {e}") from e

    if not hashes:
        raise RangeError(f"Could not read the first commit hash of branch {branch}")
    if len(hashes) < 2:
        raise RangeError(f"Branch {branch} has no commits of its own relative to {base_branch}")

    logger.debug("Branch %s starts after %s", branch, hashes[-1])
    return hashes[-1]


def parse_trailer(body: str, trailer_marker: str) -> Optional[str]:
    """Return the payload of the first trailer line in ``body``, or None."""
    for line in body.strip().splitlines():
        line = line.strip()
        if line.startswith(trailer_marker):
            return line[len(trailer_marker):].strip()
    return None


def pair_log_messages(
    subjects: List[str],
    bodies: List[str],
    trailer_marker: str,
    sentinel: str,
) -> List[str]:
    """Turn positionally aligned subjects and bodies into log entries.

    Raises:
        InconsistentLogError: If the two lists differ in length.
    """
    if len(subjects) != len(bodies):
        raise InconsistentLogError(
            f"Different number of commit bodies ({len(bodies)}) "
            f"and subjects ({len(subjects)})"
        )

    entries = []
    for subject, body in zip(subjects, bodies):
        payload = parse_trailer(body, trailer_marker)
        if payload is None:
            continue
        if payload == sentinel:
            entries.append(subject.strip())
        else:
            entries.append(payload)
    return entries


def collect_log_messages(git, revision_range: str, trailer_marker: str, sentinel: str) -> List[str]:
    """Collect log entries from every trailer-carrying commit in the range."""
    subjects = git.query_log(revision_range, "%s", grep=trailer_marker)
    bodies = git.query_log(revision_range, "%b", grep=trailer_marker)

    entries = pair_log_messages(subjects, bodies, trailer_marker, sentinel)
    logger.debug("Collected %d log entries from %d commits in %s",
                 len(entries), len(subjects), revision_range)
    return entries
