"""Thin subprocess wrapper around the git commands loggit needs.

Business logic never calls ``subprocess`` itself; it receives an object
with this interface (``repo_root``, ``query_log``, ``current_branch``,
``create_tag``, ``has_commits``), so tests can pass an in-memory fake instead.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from loggit.shared.errors import GitError

logger = logging.getLogger(__name__)

GIT_EXECUTABLE = "git"


class GitClient:
    """Run git commands in ``cwd`` (the current directory by default)."""

    def __init__(self, cwd: Optional[Path] = None, executable: str = GIT_EXECUTABLE):
        self.cwd = Path(cwd) if cwd is not None else None
        self.executable = executable

    def _run(self, args: List[str]) -> str:
        cmd = [self.executable] + args
        logger.debug("Running: %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                cwd=str(self.cwd) if self.cwd is not None else None,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="surrogateescape",
            )
        except OSError as e:
            raise GitError(f"Could not run {self.executable}: {e}") from e

        if result.returncode != 0:
            raise GitError(
                f"git {' '.join(args)} exited with status {result.returncode}",
                result.stderr.strip(),
            )
        return result.stdout

    def repo_root(self) -> Path:
        """Return the top-level directory of the working tree."""
        return Path(self._run(["rev-parse", "--show-toplevel"]).strip())

    def query_log(
        self,
        revision_range: str,
        pretty: str,
        grep: Optional[str] = None,
        max_count: Optional[int] = None,
    ) -> List[str]:
        """Return one formatted record per commit, most recent first.

        Records are NUL-terminated on the wire (``-z`` with ``tformat``),
        so multi-line bodies and empty bodies each stay a single record.
        ``grep`` is matched as a literal substring of the commit message.
        """
        args = ["log", "-z", f"--pretty=tformat:{pretty}"]
        if grep is not None:
            args += ["--fixed-strings", f"--grep={grep}"]
        if max_count is not None:
            args += ["-n", str(max_count)]
        args.append(revision_range)

        out = self._run(args)
        if not out:
            return []
        records = out.split("\0")
        # tformat terminates every record, leaving one empty tail
        if records[-1] == "":
            records.pop()
        return records

    def has_commits(self) -> bool:
        """Return False while HEAD is unborn (a freshly initialised repo)."""
        try:
            self._run(["rev-parse", "--verify", "-q", "HEAD"])
        except GitError as e:
            # -q silences the unborn-HEAD case; anything else is a real failure
            if e.stderr:
                raise
            return False
        return True

    def current_branch(self) -> str:
        """Return the checked-out branch name, or "" on a detached HEAD."""
        return self._run(["branch", "--show-current"]).strip()

    def create_tag(self, name: str) -> None:
        """Create a lightweight tag at HEAD.

        Raises:
            GitError: If git fails (for example, the tag already exists)
                or prints anything, which ``git tag <name>`` never does
                on success.
        """
        out = self._run(["tag", name])
        if out.strip():
            raise GitError(f"Unexpected output while creating tag {name}", out.strip())
        logger.debug("Created tag %s", name)
