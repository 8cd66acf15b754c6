"""Shared pytest fixtures for loggit tests."""

import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

# Ensure project root is on sys.path for imports
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from loggit.shared.config import apply_defaults
from loggit.shared.errors import GitError

FIELDS = {"%H": 0, "%s": 1, "%b": 2}


class FakeGit:
    """In-memory stand-in for GitClient.

    ``commits`` are ``(hash, subject, body)`` tuples, most recent first,
    matching the order ``git log`` returns. ``ranges`` maps extra
    revision ranges (like ``master~..feature``) to their commits.
    """

    def __init__(
        self,
        commits: Sequence[Tuple[str, str, str]] = (),
        branch: str = "master",
        root: Optional[Path] = None,
        ranges: Optional[Dict[str, List[Tuple[str, str, str]]]] = None,
    ):
        self.commits = list(commits)
        self.branch = branch
        self.root = root
        self.ranges = dict(ranges or {})
        self.tags: List[str] = []
        self.calls: List[tuple] = []
        self.tag_error: Optional[GitError] = None

    def _select(self, revision_range):
        if revision_range in self.ranges:
            return self.ranges[revision_range]
        if revision_range == "HEAD":
            return self.commits
        if revision_range.endswith("..HEAD"):
            lower = revision_range[:-len("..HEAD")]
            hashes = [c[0] for c in self.commits]
            if lower not in hashes:
                raise GitError(f"bad revision '{lower}'")
            return self.commits[:hashes.index(lower)]
        raise GitError(f"ambiguous argument '{revision_range}'")

    def repo_root(self):
        if self.root is None:
            raise GitError("not a git repository")
        return self.root

    def query_log(self, revision_range, pretty, grep=None, max_count=None):
        self.calls.append(("log", revision_range, pretty, grep, max_count))
        selected = [
            c for c in self._select(revision_range)
            if grep is None or grep in f"{c[1]}\n\n{c[2]}"
        ]
        if max_count is not None:
            selected = selected[:max_count]
        return [c[FIELDS[pretty]] for c in selected]

    def has_commits(self):
        return bool(self.commits)

    def current_branch(self):
        return self.branch

    def create_tag(self, name):
        self.calls.append(("tag", name))
        if self.tag_error is not None:
            raise self.tag_error
        if name in self.tags:
            raise GitError("git tag exited with status 128", f"fatal: tag '{name}' already exists")
        self.tags.append(name)


@pytest.fixture
def fake_git():
    """Factory for FakeGit instances."""
    return FakeGit


@pytest.fixture
def default_config():
    """Configuration with every field at its default."""
    return apply_defaults({})


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run the test from an empty temporary directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
