"""Exception types raised across loggit.

Every ``LoggitError`` is fatal: the CLI logs it and exits non-zero.
``NoVersionError`` is the one expected, recoverable signal and is kept
outside that hierarchy so it can never be mistaken for a failure.
"""


class LoggitError(Exception):
    """Base class for errors that abort a loggit run."""


class ConfigError(LoggitError):
    """Configuration file is missing, unreadable or invalid."""


class CommitMessageError(LoggitError):
    """The commit message file could not be read."""


class MalformedVersionError(LoggitError):
    """A bump commit message carries no recognisable version."""


class GitError(LoggitError):
    """A git command failed or could not be started."""

    def __init__(self, message, stderr=""):
        super().__init__(message)
        self.stderr = stderr

    def __str__(self):
        base = super().__str__()
        if self.stderr:
            return f"{base}: {self.stderr}"
        return base


class RangeError(LoggitError):
    """The commit range to scan could not be determined."""


class InconsistentLogError(LoggitError):
    """Subject and body queries returned a different number of commits."""


class ChangelogWriteError(LoggitError):
    """The changelog could not be written; the original file is untouched."""


class NoVersionError(Exception):
    """The commit message does not declare a version bump."""
