"""Configuration loading and validation for loggit.

A config file is optional. It is a flat JSON object (``loggit.json``) or
the same keys in YAML (``loggit.yaml``). Unset keys, empty strings and
nulls fall back to the defaults in ``DEFAULTS``.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Pattern

import yaml

from loggit.shared.errors import ConfigError, GitError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = ("loggit.json", "loggit.yaml", "loggit.yml")
USER_CONFIG_DIR = Path.home() / ".config"

DEFAULTS: Dict[str, Any] = {
    'BumpVersionMsg': "Bump version",
    'VersionRegexpStr': r"\d+\.\d+\.\d+",
    'LogGitTrailer': "log:",
    'UseCommitTitleMsg': "%s",
    'ChangelogRelativePath': "CHANGELOG.md",
    'VersionHeader': "# Version ",
    'MasterBranchName': "master",
    'AlsoTag': True,
}

STRING_KEYS = tuple(k for k, v in DEFAULTS.items() if isinstance(v, str))
LOGGING_KEY = 'Logging'
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass(frozen=True)
class LoggitConfig:
    """Effective configuration; every field is set once loading returns."""
    bump_marker: str
    version_pattern: Pattern
    trailer_marker: str
    use_subject_sentinel: str
    changelog_path: str
    section_header_template: str
    base_branch_name: str
    also_tag: bool
    logging: Dict[str, Any] = field(default_factory=dict, compare=False)
    source: Optional[Path] = field(default=None, compare=False)


def validate_config(raw: Any) -> List[str]:
    """Check a parsed config object.

    Args:
        raw: Parsed JSON/YAML document.

    Returns:
        List of error messages. Empty list means the config is usable.
    """
    if not isinstance(raw, dict):
        return [f"Config must be an object, got {type(raw).__name__}"]

    errors = []
    for key in STRING_KEYS:
        value = raw.get(key)
        if value is not None and not isinstance(value, str):
            errors.append(f"{key} must be a string, got {type(value).__name__}")

    also_tag = raw.get('AlsoTag')
    if also_tag is not None and not isinstance(also_tag, bool):
        errors.append(f"AlsoTag must be true or false, got {also_tag!r}")

    pattern = raw.get('VersionRegexpStr')
    if isinstance(pattern, str) and pattern:
        try:
            re.compile(pattern)
        except re.error as e:
            errors.append(f"VersionRegexpStr is not a valid regular expression: {e}")

    log_section = raw.get(LOGGING_KEY)
    if log_section is not None:
        if isinstance(log_section, dict):
            errors.extend(_validate_logging(log_section))
        else:
            errors.append(f"{LOGGING_KEY} must be an object")

    return errors


def _validate_logging(section: Dict[str, Any]) -> List[str]:
    errors = []
    enabled = section.get('enabled')
    if enabled is not None and not isinstance(enabled, bool):
        errors.append(f"{LOGGING_KEY}.enabled must be true or false, got {enabled!r}")

    level = section.get('level')
    if level is not None and (not isinstance(level, str) or level.upper() not in LOG_LEVELS):
        errors.append(f"{LOGGING_KEY}.level must be one of {', '.join(LOG_LEVELS)}, got {level!r}")

    log_file = section.get('file')
    if log_file is not None and (not isinstance(log_file, str) or not log_file):
        errors.append(f"{LOGGING_KEY}.file must be a non-empty string")

    for key, minimum in (('max_size_mb', 1), ('backup_count', 0)):
        value = section.get(key)
        if value is None:
            continue
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
            errors.append(f"{LOGGING_KEY}.{key} must be an integer >= {minimum}, got {value!r}")

    return errors


def apply_defaults(raw: Dict[str, Any], source: Optional[Path] = None) -> LoggitConfig:
    """Fill unset fields from ``DEFAULTS`` and build a ``LoggitConfig``."""
    for key in raw:
        if key not in DEFAULTS and key != LOGGING_KEY:
            logger.warning("Ignoring unknown config key: %s", key)

    def pick(key):
        value = raw.get(key)
        if value is None or value == "":
            return DEFAULTS[key]
        return value

    return LoggitConfig(
        bump_marker=pick('BumpVersionMsg'),
        version_pattern=re.compile(pick('VersionRegexpStr')),
        trailer_marker=pick('LogGitTrailer'),
        use_subject_sentinel=pick('UseCommitTitleMsg'),
        changelog_path=pick('ChangelogRelativePath'),
        section_header_template=pick('VersionHeader'),
        base_branch_name=pick('MasterBranchName'),
        also_tag=pick('AlsoTag'),
        logging=dict(raw.get(LOGGING_KEY) or {}),
        source=source,
    )


def _parse_config_file(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    if not text.strip():
        return {}

    try:
        if path.suffix in ('.yaml', '.yml'):
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse config file {path}: {e}") from e


def find_config_file(git=None) -> Optional[Path]:
    """Locate the config file: repository root first, then ~/.config.

    Args:
        git: Git client used to find the repository root. Outside a
             repository (or without a client) only ~/.config is searched.

    Returns:
        Path of the first existing candidate, or None.
    """
    search_dirs = []
    if git is not None:
        try:
            search_dirs.append(git.repo_root())
        except GitError as e:
            logger.debug("No repository root for config lookup: %s", e)
    search_dirs.append(USER_CONFIG_DIR)

    for directory in search_dirs:
        for name in CONFIG_FILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
    return None


def load_config(path: Optional[Path] = None, git=None) -> LoggitConfig:
    """Load the effective loggit configuration.

    Args:
        path: Explicit config file (``-config``). It must exist.
        git: Git client for the default repository-root lookup.

    Returns:
        LoggitConfig with defaults applied.

    Raises:
        ConfigError: If the file is missing (explicit path only),
            unreadable, unparsable or fails validation.
    """
    if path is not None:
        path = Path(path).expanduser()
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
    else:
        path = find_config_file(git)

    if path is None:
        logger.debug("No config file found, using defaults")
        return apply_defaults({})

    logger.debug("Loading config from %s", path)
    raw = _parse_config_file(path)
    if raw is None:
        raw = {}

    errors = validate_config(raw)
    if errors:
        raise ConfigError(f"Invalid config file {path}: " + "; ".join(errors))

    return apply_defaults(raw, source=path)
