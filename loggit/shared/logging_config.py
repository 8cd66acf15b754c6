"""Logging configuration for loggit."""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from loggit.shared.colors import Colors

DEFAULT_LOG_FILE = "~/.cache/loggit/debug.log"

# Sentinel to track whether file logging has already been configured
_file_logging_configured = False


class ColorFormatter(logging.Formatter):
    """Formatter that prefixes each message with a colored level tag."""

    LEVEL_COLORS = {
        logging.DEBUG: ('CYAN', '[DEBUG]'),
        logging.INFO: ('GREEN', '[INFO]'),
        logging.WARNING: ('YELLOW', '[WARN]'),
        logging.ERROR: ('RED', '[ERROR]'),
        logging.CRITICAL: ('RED', '[CRITICAL]'),
    }

    def format(self, record):
        color_name, prefix = self.LEVEL_COLORS.get(record.levelno, ('NC', '[LOG]'))
        color = getattr(Colors, color_name, '')
        message = f"{color}{prefix}{Colors.NC} {record.getMessage()}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def setup_logging(name="loggit", verbose=False, quiet=False):
    """Configure the loggit logger hierarchy.

    Args:
        name: Logger name; module loggers below it inherit the handler.
        verbose: If True, show DEBUG messages (including git commands).
        quiet: If True, show only WARNING and above.

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorFormatter())
        logger.addHandler(handler)

    if verbose:
        logger.setLevel(logging.DEBUG)
    elif quiet:
        logger.setLevel(logging.WARNING)
    else:
        logger.setLevel(logging.INFO)

    return logger


def configure_file_logging(log_config, name="loggit"):
    """Attach a RotatingFileHandler to the loggit logger if enabled.

    Hooks usually run with their output hidden, so a persistent debug
    log is the only record of what a run did.

    Args:
        log_config: Dict with ``enabled``, ``level``, ``file``,
                    ``max_size_mb`` and ``backup_count`` keys.
        name: Logger to attach the handler to.

    Returns:
        The file handler if logging was enabled, None otherwise.
    """
    global _file_logging_configured

    if not log_config or not log_config.get("enabled", False):
        return None

    if _file_logging_configured:
        return None

    level_str = str(log_config.get("level", "debug")).upper()
    level = getattr(logging, level_str, logging.DEBUG)
    log_file = os.path.expanduser(log_config.get("file", DEFAULT_LOG_FILE))
    max_bytes = int(log_config.get("max_size_mb", 5)) * 1024 * 1024
    backup_count = int(log_config.get("backup_count", 3))

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    # Plain-text format, no ANSI escape codes
    handler = RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    logger = logging.getLogger(name)
    logger.addHandler(handler)
    # The console level must not filter records the file wants
    if logger.level == logging.NOTSET or logger.level > level:
        for existing in logger.handlers:
            if existing is not handler and existing.level == logging.NOTSET:
                existing.setLevel(logger.level or logging.INFO)
        logger.setLevel(level)

    _file_logging_configured = True
    logger.debug("File logging enabled: %s (level=%s)", log_file, level_str)

    return handler
