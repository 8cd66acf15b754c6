"""ANSI color codes for loggit's terminal diagnostics."""

import sys

_CODES = {
    'RED': '\033[0;31m',
    'GREEN': '\033[0;32m',
    'YELLOW': '\033[1;33m',
    'CYAN': '\033[0;36m',
    'BOLD': '\033[1m',
    'NC': '\033[0m',  # No Color
}


class Colors:
    """ANSI color codes; blanked out when the log stream is not a terminal."""
    RED = _CODES['RED']
    GREEN = _CODES['GREEN']
    YELLOW = _CODES['YELLOW']
    CYAN = _CODES['CYAN']
    BOLD = _CODES['BOLD']
    NC = _CODES['NC']

    @classmethod
    def disable(cls):
        for name in _CODES:
            setattr(cls, name, '')

    @classmethod
    def enable(cls):
        for name, code in _CODES.items():
            setattr(cls, name, code)

    @classmethod
    def auto(cls, stream=None):
        """Disable colors unless ``stream`` (stderr by default) is a TTY."""
        stream = stream if stream is not None else sys.stderr
        isatty = getattr(stream, 'isatty', None)
        if isatty is None or not isatty():
            cls.disable()
