"""loggit: build changelog sections from ``log:`` commit trailers."""

__version__ = "1.0.0"
