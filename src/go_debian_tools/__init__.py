"""Tools for bringing Go modules into Debian."""

__version__ = "0.1.0"
