"""Raised when the pgprefs configuration file cannot be loaded or saved."""

from .PGPrefsError import PGPrefsError


class ConfigError(PGPrefsError):
    """Configuration file is unreadable, malformed or fails validation."""
