"""Raised when a unit, process or server is not present."""

from .PGPrefsError import PGPrefsError


class NotFoundError(PGPrefsError):
    """The requested unit, process or server does not exist."""
