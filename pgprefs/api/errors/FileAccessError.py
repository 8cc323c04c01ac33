"""Raised when a filesystem operation fails."""

from .PGPrefsError import PGPrefsError


class FileAccessError(PGPrefsError):
    """A file or directory could not be read, written, moved or removed."""
