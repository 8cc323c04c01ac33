"""Raised when server settings or an action request fail validation."""

from .PGPrefsError import PGPrefsError


class ValidationError(PGPrefsError):
    """Settings are invalid, or the action is not permitted for this server."""
