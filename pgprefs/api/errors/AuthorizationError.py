"""Raised when elevated privileges are missing, refused or revoked."""

from .PGPrefsError import PGPrefsError


class AuthorizationError(PGPrefsError):
    """Credential missing, insufficient or stale.

    Attributes:
        cancelled: The user dismissed the authorization prompt.
        stale: The credential was accepted earlier but the OS now rejects it.
    """

    def __init__(self, message: str, *, cancelled: bool = False, stale: bool = False):
        super().__init__(message)
        self.cancelled = cancelled
        self.stale = stale
