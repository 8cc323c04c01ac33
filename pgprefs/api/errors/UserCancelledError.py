"""Raised when the user cancels an authorization prompt."""

from .AuthorizationError import AuthorizationError


class UserCancelledError(AuthorizationError):
    def __init__(self, message: str = "Authorization cancelled by user"):
        super().__init__(message, cancelled=True)
