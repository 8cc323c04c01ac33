"""Raised when an action is requested for a server that is already processing."""

from .PGPrefsError import PGPrefsError


class ServerBusyError(PGPrefsError):
    """Another lifecycle action is in flight for the same server."""
