"""Error taxonomy shared by every pgprefs component."""

from .AuthorizationError import AuthorizationError
from .ConfigError import ConfigError
from .FileAccessError import FileAccessError
from .NotFoundError import NotFoundError
from .PGPrefsError import PGPrefsError
from .ServerBusyError import ServerBusyError
from .SpawnError import SpawnError
from .UserCancelledError import UserCancelledError
from .ValidationError import ValidationError

__all__ = [
    "AuthorizationError",
    "ConfigError",
    "FileAccessError",
    "NotFoundError",
    "PGPrefsError",
    "ServerBusyError",
    "SpawnError",
    "UserCancelledError",
    "ValidationError",
]
