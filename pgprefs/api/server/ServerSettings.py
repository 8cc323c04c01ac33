"""Server configuration value object."""

from dataclasses import dataclass, field, replace

from ..user.User import User
from .ServerStartup import ServerStartup

# Text fields, in display order. Each may carry an invalid-reason marker.
SETTINGS_FIELDS = ("username", "bin_directory", "data_directory", "log_file", "port")


@dataclass
class ServerSettings:
    """The six settings that define a server.

    ``invalid`` maps a field name to the reason validation rejected it. It is
    excluded from equality, so two settings compare equal iff the six
    substantive fields match.
    """

    username: str = ""
    bin_directory: str = ""
    data_directory: str = ""
    log_file: str = ""
    port: str = ""
    startup: ServerStartup = ServerStartup.MANUAL
    invalid: dict[str, str] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        self.startup = ServerStartup.parse(self.startup)

    def copy(self) -> "ServerSettings":
        """Independent copy, validity markers included."""
        return replace(self, invalid=dict(self.invalid))

    @property
    def valid(self) -> bool:
        return not self.invalid

    def set_valid(self) -> None:
        """Flag every field as valid."""
        self.invalid.clear()

    def mark_invalid(self, name: str, reason: str) -> None:
        self.invalid[name] = reason

    def invalid_reason(self, name: str) -> str | None:
        return self.invalid.get(name)

    @property
    def has_different_user(self) -> bool:
        """True if the server runs as someone other than the current user."""
        username = self.username.strip()
        return bool(username) and username != User.current().username
