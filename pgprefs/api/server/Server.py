"""The managed server entity."""

import uuid
from pathlib import Path
from typing import Any

from ...constants import (
    DEFAULT_DOMAIN,
    SYSTEM_AGENTS_DIR,
    SYSTEM_DAEMONS_DIR,
    SYSTEM_LOG_DIR,
    USER_AGENTS_DIR,
    USER_LOG_DIR,
)
from ..config.expand_path import expand_path
from .ServerSettings import ServerSettings
from .ServerStartup import ServerStartup
from .ServerStatus import ServerStatus

# Keys of a persisted server record
NAME_KEY = "name"
DOMAIN_KEY = "domain"
USERNAME_KEY = "username"
BIN_DIRECTORY_KEY = "binDirectory"
DATA_DIRECTORY_KEY = "dataDirectory"
LOG_FILE_KEY = "logFile"
PORT_KEY = "port"
STARTUP_KEY = "startup"

PROPERTY_KEYS = (
    NAME_KEY,
    DOMAIN_KEY,
    USERNAME_KEY,
    BIN_DIRECTORY_KEY,
    DATA_DIRECTORY_KEY,
    LOG_FILE_KEY,
    PORT_KEY,
    STARTUP_KEY,
)


class Server:
    """A named PostgreSQL server with clean and dirty settings and a derived status.

    ``settings`` is the last applied state and ``dirty_settings`` the edit
    buffer; both are always present and ``dirty`` is computed from them.
    External servers were found on the system rather than created here and are
    read-only.
    """

    def __init__(
        self,
        name: str,
        domain: str = DEFAULT_DOMAIN,
        settings: ServerSettings | None = None,
        *,
        external: bool = False,
        daemon_file: Path | None = None,
    ):
        self.uid = uuid.uuid4().hex
        self.name = name
        self.domain = domain
        self._settings = (settings or ServerSettings()).copy()
        self._dirty_settings = self._settings.copy()
        self.status = ServerStatus.UNKNOWN
        self.pid: int | None = None
        self.error: str | None = None
        self.external = external
        self.daemon_loaded_for_all_users = False
        # Where an external server's descriptor was read from
        self._external_daemon_file = daemon_file

    def __repr__(self) -> str:
        return f"Server(name={self.name!r}, domain={self.domain!r}, status={self.status.value}, external={self.external})"

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @property
    def settings(self) -> ServerSettings:
        return self._settings

    @settings.setter
    def settings(self, value: ServerSettings) -> None:
        if value is None:
            raise ValueError("settings cannot be None")
        self._settings = value.copy()

    @property
    def dirty_settings(self) -> ServerSettings:
        return self._dirty_settings

    @dirty_settings.setter
    def dirty_settings(self, value: ServerSettings) -> None:
        if value is None:
            raise ValueError("dirty_settings cannot be None")
        self._dirty_settings = value.copy()

    @property
    def dirty(self) -> bool:
        return self._settings != self._dirty_settings

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @property
    def processing(self) -> bool:
        return self.status.processing

    @property
    def started(self) -> bool:
        return self.status.started

    # ------------------------------------------------------------------
    # Naming
    # ------------------------------------------------------------------

    @property
    def short_name(self) -> str:
        """Name without the domain prefix an external label may carry."""
        if self.external and self.domain and self.name.startswith(self.domain + "."):
            return self.name[len(self.domain) + 1 :]
        return self.name

    @property
    def daemon_name(self) -> str:
        """The launchd label."""
        if self.external or not self.domain:
            return self.name
        return f"{self.domain}.{self.name}"

    # ------------------------------------------------------------------
    # Scope and files
    # ------------------------------------------------------------------

    @staticmethod
    def settings_for_all_users(settings: ServerSettings) -> bool:
        """True if these settings need the system launchd."""
        return settings.has_different_user or settings.startup == ServerStartup.AT_BOOT

    def for_all_users(self, settings: ServerSettings) -> bool:
        if self.external:
            return self.daemon_loaded_for_all_users
        return self.settings_for_all_users(settings)

    @property
    def daemon_for_all_users(self) -> bool:
        return self.for_all_users(self._dirty_settings)

    def daemon_file_for(self, settings: ServerSettings) -> Path:
        """Descriptor path for these settings."""
        if self.external and self._external_daemon_file is not None:
            return self._external_daemon_file
        filename = f"{self.daemon_name}.plist"
        if not self.for_all_users(settings):
            return expand_path(USER_AGENTS_DIR) / filename
        if settings.startup == ServerStartup.AT_LOGIN:
            return Path(SYSTEM_AGENTS_DIR) / filename
        return Path(SYSTEM_DAEMONS_DIR) / filename

    def daemon_file_candidates(self) -> list[Path]:
        """Every location a descriptor for this server could occupy."""
        filename = f"{self.daemon_name}.plist"
        return [
            Path(SYSTEM_DAEMONS_DIR) / filename,
            Path(SYSTEM_AGENTS_DIR) / filename,
            expand_path(USER_AGENTS_DIR) / filename,
        ]

    @property
    def daemon_file(self) -> Path:
        return self.daemon_file_for(self._dirty_settings)

    @property
    def external_daemon_file(self) -> Path | None:
        return self._external_daemon_file

    @property
    def daemon_file_exists(self) -> bool:
        return self.daemon_file.is_file()

    def default_log_for(self, settings: ServerSettings) -> Path:
        log_dir = SYSTEM_LOG_DIR if self.for_all_users(settings) else USER_LOG_DIR
        return expand_path(log_dir) / f"{self.short_name}.log"

    def daemon_log_for(self, settings: ServerSettings) -> Path:
        """The log file launchd redirects stdout and stderr to."""
        if settings.log_file.strip():
            return expand_path(settings.log_file.strip())
        return self.default_log_for(settings)

    @property
    def daemon_log(self) -> Path:
        return self.daemon_log_for(self._dirty_settings)

    @property
    def daemon_log_exists(self) -> bool:
        return self.daemon_log.is_file()

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    @property
    def editable(self) -> bool:
        return not self.external

    @property
    def actionable(self) -> bool:
        """False for an external server we know too little about to run or stop."""
        if not self.external:
            return True
        return self._external_daemon_file is not None or bool(
            self._settings.bin_directory and self._settings.data_directory
        )

    @property
    def saveable(self) -> bool:
        return not self.external

    # ------------------------------------------------------------------
    # Persisted record
    # ------------------------------------------------------------------

    @property
    def properties(self) -> dict[str, Any]:
        """Flat record of the clean settings, as kept by the server store."""
        s = self._settings
        return {
            NAME_KEY: self.name,
            DOMAIN_KEY: self.domain,
            USERNAME_KEY: s.username,
            BIN_DIRECTORY_KEY: s.bin_directory,
            DATA_DIRECTORY_KEY: s.data_directory,
            LOG_FILE_KEY: s.log_file,
            PORT_KEY: s.port,
            STARTUP_KEY: s.startup.label,
        }

    @staticmethod
    def has_all_keys(properties: dict[str, Any]) -> bool:
        return all(key in properties for key in PROPERTY_KEYS)

    @classmethod
    def from_properties(cls, properties: dict[str, Any], name: str | None = None) -> "Server":
        """Rebuild a server from a persisted record.

        Raises:
            KeyError: The record is missing a required key
        """
        missing = [key for key in PROPERTY_KEYS if key not in properties]
        if missing:
            raise KeyError(f"Server record missing keys: {', '.join(missing)}")

        def text(key: str) -> str:
            value = properties[key]
            return "" if value is None else str(value)

        settings = ServerSettings(
            username=text(USERNAME_KEY),
            bin_directory=text(BIN_DIRECTORY_KEY),
            data_directory=text(DATA_DIRECTORY_KEY),
            log_file=text(LOG_FILE_KEY),
            port=text(PORT_KEY),
            startup=ServerStartup.parse(properties[STARTUP_KEY]),
        )
        return cls(name or text(NAME_KEY), text(DOMAIN_KEY) or DEFAULT_DOMAIN, settings)
