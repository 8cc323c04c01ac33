"""Discovery of installed and already-running PostgreSQL servers."""

import glob
import logging
import os
import threading
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from ...constants import POSTGRES_EXECUTABLE
from ..auth.Credential import Credential
from ..config.expand_path import expand_path
from ..errors import PGPrefsError
from ..launchd.UnitScope import UnitScope
from ..server._process import _normalize
from ..server.Server import Server
from ..server.ServerSettings import ServerSettings
from .SearchDelegate import SearchDelegate

if TYPE_CHECKING:
    from ..server.ServerController import ServerController

logger = logging.getLogger(__name__)

# Directories holding bin/postgres, one per installed version
INSTALL_ROOTS = (
    "/Library/PostgreSQL/*",
    "/Applications/Postgres.app/Contents/Versions/*",
    "/usr/local/pgsql",
    "/usr/local/opt/postgresql*",
    "/opt/homebrew/opt/postgresql*",
)

# Launchd labels that look like PostgreSQL
UNIT_PATTERN = "*[Pp]ostgre*"

DATA_MARKER = "PG_VERSION"


def _data_directory_candidates(install: Path) -> list[Path]:
    """Where the data directory for an installation usually lives."""
    candidates = [install / "data"]
    # Homebrew: <prefix>/opt/postgresql@16 -> <prefix>/var/postgresql@16
    if install.parent.name == "opt":
        prefix = install.parent.parent
        candidates += [prefix / "var" / install.name, prefix / "var" / "postgres"]
    # Postgres.app: Versions/16 -> ~/Library/Application Support/Postgres/var-16
    if install.parent.name == "Versions":
        candidates.append(expand_path(f"~/Library/Application Support/Postgres/var-{install.name}"))
    return candidates


def _owner(path: Path) -> str:
    try:
        return path.owner()
    except (OSError, KeyError):
        return ""


class ServerSearch:
    """Finds PostgreSQL installations and running servers pgprefs does not know about.

    ``find_installed`` scans the usual install locations on a background
    thread and tells the delegate when done. ``find_started`` is a synchronous
    scan of launchd and the process table.
    """

    def __init__(
        self,
        controller: "ServerController",
        delegate: SearchDelegate | None = None,
        roots: Iterable[str] = INSTALL_ROOTS,
    ):
        self.controller = controller
        self.delegate = delegate
        self.roots = tuple(roots)
        self._servers: list[Server] = []
        self._lock = threading.Lock()

    @property
    def servers(self) -> list[Server]:
        """Installations found so far."""
        with self._lock:
            return list(self._servers)

    # ------------------------------------------------------------------
    # Installed
    # ------------------------------------------------------------------

    def _installations(self) -> list[Path]:
        found: list[Path] = []
        for pattern in self.roots:
            for match in sorted(glob.glob(str(expand_path(pattern)))):
                install = Path(match)
                if (install / "bin" / POSTGRES_EXECUTABLE).is_file():
                    found.append(install)
        return found

    def scan_installed(self) -> list[Server]:
        """Servers for every installation found, paired with a data directory when one exists."""
        servers: list[Server] = []
        for install in self._installations():
            data = next(
                (d for d in _data_directory_candidates(install) if (d / DATA_MARKER).is_file()),
                None,
            )
            settings = ServerSettings(
                username=_owner(data) if data is not None else "",
                bin_directory=str(install / "bin"),
                data_directory=str(data) if data is not None else "",
            )
            name = f"PostgreSQL {install.name}"
            servers.append(self.controller.server_from_settings(settings, name))
            logger.debug("Found installation %s (data: %s)", install, data)
        return servers

    def _run_find_installed(self) -> None:
        try:
            found = self.scan_installed()
        except OSError as e:
            logger.warning("Installation search failed: %s", e)
            found = []
        with self._lock:
            known = {_normalize(s.settings.bin_directory) for s in self._servers}
            self._servers += [s for s in found if _normalize(s.settings.bin_directory) not in known]
        if self.delegate is not None:
            self.controller.coordinator.post(self.delegate.did_find_more_servers, self)

    def find_installed(self) -> threading.Thread:
        """Start the installation scan on a background thread and return it."""
        thread = threading.Thread(target=self._run_find_installed, name="pgprefs-search", daemon=True)
        thread.start()
        return thread

    # ------------------------------------------------------------------
    # Started
    # ------------------------------------------------------------------

    def _loaded_servers(self, root: bool, credential: Credential | None, known_labels: set[str]) -> list[Server]:
        found: list[Server] = []
        scope = UnitScope.for_all_users(root)
        for label in self.controller.launchd.list_units(UNIT_PATTERN, scope, credential):
            if label in known_labels:
                continue
            server = self.controller.loaded_server_with_name(label, root, credential)
            if server is not None and server.external:
                found.append(server)
                known_labels.add(label)
        return found

    def find_started(self, known: Iterable[Server] = (), credential: Credential | None = None) -> list[Server]:
        """External servers loaded in launchd or running, that are not in ``known``.

        The system launchd is only scanned when no prompt is needed.
        """
        known = list(known)
        labels = {s.daemon_name for s in known}
        found: list[Server] = []

        scans = [False]
        if os.geteuid() == 0 or self.controller.rights.authorized(credential or self.controller.broker.credential):
            scans.append(True)
        for root in scans:
            try:
                found += self._loaded_servers(root, credential or self.controller.broker.credential, labels)
            except PGPrefsError as e:
                logger.warning("Cannot list %s launchd units: %s", UnitScope.for_all_users(root).value, e)

        data_dirs = {_normalize(s.settings.data_directory) for s in known + found}
        for process in self.controller.runner.running_processes(f"{POSTGRES_EXECUTABLE}*"):
            server = self.controller.server_from_process(process)
            data = _normalize(server.settings.data_directory)
            if not data or data in data_dirs:
                continue
            data_dirs.add(data)
            found.append(server)
        return found
