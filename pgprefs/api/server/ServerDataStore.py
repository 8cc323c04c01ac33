"""JSON-backed list of saved servers."""

import json
import logging
import threading
from contextlib import suppress
from pathlib import Path
from typing import Any

from ...constants import DEFAULT_DOMAIN, DEFAULT_SERVER_NAME
from ..errors import FileAccessError, ValidationError
from .Server import Server
from .ServerSettings import ServerSettings

logger = logging.getLogger(__name__)


class ServerDataStore:
    """Saved servers, unique by name and kept ordered by name.

    Changes live in memory until ``synchronize`` writes them out. The file is
    single-writer: a concurrent writer's changes are overwritten.
    """

    def __init__(self, path: Path, domain: str = DEFAULT_DOMAIN):
        self.path = Path(path)
        self.domain = domain
        self._servers: list[Server] = []
        self._lock = threading.RLock()

    @property
    def servers(self) -> list[Server]:
        with self._lock:
            return list(self._servers)

    def _sort(self) -> None:
        self._servers.sort(key=lambda s: s.name.lower())

    # ------------------------------------------------------------------
    # Load and save
    # ------------------------------------------------------------------

    def load_servers(self) -> list[Server]:
        """Reload the saved servers from disk.

        Records missing a required key or with a duplicate name are skipped.

        Raises:
            FileAccessError: The file exists but cannot be read or parsed
        """
        records: list[Any] = []
        if self.path.exists():
            try:
                with self.path.open() as fh:
                    raw = json.load(fh)
            except json.JSONDecodeError as e:
                raise FileAccessError(f"Invalid JSON in server store {self.path}: {e}") from e
            except OSError as e:
                raise FileAccessError(f"Cannot read server store {self.path}: {e}") from e
            records = raw.get("servers", []) if isinstance(raw, dict) else []

        loaded: list[Server] = []
        names: set[str] = set()
        for record in records:
            if not isinstance(record, dict) or not Server.has_all_keys(record):
                logger.warning("Skipping incomplete server record: %r", record)
                continue
            server = Server.from_properties(record)
            if not server.name.strip() or server.name in names:
                logger.warning("Skipping server record with blank or duplicate name: %r", server.name)
                continue
            names.add(server.name)
            loaded.append(server)

        with self._lock:
            self._servers = loaded
            self._sort()
            return list(self._servers)

    def synchronize(self) -> None:
        """Write the saved servers to disk atomically.

        Raises:
            FileAccessError: The file cannot be written
        """
        with self._lock:
            data = {"servers": [s.properties for s in self._servers]}
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with temp_path.open("w") as fh:
                json.dump(data, fh, indent=4)
            temp_path.replace(self.path)
        except OSError as e:
            with suppress(OSError):
                temp_path.unlink(missing_ok=True)
            raise FileAccessError(f"Failed to save server store {self.path}: {e}") from e
        logger.debug("Saved %d server(s) to %s", len(data["servers"]), self.path)

    # ------------------------------------------------------------------
    # Lookup and mutation
    # ------------------------------------------------------------------

    def server_with_name(self, name: str) -> Server | None:
        with self._lock:
            return next((s for s in self._servers if s.name == name), None)

    def unique_name(self, name: str) -> str:
        """``name``, or ``name (1)``, ``name (2)`` ... if it is taken."""
        with self._lock:
            taken = {s.name for s in self._servers}
        if name not in taken:
            return name
        i = 1
        while f"{name} ({i})" in taken:
            i += 1
        return f"{name} ({i})"

    def add_server(self, name: str | None = None, settings: ServerSettings | None = None) -> Server:
        """Create and save a server with a unique name (not yet synchronized)."""
        with self._lock:
            server = Server(self.unique_name(name or DEFAULT_SERVER_NAME), self.domain, settings)
            self._servers.append(server)
            self._sort()
            return server

    def save(self, server: Server) -> bool:
        """Add or replace ``server``. Returns False for servers that are never saved.

        Raises:
            ValidationError: A different saved server already has this name
        """
        if not server.saveable:
            return False
        with self._lock:
            clash = self.server_with_name(server.name)
            if clash is not None and clash.uid != server.uid:
                raise ValidationError(f"A server named {server.name!r} already exists")
            self._servers = [s for s in self._servers if s.uid != server.uid]
            self._servers.append(server)
            self._sort()
        return True

    def remove(self, server: Server) -> None:
        with self._lock:
            self._servers = [s for s in self._servers if s.uid != server.uid]

    def remove_all_servers(self) -> None:
        with self._lock:
            self._servers = []
