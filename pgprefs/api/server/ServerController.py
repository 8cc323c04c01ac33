"""Runs lifecycle actions on servers and manages their settings."""

import logging
import os
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ...constants import SYSTEM_AGENTS_DIR, SYSTEM_DAEMONS_DIR, USER_AGENTS_DIR
from ..auth.Credential import Credential
from ..auth.PrivilegeBroker import PrivilegeBroker
from ..auth.Rights import Rights
from ..config.expand_path import expand_path
from ..config.PGPrefsConfig import PGPrefsConfig
from ..errors import (
    AuthorizationError,
    NotFoundError,
    PGPrefsError,
    ServerBusyError,
    SpawnError,
    ValidationError,
)
from ..file.FileAccess import FileAccess
from ..launchd.Launchd import Launchd
from ..launchd.UnitScope import UnitScope
from ..process.ProcessRunner import ProcessRunner
from ..process.RunningProcess import RunningProcess
from ..user.User import User
from ._daemon import PID, _daemon_for_all_users, _daemon_from_server, _is_system_file, _settings_from_daemon
from ._process import _process_matches, _settings_from_process
from .Coordinator import Coordinator
from .Server import Server
from .ServerAction import ServerAction
from .ServerDataStore import ServerDataStore
from .ServerDelegate import ServerDelegate
from .ServerSettings import SETTINGS_FIELDS, ServerSettings
from .ServerStartup import ServerStartup
from .ServerStatus import ServerStatus
from .validate_server_settings import validate_server_settings

if TYPE_CHECKING:
    from ..search.ServerSearch import ServerSearch

logger = logging.getLogger(__name__)

# Status held while each action runs. CheckStatus has none.
_PROCESSING_STATUS = {
    ServerAction.START: ServerStatus.STARTING,
    ServerAction.STOP: ServerStatus.STOPPING,
    ServerAction.DELETE: ServerStatus.DELETING,
    ServerAction.CREATE: ServerStatus.UPDATING,
}

# Status after a failed action that got past validation and authorization
_FAILURE_STATUS = {
    ServerAction.CHECK_STATUS: ServerStatus.UNKNOWN,
    ServerAction.START: ServerStatus.STOPPED,
    ServerAction.STOP: ServerStatus.STARTED,
}

POSTGRES_PROCESS_PATTERN = "postgres*"
LOG_TAIL_BYTES = 4096


@dataclass
class _Outcome:
    status: ServerStatus
    pid: int | None = None
    loaded_for_all_users: bool | None = None
    removed: bool = False


def _log_tail(path: Path, size: int = LOG_TAIL_BYTES) -> str:
    """Last ``size`` bytes of a log file, or "" if it cannot be read."""
    try:
        with path.open("rb") as fh:
            fh.seek(0, os.SEEK_END)
            fh.seek(max(fh.tell() - size, 0))
            return fh.read().decode("utf-8", errors="replace")
    except OSError:
        return ""


class RetryOnLogPatterns:
    """Start retry predicate: the server log ends with a recoverable complaint."""

    def __init__(self, patterns: list[str]):
        self.patterns = [p.lower() for p in patterns if p]

    def __call__(self, server: Server) -> bool:
        tail = _log_tail(server.daemon_log_for(server.settings)).lower()
        return any(pattern in tail for pattern in self.patterns)


def is_valid_server_name(name: str) -> bool:
    """Names become file names: non-blank, no slash, no leading dot."""
    stripped = (name or "").strip()
    return bool(stripped) and "/" not in stripped and not stripped.startswith(".")


class ServerController:
    """Drives the server state machine through launchd.

    ``run_action`` does the OS work on a background pool and applies every
    status change and delegate notification on the coordinator. At most one
    action runs per server at a time. This is the one place that catches
    errors from the lower layers and turns them into a failed action.
    """

    def __init__(
        self,
        broker: PrivilegeBroker,
        *,
        config: PGPrefsConfig | None = None,
        delegate: ServerDelegate | None = None,
        runner: ProcessRunner | None = None,
        launchd: Launchd | None = None,
        files: FileAccess | None = None,
        store: ServerDataStore | None = None,
        coordinator: Coordinator | None = None,
        executor: ThreadPoolExecutor | None = None,
        should_retry: Callable[[Server], bool] | None = None,
        search: "ServerSearch | None" = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or PGPrefsConfig()
        self.broker = broker
        self.delegate = delegate
        self.runner = runner or ProcessRunner(timeout=self.config.command_timeout_secs)
        self.launchd = launchd or Launchd(self.runner)
        self.files = files or FileAccess(self.runner)
        self.store = store or ServerDataStore(self.config.store_path, self.config.domain)
        self.coordinator = coordinator or Coordinator()
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.config.max_workers, thread_name_prefix="pgprefs-action"
        )
        self.should_retry = should_retry or RetryOnLogPatterns(self.config.retry_patterns)
        self._search = search
        self._sleep = sleep
        self._busy: set[str] = set()
        self._busy_lock = threading.Lock()
        self.servers: list[Server] = []

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        self.coordinator.shutdown()

    def __enter__(self) -> "ServerController":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    @property
    def domain(self) -> str:
        return self.config.domain

    @property
    def rights(self) -> Rights:
        """Every right a server action may need, for pre-authorizing the broker."""
        return Rights.combine([self.launchd.rights, self.files.rights, self.runner.rights])

    @property
    def search(self) -> "ServerSearch":
        if self._search is None:
            from ..search.ServerSearch import ServerSearch

            self._search = ServerSearch(self)
        return self._search

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def is_busy(self, server: Server) -> bool:
        with self._busy_lock:
            return server.uid in self._busy

    def run_action(
        self,
        action: ServerAction,
        server: Server,
        credential: Credential | None = None,
        *,
        keep_file: bool = False,
    ) -> "Future[bool]":
        """Run ``action`` on ``server`` in the background.

        The returned future resolves to True on success and False on failure,
        after the delegate has received the terminal notification.
        ``keep_file`` applies to Delete and leaves the descriptor in place.

        Raises:
            ServerBusyError: Another action is still running for this server
        """
        with self._busy_lock:
            if server.uid in self._busy:
                raise ServerBusyError(f"{server.name} is busy ({server.status.value})")
            self._busy.add(server.uid)

        future: Future[bool] = Future()
        try:
            previous = self.coordinator.call(self._begin, action, server)
            self._executor.submit(self._work, action, server, previous, credential, keep_file, future)
        except BaseException:
            self._release(server)
            raise
        return future

    def _release(self, server: Server) -> None:
        with self._busy_lock:
            self._busy.discard(server.uid)

    def _notify(self, method: str, *args: Any) -> None:
        if self.delegate is None:
            return
        try:
            getattr(self.delegate, method)(*args)
        except Exception:
            logger.exception("Server delegate %s raised", method)

    def _set_status(self, server: Server, status: ServerStatus) -> None:
        if server.status is status:
            return
        server.status = status
        self._notify("did_change_server_status", server)

    def _begin(self, action: ServerAction, server: Server) -> ServerStatus:
        previous = server.status
        logger.info("%s %s", action.value, server.name)
        self._notify("will_run_action", server, action)
        processing = _PROCESSING_STATUS.get(action)
        if processing is not None:
            self._set_status(server, processing)
        return previous

    def _work(
        self,
        action: ServerAction,
        server: Server,
        previous: ServerStatus,
        credential: Credential | None,
        keep_file: bool,
        future: "Future[bool]",
    ) -> None:
        try:
            outcome = self._perform(action, server, credential, keep_file)
        except Exception as e:
            if isinstance(e, AuthorizationError):
                self.broker.invalidate(e)
            if isinstance(e, PGPrefsError):
                logger.error("%s %s failed: %s", action.value, server.name, e)
            else:
                logger.exception("%s %s failed unexpectedly", action.value, server.name)
            self.coordinator.post(self._fail, action, server, previous, e, future)
        else:
            self.coordinator.post(self._succeed, action, server, outcome, future)

    def _succeed(self, action: ServerAction, server: Server, outcome: _Outcome, future: "Future[bool]") -> None:
        try:
            server.error = None
            server.pid = outcome.pid
            if outcome.loaded_for_all_users is not None:
                server.daemon_loaded_for_all_users = outcome.loaded_for_all_users
            if outcome.removed:
                self.servers = [s for s in self.servers if s.uid != server.uid]
            self._set_status(server, outcome.status)
            logger.info("%s %s succeeded (%s)", action.value, server.name, server.status.value)
            self._notify("did_run_action", server, action)
            self._notify("did_succeed_action", server, action)
        finally:
            self._release(server)
            future.set_result(True)

    def _fail(
        self,
        action: ServerAction,
        server: Server,
        previous: ServerStatus,
        error: Exception,
        future: "Future[bool]",
    ) -> None:
        try:
            message = str(error) or type(error).__name__
            server.error = message
            if action is ServerAction.CHECK_STATUS:
                server.pid = None
            self._set_status(server, self._failure_status(action, previous, error))
            self._notify("did_run_action", server, action)
            self._notify("did_fail_action", server, action, message)
        finally:
            self._release(server)
            future.set_result(False)

    @staticmethod
    def _failure_status(action: ServerAction, previous: ServerStatus, error: Exception) -> ServerStatus:
        if action is ServerAction.CHECK_STATUS:
            return ServerStatus.UNKNOWN
        if isinstance(error, (ValidationError, AuthorizationError)):
            return previous
        return _FAILURE_STATUS.get(action, previous)

    def _perform(
        self,
        action: ServerAction,
        server: Server,
        credential: Credential | None,
        keep_file: bool,
    ) -> _Outcome:
        if action is ServerAction.CHECK_STATUS:
            return self._check_status(server, credential)
        if action is ServerAction.START:
            return self._start(server, credential)
        if action is ServerAction.STOP:
            return self._stop(server, credential)
        if action is ServerAction.DELETE:
            return self._delete(server, credential, keep_file)
        if action is ServerAction.CREATE:
            return self._create(server, credential)
        raise ValueError(f"Unknown action: {action}")

    # ------------------------------------------------------------------
    # Action steps (background thread)
    # ------------------------------------------------------------------

    def _credential(self, root: bool, credential: Credential | None, reason: str) -> Credential | None:
        """A credential for root work, prompting through the broker only if needed."""
        if not root or os.geteuid() == 0:
            return None
        if self.rights.authorized(credential):
            return credential
        return self.broker.authorize(self.rights, reason)

    @staticmethod
    def _reason(action: ServerAction, server: Server) -> str:
        return f"action: {action.value.lower()}, target: {server.name}"

    def _require_valid(self, settings: ServerSettings) -> None:
        checked = validate_server_settings(settings.copy())
        if not checked.valid:
            details = ", ".join(f"{name}: {reason}" for name, reason in checked.invalid.items())
            raise ValidationError(f"Invalid settings ({details})")

    def _find_process(self, settings: ServerSettings) -> RunningProcess | None:
        """A postmaster for these settings started outside of launchd."""
        for process in self.runner.running_processes(POSTGRES_PROCESS_PATTERN):
            if _process_matches(settings, process):
                return process
        return None

    def _find_pid(self, server: Server, settings: ServerSettings, scope: UnitScope, credential: Credential | None) -> int | None:
        """Pid of the running server: the loaded unit's first, then a matching process."""
        unit = self.launchd.get_unit(server.daemon_name, scope, credential)
        if unit is not None:
            pid = unit.get(PID)
            if isinstance(pid, int) and self.runner.running_process(pid) is not None:
                return pid
        process = self._find_process(settings)
        return process.pid if process is not None else None

    def _check_status(self, server: Server, credential: Credential | None) -> _Outcome:
        settings = server.settings
        root = server.for_all_users(settings)
        credential = self._credential(root, credential, self._reason(ServerAction.CHECK_STATUS, server))
        pid = self._find_pid(server, settings, UnitScope.for_all_users(root), credential)
        if pid is None:
            return _Outcome(ServerStatus.STOPPED)
        return _Outcome(ServerStatus.STARTED, pid, root)

    def _descriptor_stale(self, server: Server, settings: ServerSettings) -> bool:
        try:
            existing = self.files.read_property_list_file(server.daemon_file_for(settings))
        except PGPrefsError as e:
            logger.debug("Rewriting unreadable descriptor for %s: %s", server.name, e)
            return True
        if existing != _daemon_from_server(server, settings):
            return True
        return not self.files.exists(server.daemon_log_for(settings))

    def _descriptor_exists(self, path: Path, credential: Credential | None) -> bool:
        """Checks system locations as root when a credential is already held."""
        root = _is_system_file(path) and self.rights.authorized(credential)
        return self.files.exists(path, credential=credential if root else None)

    def _remove_other_descriptors(self, server: Server, keep: Path, credential: Credential | None) -> None:
        """Unload and delete descriptors this server left at other locations."""
        for candidate in server.daemon_file_candidates():
            if candidate == keep or not self._descriptor_exists(candidate, credential):
                continue
            system = _is_system_file(candidate)
            other = self._credential(system, credential, f"action: clean up, target: {server.name}")
            logger.info("Removing old descriptor %s", candidate)
            self.launchd.unload_unit(server.daemon_name, UnitScope.for_all_users(system), other)
            self.files.remove(candidate, credential=other)

    def _write_descriptor(self, server: Server, settings: ServerSettings, credential: Credential | None) -> None:
        """Write the descriptor and make sure the log file exists with the right owner."""
        descriptor = server.daemon_file_for(settings)
        log = server.daemon_log_for(settings)
        owner = settings.username.strip() or None

        self._remove_other_descriptors(server, descriptor, credential)
        self.files.create_dir(log.parent, owner=owner, credential=credential)
        if not self.files.exists(log):
            self.files.create_file(log, "", owner=owner, credential=credential)
        self.files.create_dir(descriptor.parent, credential=credential)
        self.files.create_property_list_file(descriptor, _daemon_from_server(server, settings), credential=credential)
        logger.info("Wrote descriptor %s", descriptor)

    def _launch(
        self,
        server: Server,
        settings: ServerSettings,
        descriptor: Path,
        scope: UnitScope,
        credential: Credential | None,
    ) -> int | None:
        """Reload the unit and poll for the server process. Returns its pid or None."""
        self.launchd.unload_unit(server.daemon_name, scope, credential)
        self.launchd.load_unit(descriptor, scope, credential)
        attempts = self.config.start_poll_attempts
        for attempt in range(attempts):
            pid = self._find_pid(server, settings, scope, credential)
            if pid is not None:
                return pid
            if attempt + 1 < attempts:
                self._sleep(self.config.start_poll_interval_secs)
        return None

    def _start(self, server: Server, credential: Credential | None) -> _Outcome:
        if server.dirty:
            raise ValidationError(f"{server.name} has unsaved changes; apply or revert them before starting")
        settings = server.settings
        if server.editable:
            self._require_valid(settings)
        descriptor = server.daemon_file_for(settings)
        if not server.editable and not descriptor.exists():
            raise ValidationError(f"{server.name} has no descriptor file and cannot be started")

        root = server.for_all_users(settings)
        credential = self._credential(root, credential, self._reason(ServerAction.START, server))
        if server.editable and self._descriptor_stale(server, settings):
            self._write_descriptor(server, settings, credential)

        scope = UnitScope.for_all_users(root)
        pid = self._launch(server, settings, descriptor, scope, credential)
        if pid is None and self.should_retry(server):
            logger.warning("%s did not start, retrying once", server.name)
            self.coordinator.call(self._set_status, server, ServerStatus.RETRYING)
            pid = self._launch(server, settings, descriptor, scope, credential)
        if pid is None:
            lines = [line for line in _log_tail(server.daemon_log_for(settings)).splitlines() if line.strip()]
            raise SpawnError(lines[-1].strip() if lines else f"{server.name} did not start")
        return _Outcome(ServerStatus.STARTED, pid, root)

    def _await_exit(self, server: Server, pid: int) -> None:
        attempts = self.config.stop_poll_attempts
        for attempt in range(attempts):
            if self.runner.running_process(pid) is None:
                return
            if attempt + 1 < attempts:
                self._sleep(self.config.stop_poll_interval_secs)
        raise SpawnError(f"{server.name} did not stop (pid {pid})")

    def _stop_server(self, server: Server, settings: ServerSettings, root: bool, credential: Credential | None) -> None:
        """Unload the unit, or kill an independently started postmaster, and wait for exit."""
        scope = UnitScope.for_all_users(root)
        unit = self.launchd.get_unit(server.daemon_name, scope, credential)
        if unit is not None:
            pid = unit.get(PID) if isinstance(unit.get(PID), int) else None
            self.launchd.unload_unit(server.daemon_name, scope, credential)
        else:
            process = self._find_process(settings)
            pid = process.pid if process is not None else None
            if process is not None:
                other = process.user != User.current().username
                kill_credential = self._credential(other, credential, f"action: stop, target: {server.name}")
                try:
                    self.runner.kill(process.pid, root=other, credential=kill_credential)
                except NotFoundError:
                    logger.debug("Process %d already gone", process.pid)
        if pid is not None:
            self._await_exit(server, pid)

    def _stop(self, server: Server, credential: Credential | None) -> _Outcome:
        settings = server.settings
        root = server.for_all_users(settings)
        credential = self._credential(root, credential, self._reason(ServerAction.STOP, server))
        self._stop_server(server, settings, root, credential)
        return _Outcome(ServerStatus.STOPPED)

    def _delete(self, server: Server, credential: Credential | None, keep_file: bool) -> _Outcome:
        if server.external:
            raise ValidationError(f"{server.name} was not created by pgprefs and cannot be deleted; forget it instead")
        settings = server.settings
        root = server.for_all_users(settings)
        credential = self._credential(root, credential, self._reason(ServerAction.DELETE, server))
        self._stop_server(server, settings, root, credential)

        if not keep_file:
            for candidate in server.daemon_file_candidates():
                if self._descriptor_exists(candidate, credential):
                    system = _is_system_file(candidate)
                    self.files.remove(
                        candidate,
                        credential=self._credential(system, credential, self._reason(ServerAction.DELETE, server)),
                    )

        self.store.remove(server)
        try:
            self.store.synchronize()
        except PGPrefsError:
            self.store.save(server)
            raise
        return _Outcome(ServerStatus.STOPPED, removed=True)

    def _create(self, server: Server, credential: Credential | None) -> _Outcome:
        if not server.editable:
            raise ValidationError(f"{server.name} was not created by pgprefs and is read-only")
        settings = server.settings
        self._require_valid(settings)
        root = server.for_all_users(settings)
        credential = self._credential(root, credential, self._reason(ServerAction.CREATE, server))
        self._write_descriptor(server, settings, credential)
        return _Outcome(ServerStatus.STOPPED)

    def should_check_status(self, server: Server, credential: Credential | None = None) -> bool:
        """True if CheckStatus can run without prompting for a credential."""
        if not server.actionable:
            return False
        if not server.for_all_users(server.settings) or os.geteuid() == 0:
            return True
        return self.rights.authorized(credential) or self.broker.is_authorized(self.rights)

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def daemon_from_server(self, server: Server) -> dict[str, Any]:
        return _daemon_from_server(server)

    def server_from_daemon(
        self,
        daemon: dict[str, Any],
        file: Path | None = None,
        root: bool | None = None,
    ) -> Server:
        """Server for launchd descriptor properties, from a file or a loaded unit.

        The server is external unless its label is ``<domain>.<name>`` for a
        saved server.

        Raises:
            ValidationError: The properties have no label
        """
        label = str(daemon.get("Label") or "")
        if not label:
            raise ValidationError("Descriptor has no Label")
        prefix = self.domain + "."
        known = self.store.server_with_name(label[len(prefix) :]) if label.startswith(prefix) else None
        if known is not None:
            server = Server(known.name, known.domain)
        else:
            server = Server(label, label.rpartition(".")[0], external=True, daemon_file=file)
            server.daemon_loaded_for_all_users = _daemon_for_all_users(file, root)

        settings = _settings_from_daemon(daemon, server, file, root)
        server.settings = settings
        server.dirty_settings = settings
        pid = daemon.get(PID)
        if isinstance(pid, int) and not isinstance(pid, bool):
            server.pid = pid
        return server

    def server_from_properties(self, properties: dict[str, Any], name: str | None = None) -> Server:
        return Server.from_properties(properties, name)

    def properties_from_server(self, server: Server) -> dict[str, Any]:
        return server.properties

    def server_from_settings(self, settings: ServerSettings, name: str, domain: str | None = None) -> Server:
        return Server(name, domain or self.domain, settings)

    def server_from_process(self, process: RunningProcess) -> Server:
        """External server for a postmaster running outside of launchd."""
        settings = _settings_from_process(process)
        name = settings.data_directory or f"{process.name} ({process.pid})"
        server = Server(name, "", settings, external=True)
        server.pid = process.pid
        server.status = ServerStatus.STARTED
        server.daemon_loaded_for_all_users = settings.has_different_user
        return server

    def _descriptor_file_for_label(self, label: str, root: bool) -> Path | None:
        dirs = [SYSTEM_DAEMONS_DIR, SYSTEM_AGENTS_DIR] if root else [str(expand_path(USER_AGENTS_DIR))]
        for directory in dirs:
            path = Path(directory) / f"{label}.plist"
            if path.is_file():
                return path
        return None

    def loaded_server_with_name(self, name: str, root: bool, credential: Credential | None = None) -> Server | None:
        """The server for the launchd unit labelled ``name``, or None if it is not loaded."""
        unit = self.launchd.get_unit(name, UnitScope.for_all_users(root), credential)
        if unit is None:
            return None
        file = self._descriptor_file_for_label(name, root)
        daemon = dict(unit)
        if file is not None:
            on_disk = self.files.read_property_list_file(file)
            if on_disk:
                daemon = {**on_disk, **({PID: unit[PID]} if PID in unit else {})}
        server = self.server_from_daemon(daemon, file=file, root=root)
        server.status = ServerStatus.STARTED if server.pid else ServerStatus.STOPPED
        return server

    # ------------------------------------------------------------------
    # Settings workflow (coordination context)
    # ------------------------------------------------------------------

    def validate_server_settings(self, settings: ServerSettings) -> ServerSettings:
        return validate_server_settings(settings)

    def set_dirty_setting(self, server: Server, name: str, value: Any) -> None:
        """Change one field of the edit buffer."""
        if name not in SETTINGS_FIELDS and name != "startup":
            raise ValueError(f"Unknown setting: {name}")

        def edit() -> None:
            edited = server.dirty_settings.copy()
            if name == "startup":
                edited.startup = ServerStartup.parse(value)
            else:
                setattr(edited, name, "" if value is None else str(value))
            server.dirty_settings = edited

        self.coordinator.call(edit)

    def set_dirty_settings(self, server: Server, settings: ServerSettings) -> None:
        def edit() -> None:
            server.dirty_settings = settings

        self.coordinator.call(edit)

    def set_settings(self, server: Server, settings: ServerSettings | None = None) -> None:
        """Apply ``settings`` (default: the edit buffer) and save the server.

        Raises:
            ServerBusyError: An action is running for this server
            ValidationError: The settings are invalid; nothing is applied
        """
        if self.is_busy(server):
            raise ServerBusyError(f"{server.name} is busy ({server.status.value})")

        def apply() -> None:
            applied = (settings or server.dirty_settings).copy()
            if server.editable:
                self._require_valid(applied)
            server.settings = applied
            server.dirty_settings = applied
            if server.saveable:
                self.store.save(server)
                self.store.synchronize()

        self.coordinator.call(apply)

    def clean(self, server: Server) -> None:
        """Discard edits: the edit buffer goes back to the applied settings."""

        def revert() -> None:
            server.dirty_settings = server.settings

        self.coordinator.call(revert)

    def set_name(self, server: Server, name: str) -> bool:
        """Rename an editable server. Returns False if the name is invalid or taken."""
        name = (name or "").strip()
        if not server.editable or not is_valid_server_name(name) or self.is_busy(server):
            return False
        clash = self.store.server_with_name(name)
        if clash is not None and clash.uid != server.uid:
            return False

        def rename() -> None:
            server.name = name
            if any(s.uid == server.uid for s in self.store.servers):
                self.store.save(server)
                self.store.synchronize()

        self.coordinator.call(rename)
        return True

    def set_startup(self, server: Server, startup: ServerStartup | str | int) -> bool:
        if not server.editable:
            return False
        self.set_dirty_setting(server, "startup", startup)
        return True

    # ------------------------------------------------------------------
    # Server list
    # ------------------------------------------------------------------

    def server_with_name(self, name: str) -> Server | None:
        return next((s for s in self.servers if s.name == name or s.daemon_name == name), None)

    def forget(self, server: Server) -> None:
        """Drop an external server from the in-memory list.

        Raises:
            ValidationError: The server is not external; delete it instead
        """
        if not server.external:
            raise ValidationError(f"{server.name} is managed by pgprefs; delete it instead of forgetting it")

        def drop() -> None:
            self.servers = [s for s in self.servers if s.uid != server.uid]

        self.coordinator.call(drop)

    def refresh_servers(self, credential: Credential | None = None) -> list[Server]:
        """Reload saved servers and add any running or loaded ones not created here.

        Raises:
            ServerBusyError: An action is running
        """
        with self._busy_lock:
            if self._busy:
                raise ServerBusyError("Cannot refresh while server actions are running")
        stored = self.store.load_servers()
        found = self.search.find_started(stored, credential)

        def replace() -> list[Server]:
            self.servers = stored + found
            return list(self.servers)

        return self.coordinator.call(replace)
