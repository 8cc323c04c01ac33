"""Shared pytest configuration and fixtures for all tests."""

import fnmatch
import importlib
import os
import plistlib
import threading
import time
from contextlib import contextmanager
from pathlib import Path

import pytest

from pgprefs.api.auth import AuthDelegate, Credential, PrivilegeBroker, Rights
from pgprefs.api.config.PGPrefsConfig import PGPrefsConfig
from pgprefs.api.errors import AuthorizationError, NotFoundError, SpawnError
from pgprefs.api.launchd.Launchd import LAUNCHCTL
from pgprefs.api.process import ProcessRunner, RunningProcess
from pgprefs.api.server import Coordinator, ServerController, ServerDelegate
from pgprefs.api.user.User import User

MARKERS = ("unit", "auth", "config", "process", "launchd", "file", "server", "search", "cli")


def pytest_configure(config):
    for marker in MARKERS:
        config.addinivalue_line("markers", f"{marker}: {marker} tests")


def pytest_collection_modifyitems(config, items):
    """Automatically apply markers based on test file location."""
    for item in items:
        if "/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)


def _run_cmd(cmd_func, *args, **kwargs):
    """Run a cmd_* function through all of its progress stages and return the StageResult."""
    result = cmd_func(*args, **kwargs)
    list(result.progress_callback(result))
    return result


@pytest.fixture
def run_cmd():
    return _run_cmd


# =============================================================================
# Fakes
# =============================================================================


def launchctl_dump(value, indent: int = 1) -> str:
    """Render a value the way ``launchctl list <label>`` prints it."""
    pad = "\t" * indent
    if isinstance(value, dict):
        body = [f'{pad}"{k}" = {launchctl_dump(v, indent + 1)};' for k, v in value.items()]
        return "\n".join(["{", *body, "\t" * (indent - 1) + "}"])
    if isinstance(value, list):
        body = [f"{pad}{launchctl_dump(v, indent + 1)};" for v in value]
        return "\n".join(["(", *body, "\t" * (indent - 1) + ")"])
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class FakeRunner(ProcessRunner):
    """In-memory launchctl, root file copies and process table.

    Loading a descriptor "starts" a postgres process unless ``start_succeeds``
    is False. Privileged calls need a credential granting ``rights``. Files
    copied as root land in ``root_files`` instead of the real filesystem.
    """

    def __init__(self, start_succeeds: bool = True, delay: float = 0.0, reject_credentials: bool = False):
        super().__init__()
        self.start_succeeds = start_succeeds
        self.delay = delay
        self.reject_credentials = reject_credentials
        self.units: dict[str, dict] = {}
        self.processes: dict[int, RunningProcess] = {}
        self.root_files: dict[str, bytes] = {}
        self.calls: list[list[str]] = []
        self.loads = 0
        self.active = 0
        self.max_active = 0
        self._next_pid = 4000
        self._lock = threading.Lock()

    # -- bookkeeping ---------------------------------------------------

    def _enter(self, argv: list[str]) -> None:
        with self._lock:
            self.calls.append(argv)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        if self.delay:
            time.sleep(self.delay)

    def _leave(self) -> None:
        with self._lock:
            self.active -= 1

    def _check(self, root: bool, credential: Credential | None) -> None:
        if not root or os.geteuid() == 0:
            return
        if self.reject_credentials:
            raise AuthorizationError("Administrator credential was rejected", stale=True)
        if not self.rights.authorized(credential):
            raise AuthorizationError("Administrator authorization required")

    def add_process(self, args: list[str], user: str | None = None, name: str = "postgres") -> RunningProcess:
        with self._lock:
            self._next_pid += 1
            process = RunningProcess(
                pid=self._next_pid,
                ppid=1,
                user=user if user is not None else User.current().username,
                name=name,
                args=list(args),
            )
            self.processes[process.pid] = process
        return process

    def _read_descriptor(self, path: str) -> dict:
        if path in self.root_files:
            return plistlib.loads(self.root_files[path])
        with open(path, "rb") as fh:
            return plistlib.load(fh)

    def _load(self, path: str) -> None:
        daemon = self._read_descriptor(path)
        self.loads += 1
        unit = {
            "Label": daemon["Label"],
            "LastExitStatus": 0,
            "ProgramArguments": daemon["ProgramArguments"],
        }
        if self.start_succeeds:
            unit["PID"] = self.add_process(daemon["ProgramArguments"]).pid
        self.units[daemon["Label"]] = unit

    def _remove(self, label: str) -> None:
        unit = self.units.pop(label, None)
        if unit is not None and "PID" in unit:
            self.processes.pop(unit["PID"], None)

    # -- ProcessRunner -------------------------------------------------

    def run_executable(self, executable, args=(), *, root=False, user=None, credential=None, timeout=None):
        argv = [str(executable), *(str(a) for a in args)]
        self._enter(argv)
        try:
            self._check(root, credential)
            if argv[0] == LAUNCHCTL and argv[1:] == ["list"]:
                rows = ["PID\tStatus\tLabel"]
                rows += [f"{u.get('PID', '-')}\t0\t{label}" for label, u in self.units.items()]
                return "\n".join(rows) + "\n"
            if argv[0] == LAUNCHCTL and argv[1] == "list":
                unit = self.units.get(argv[2])
                if unit is None:
                    raise SpawnError(f'Could not find service "{argv[2]}"', command=argv, returncode=113)
                return launchctl_dump(unit) + ";\n"
            if argv[0] == "test":
                flag, path = argv[1], argv[2]
                found = Path(path).is_dir() if flag == "-d" else path in self.root_files or Path(path).exists()
                if not found:
                    raise SpawnError(f"test {flag} {path} failed", command=argv, returncode=1)
            if argv[0] == "cp":
                source, target = argv[-2], argv[-1]
                self.root_files[target] = self.root_files.get(source) or Path(source).read_bytes()
            if argv[0] == "rm":
                self.root_files.pop(argv[-1], None)
            return ""
        finally:
            self._leave()

    def run_shell_command(
        self, command, args=(), *, root=False, user=None, credential=None, expect_output=True, timeout=None
    ):
        argv = [command, *(str(a) for a in args)]
        self._enter(argv)
        try:
            self._check(root, credential)
            if command.startswith(f"{LAUNCHCTL} load"):
                self._load(str(args[0]))
            elif command.startswith(f"{LAUNCHCTL} remove"):
                self._remove(str(args[0]))
            return ""
        finally:
            self._leave()

    def running_processes(self, name_pattern):
        with self._lock:
            return [p for p in self.processes.values() if fnmatch.fnmatchcase(p.name, name_pattern)]

    def running_process(self, pid):
        with self._lock:
            return self.processes.get(pid)

    def kill(self, pid, *, root=False, credential=None):
        self._enter(["kill", str(pid)])
        try:
            self._check(root, credential)
            with self._lock:
                if self.processes.pop(pid, None) is None:
                    raise NotFoundError(f"No process with pid {pid}")
        finally:
            self._leave()

    def verify_credential(self, credential):
        return True


class StaticAuthDelegate(AuthDelegate):
    """Answers every prompt with a fixed password, or cancels."""

    def __init__(self, secret: str = "secret", cancel: bool = False):
        self.secret = secret
        self.cancel = cancel
        self.reasons: list[str] = []
        self.deauthorized = 0

    def authorize(self, rights: Rights, reason: str) -> Credential | None:
        self.reasons.append(reason)
        if self.cancel:
            return None
        return Credential(rights, secret=self.secret)

    def deauthorize(self) -> None:
        self.deauthorized += 1


class RecordingDelegate(ServerDelegate):
    """Records every notification as a tuple, in order."""

    def __init__(self):
        self.events: list[tuple] = []
        self.threads: set[str] = set()

    def _record(self, *event) -> None:
        self.threads.add(threading.current_thread().name)
        self.events.append(event)

    def did_change_server_status(self, server):
        self._record("status", server.name, server.status)

    def will_run_action(self, server, action):
        self._record("will", server.name, action)

    def did_run_action(self, server, action):
        self._record("did", server.name, action)

    def did_succeed_action(self, server, action):
        self._record("succeeded", server.name, action)

    def did_fail_action(self, server, action, error):
        self._record("failed", server.name, action, error)

    def kinds(self) -> list[str]:
        return [e[0] for e in self.events if e[0] != "status"]

    def statuses(self) -> list:
        return [e[2] for e in self.events if e[0] == "status"]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def pgprefs_home(tmp_path: Path, monkeypatch) -> Path:
    """Isolated HOME and PGPREFS_HOME. Returns the fake home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("PGPREFS_HOME", str(home / ".pgprefs"))
    return home


@pytest.fixture
def as_postgres_user(monkeypatch) -> User:
    """Pretend the current account is called ``postgres``."""
    postgres = User("postgres", os.getuid())
    real_with_name = User.with_name

    def with_name(cls, username):
        if (username or "").strip() == "postgres":
            return postgres
        return real_with_name(username)

    monkeypatch.setattr(User, "with_name", classmethod(with_name))
    monkeypatch.setattr(User, "current", classmethod(lambda cls: postgres))
    return postgres


@pytest.fixture
def not_root(monkeypatch):
    """Run as an ordinary user even when the test suite runs as root."""
    monkeypatch.setattr(os, "geteuid", lambda: 501)


@pytest.fixture
def fast_config() -> PGPrefsConfig:
    return PGPrefsConfig(
        start_poll_attempts=3,
        start_poll_interval_secs=0.01,
        stop_poll_attempts=3,
        stop_poll_interval_secs=0.01,
    )


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def auth_delegate() -> StaticAuthDelegate:
    return StaticAuthDelegate()


@pytest.fixture
def make_controller(pgprefs_home, fast_config, auth_delegate):
    """Factory for controllers wired to a fake runner. All are closed at teardown."""
    created: list[ServerController] = []

    def factory(runner: FakeRunner | None = None, **kwargs) -> ServerController:
        coordinator = Coordinator()
        broker = PrivilegeBroker(kwargs.pop("auth", auth_delegate), coordinator=coordinator)
        controller = ServerController(
            broker,
            config=kwargs.pop("config", fast_config),
            delegate=kwargs.pop("delegate", RecordingDelegate()),
            runner=runner or FakeRunner(),
            coordinator=coordinator,
            sleep=lambda _secs: None,
            **kwargs,
        )
        created.append(controller)
        return controller

    yield factory
    for controller in created:
        controller.close()


@pytest.fixture
def controller(make_controller, fake_runner) -> ServerController:
    return make_controller(fake_runner)


@pytest.fixture
def fake_open_controller(monkeypatch, make_controller, fake_runner) -> list[ServerController]:
    """Route the cmd_* functions to controllers backed by ``fake_runner``."""
    opened: list[ServerController] = []

    @contextmanager
    def open_controller(config, auth_delegate=None, delegate=None):
        controller = make_controller(fake_runner, config=config)
        opened.append(controller)
        yield controller

    for name in ("_action_command", "cmd_list", "cmd_search"):
        module = importlib.import_module(f"pgprefs.api.server.{name}")
        monkeypatch.setattr(module, "_open_controller", open_controller)
    return opened
