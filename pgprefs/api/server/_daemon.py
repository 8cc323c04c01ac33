"""Conversion between servers and launchd descriptor properties."""

import posixpath
from pathlib import Path
from typing import Any

from ...constants import POSTGRES_EXECUTABLE, SYSTEM_AGENTS_DIR, SYSTEM_DAEMONS_DIR
from ..config.expand_path import expand_path
from .Server import Server
from .ServerSettings import ServerSettings
from .ServerStartup import ServerStartup

LABEL = "Label"
PROGRAM_ARGUMENTS = "ProgramArguments"
WORKING_DIRECTORY = "WorkingDirectory"
USER_NAME = "UserName"
RUN_AT_LOAD = "RunAtLoad"
KEEP_ALIVE = "KeepAlive"
DISABLED = "Disabled"
SESSION_TYPE = "LimitLoadToSessionType"
STDOUT_PATH = "StandardOutPath"
STDERR_PATH = "StandardErrorPath"
ENVIRONMENT = "EnvironmentVariables"
PID = "PID"

# Path settings as typed, before expansion. launchd ignores unknown keys.
SETTINGS_PATHS = "PGPrefsSettingsPaths"
PATH_FIELDS = ("bin_directory", "data_directory", "log_file")

LOGIN_SESSION = "Aqua"


def _program(bin_directory: str) -> str:
    return posixpath.join(bin_directory, POSTGRES_EXECUTABLE)


def _expanded(path: str) -> str:
    """``path`` with ``~`` expanded. launchd passes paths through literally."""
    path = path.strip()
    return str(expand_path(path)) if path else ""


def _daemon_from_server(server: Server, settings: ServerSettings | None = None) -> dict[str, Any]:
    """launchd descriptor properties for ``settings`` (default: clean settings)."""
    settings = settings or server.settings
    bin_directory = _expanded(settings.bin_directory)
    args = [_program(bin_directory), "-D", _expanded(settings.data_directory)]
    if settings.port.strip():
        args += ["-p", settings.port.strip()]
    log = str(server.daemon_log_for(settings))

    daemon: dict[str, Any] = {
        LABEL: server.daemon_name,
        PROGRAM_ARGUMENTS: args,
        WORKING_DIRECTORY: bin_directory,
        RUN_AT_LOAD: True,
        KEEP_ALIVE: {"SuccessfulExit": False},
        STDOUT_PATH: log,
        STDERR_PATH: log,
        SETTINGS_PATHS: {name: getattr(settings, name) for name in PATH_FIELDS},
    }
    if settings.username.strip():
        daemon[USER_NAME] = settings.username.strip()
    if settings.startup == ServerStartup.MANUAL:
        daemon[DISABLED] = True
    elif settings.startup == ServerStartup.AT_LOGIN:
        daemon[SESSION_TYPE] = LOGIN_SESSION
    return daemon


def _option(args: list[str], flag: str) -> str:
    """Value of ``-D dir`` or ``-Ddir`` style options, last one wins."""
    value = ""
    for i, arg in enumerate(args):
        if arg == flag and i + 1 < len(args):
            value = args[i + 1]
        elif arg.startswith(flag) and len(arg) > len(flag):
            value = arg[len(flag) :]
    return value


def _settings_from_args(args: list[str], working_directory: str = "") -> ServerSettings:
    """Bin dir, data dir and port from a postgres command line."""
    bin_directory = working_directory or (posixpath.dirname(args[0]) if args else "")
    return ServerSettings(
        bin_directory=bin_directory,
        data_directory=_option(args[1:], "-D"),
        port=_option(args[1:], "-p"),
    )


def _is_system_file(file: Path | None) -> bool:
    if file is None:
        return False
    parent = str(Path(file).parent)
    return parent in (SYSTEM_DAEMONS_DIR, SYSTEM_AGENTS_DIR)


def _daemon_for_all_users(file: Path | None = None, root: bool | None = None) -> bool:
    """Scope of a descriptor: the observed launchd when known, else its location."""
    if root is not None:
        return root
    return file is None or _is_system_file(file)


def _startup_from_daemon(daemon: dict[str, Any], for_all_users: bool) -> ServerStartup:
    if daemon.get(DISABLED) is True:
        return ServerStartup.MANUAL
    session = daemon.get(SESSION_TYPE)
    sessions = session if isinstance(session, list) else [session]
    if LOGIN_SESSION in sessions:
        return ServerStartup.AT_LOGIN
    # A user agent without a session limit still only runs at login
    return ServerStartup.AT_BOOT if for_all_users else ServerStartup.AT_LOGIN


def _settings_from_daemon(
    daemon: dict[str, Any],
    server: Server,
    file: Path | None = None,
    root: bool | None = None,
) -> ServerSettings:
    """Settings recovered from descriptor properties.

    Paths written by pgprefs come back as they were typed, as long as they
    still expand to what the descriptor holds. Otherwise the descriptor's own
    paths are used, and ``server`` supplies the naming needed to recognise
    the default log path, which is read back as a blank log file.
    """
    args = [str(a) for a in daemon.get(PROGRAM_ARGUMENTS) or []]
    if not args and daemon.get("Program"):
        args = [str(daemon["Program"])]
    settings = _settings_from_args(args, str(daemon.get(WORKING_DIRECTORY) or ""))
    if not settings.data_directory:
        env = daemon.get(ENVIRONMENT) or {}
        settings.data_directory = str(env.get("PGDATA", "")) if isinstance(env, dict) else ""
    settings.username = str(daemon.get(USER_NAME) or "")

    settings.startup = _startup_from_daemon(daemon, _daemon_for_all_users(file, root))

    log = str(daemon.get(STDOUT_PATH) or daemon.get(STDERR_PATH) or "")
    settings.log_file = log
    typed = daemon.get(SETTINGS_PATHS)
    if isinstance(typed, dict):
        _restore_typed_paths(typed, settings, server)
    elif log and Path(log) == server.default_log_for(settings):
        settings.log_file = ""
    return settings


def _restore_typed_paths(typed: dict[str, Any], settings: ServerSettings, server: Server) -> None:
    for name in PATH_FIELDS:
        text = typed.get(name)
        if not isinstance(text, str):
            continue
        if name == "log_file":
            candidate = settings.copy()
            candidate.log_file = text
            matches = bool(settings.log_file) and str(server.daemon_log_for(candidate)) == settings.log_file
        else:
            matches = _expanded(text) == getattr(settings, name)
        if matches:
            setattr(settings, name, text)
