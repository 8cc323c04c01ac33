"""Per-field validation of server settings."""

import logging
from pathlib import Path

from ..config.expand_path import expand_path
from ..user.User import User
from .ServerSettings import ServerSettings

logger = logging.getLogger(__name__)

MIN_PORT = 1
MAX_PORT = 65535


def _creatable(path: Path) -> bool:
    """True if the nearest existing ancestor of ``path`` is a directory."""
    for parent in path.parents:
        try:
            if parent.exists():
                return parent.is_dir()
        except OSError:
            return False
    return False


def _check_directory(path_text: str, required: bool) -> str | None:
    text = path_text.strip()
    if not text:
        return "Required" if required else None
    path = expand_path(text)
    if not path.is_absolute():
        return "Must be an absolute path"
    try:
        if path.exists():
            return None if path.is_dir() else "Not a directory"
    except OSError as e:
        return f"Cannot access: {e.strerror or e}"
    return None if _creatable(path) else "Cannot be created"


def _check_log_file(path_text: str) -> str | None:
    text = path_text.strip()
    if not text:
        return None
    path = expand_path(text)
    if not path.is_absolute():
        return "Must be an absolute path"
    try:
        if path.exists():
            return "Not a file" if path.is_dir() else None
    except OSError as e:
        return f"Cannot access: {e.strerror or e}"
    return None if _creatable(path) else "Cannot be created"


def _check_port(port: str) -> str | None:
    text = port.strip()
    if not text:
        return None
    if not text.isdigit():
        return "Must be a number"
    if not MIN_PORT <= int(text) <= MAX_PORT:
        return f"Must be between {MIN_PORT} and {MAX_PORT}"
    return None


def _check_username(username: str) -> str | None:
    name = username.strip()
    if not name:
        return None
    return None if User.with_name(name) else "No such user"


def validate_server_settings(settings: ServerSettings) -> ServerSettings:
    """Mark each invalid field of ``settings`` in place, never raising.

    Markers from a previous run are cleared first, so repeated calls on the
    same settings produce the same markers. Returns ``settings``.
    """
    settings.set_valid()
    checks = {
        "username": _check_username(settings.username),
        "bin_directory": _check_directory(settings.bin_directory, required=True),
        "data_directory": _check_directory(settings.data_directory, required=True),
        "log_file": _check_log_file(settings.log_file),
        "port": _check_port(settings.port),
    }
    for name, reason in checks.items():
        if reason:
            settings.mark_invalid(name, reason)
    if settings.invalid:
        logger.debug("Invalid settings: %s", settings.invalid)
    return settings
