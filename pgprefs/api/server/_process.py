"""Matching running postgres processes against servers."""

import os
import posixpath

from ..config.expand_path import expand_path
from ..process.RunningProcess import RunningProcess
from ._daemon import _settings_from_args
from .ServerSettings import ServerSettings


def _normalize(path: str) -> str:
    if not path:
        return ""
    return os.path.normpath(str(expand_path(path)))


def _settings_from_process(process: RunningProcess) -> ServerSettings:
    """Best-effort settings for an unmanaged server, from its command line."""
    settings = _settings_from_args(process.args)
    settings.username = process.user
    return settings


def _process_matches(settings: ServerSettings, process: RunningProcess) -> bool:
    """True if ``process`` is a postmaster for these settings.

    The data directory must match. The binary must match too when the process
    reports an absolute path to it.
    """
    data_directory = _normalize(settings.data_directory)
    if not data_directory:
        return False
    found = _settings_from_args(process.args)
    if _normalize(found.data_directory) != data_directory:
        return False
    program = process.args[0] if process.args else ""
    if posixpath.isabs(program) and settings.bin_directory:
        return _normalize(posixpath.dirname(program)) == _normalize(settings.bin_directory)
    return True
