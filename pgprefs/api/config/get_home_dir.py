"""Get pgprefs home directory path or path under it."""

import os
from pathlib import Path

from ...constants import PGPREFS_HOME_EXT


def get_home_dir(*parts: str) -> Path:
    """Get pgprefs home directory path or path under it.

    If no parts are provided, returns the base pgprefs home directory.
    If parts are provided, returns a path under the pgprefs home directory.

    Checks PGPREFS_HOME environment variable first, defaults to ~/.pgprefs if not set.

    Args:
        *parts: Optional path components to join (e.g., "config.json", "servers.json")

    Returns:
        Absolute path to pgprefs home directory or subpath under it

    Examples:
        >>> get_home_dir()
        Path("/Users/user/.pgprefs")
        >>> get_home_dir("servers.json")
        Path("/Users/user/.pgprefs/servers.json")
    """
    home_env = os.environ.get("PGPREFS_HOME")
    if home_env:
        pgprefs_home = Path(home_env).expanduser().resolve()
    else:
        # Check HOME environment variable (for test isolation)
        user_home = os.environ.get("HOME")
        if user_home:
            pgprefs_home = Path(user_home) / PGPREFS_HOME_EXT
        else:
            pgprefs_home = Path.home() / PGPREFS_HOME_EXT

    return pgprefs_home / Path(*parts) if parts else pgprefs_home
