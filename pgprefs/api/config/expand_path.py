"""Expand a user-supplied path string."""

import os
from pathlib import Path


def expand_path(path: str) -> Path:
    """Expand ``~`` against the HOME environment variable.

    ``Path.expanduser`` consults the password database when HOME is unset, so
    HOME is read explicitly to keep test isolation working.
    """
    if path == "~" or path.startswith("~/"):
        home = os.environ.get("HOME") or str(Path.home())
        return Path(home + path[1:])
    return Path(path)
