"""Config API module."""

from .expand_path import expand_path
from .get_home_dir import get_home_dir
from .PGPrefsConfig import PGPrefsConfig

__all__ = ["PGPrefsConfig", "expand_path", "get_home_dir"]
