"""Search module - discovery of installed and running servers."""

from .SearchDelegate import SearchDelegate
from .ServerSearch import INSTALL_ROOTS, ServerSearch

__all__ = ["INSTALL_ROOTS", "SearchDelegate", "ServerSearch"]
