"""Receiver of discovery results."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ServerSearch import ServerSearch


class SearchDelegate(ABC):
    @abstractmethod
    def did_find_more_servers(self, search: "ServerSearch") -> None:
        """Called on the coordination context when a background search finishes."""
