"""Receiver of server status changes and action outcomes."""

from abc import ABC

from .Server import Server
from .ServerAction import ServerAction


class ServerDelegate(ABC):  # noqa: B024
    """Callbacks invoked on the coordination context.

    For one action the order is always ``will_run_action``, then
    ``did_run_action``, then exactly one of ``did_succeed_action`` or
    ``did_fail_action``. Status changes in between are reported through
    ``did_change_server_status``. Subclasses override what they need.
    """

    def did_change_server_status(self, server: Server) -> None:
        return None

    def will_run_action(self, server: Server, action: ServerAction) -> None:
        return None

    def did_run_action(self, server: Server, action: ServerAction) -> None:
        return None

    def did_succeed_action(self, server: Server, action: ServerAction) -> None:
        return None

    def did_fail_action(self, server: Server, action: ServerAction, error: str) -> None:
        return None
