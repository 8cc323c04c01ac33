"""Server stop command."""

from ..auth.AuthDelegate import AuthDelegate
from ..StageResult import StageResult
from ._action_command import _action_command
from .ServerAction import ServerAction


def cmd_stop(name: str, auth_delegate: AuthDelegate | None = None) -> StageResult:
    """Stop a server."""
    return _action_command(ServerAction.STOP, name, auth_delegate)
