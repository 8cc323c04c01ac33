"""Server status command."""

from ..auth.AuthDelegate import AuthDelegate
from ..StageResult import StageResult
from ._action_command import _action_command
from .ServerAction import ServerAction


def cmd_status(name: str, auth_delegate: AuthDelegate | None = None) -> StageResult:
    """Check whether a server is running."""
    return _action_command(ServerAction.CHECK_STATUS, name, auth_delegate)
