"""Server start command."""

from ..auth.AuthDelegate import AuthDelegate
from ..StageResult import StageResult
from ._action_command import _action_command
from .ServerAction import ServerAction


def cmd_start(name: str, auth_delegate: AuthDelegate | None = None) -> StageResult:
    """Start a server through launchd (writes its descriptor first if needed)."""
    return _action_command(ServerAction.START, name, auth_delegate)
