"""Server create command."""

from ..auth.AuthDelegate import AuthDelegate
from ..StageResult import StageResult
from ._action_command import _action_command
from .ServerAction import ServerAction


def cmd_create(name: str, auth_delegate: AuthDelegate | None = None) -> StageResult:
    """Rewrite a server's launchd descriptor and log file without starting it."""
    return _action_command(ServerAction.CREATE, name, auth_delegate)
