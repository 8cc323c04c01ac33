"""Server delete command."""

from ..auth.AuthDelegate import AuthDelegate
from ..StageResult import StageResult
from ._action_command import _action_command
from .ServerAction import ServerAction


def cmd_delete(name: str, keep_file: bool = False, auth_delegate: AuthDelegate | None = None) -> StageResult:
    """Stop a server, remove its descriptor and forget it.

    With ``keep_file`` the descriptor stays on disk. Servers not created by
    pgprefs cannot be deleted.
    """
    return _action_command(ServerAction.DELETE, name, auth_delegate, keep_file=keep_file)
