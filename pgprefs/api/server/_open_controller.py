"""Assemble a ServerController for one command invocation."""

from collections.abc import Iterator
from contextlib import contextmanager

from ..auth.AuthDelegate import AuthDelegate
from ..auth.Credential import Credential
from ..auth.PrivilegeBroker import PrivilegeBroker
from ..auth.Rights import Rights
from ..config.PGPrefsConfig import PGPrefsConfig
from ..process.ProcessRunner import ProcessRunner
from .Coordinator import Coordinator
from .ServerController import ServerController
from .ServerDelegate import ServerDelegate


class _NoPrompt(AuthDelegate):
    """Used when nobody can answer a prompt: every request is cancelled."""

    def authorize(self, rights: Rights, reason: str) -> Credential | None:
        return None


@contextmanager
def _open_controller(
    config: PGPrefsConfig,
    auth_delegate: AuthDelegate | None = None,
    delegate: ServerDelegate | None = None,
) -> Iterator[ServerController]:
    runner = ProcessRunner(timeout=config.command_timeout_secs)
    coordinator = Coordinator()
    broker = PrivilegeBroker(auth_delegate or _NoPrompt(), verifier=runner.verify_credential, coordinator=coordinator)
    controller = ServerController(
        broker,
        config=config,
        delegate=delegate,
        runner=runner,
        coordinator=coordinator,
    )
    try:
        yield controller
    finally:
        controller.close()
