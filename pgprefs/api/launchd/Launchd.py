"""launchd adapter - lists, inspects, loads and unloads service units."""

import fnmatch
import logging
from pathlib import Path
from typing import Any

from ..auth.Credential import Credential
from ..auth.Rights import ADMIN_RIGHTS, Rights
from ..errors import SpawnError
from ..process.ProcessRunner import ProcessRunner
from ._parse_launchctl_list import _parse_launchctl_list
from .UnitScope import UnitScope

logger = logging.getLogger(__name__)

LAUNCHCTL = "/bin/launchctl"


class Launchd:
    """Wraps ``launchctl`` for the system or the current user's launchd.

    SYSTEM scope calls always go through the runner's privileged path, so they
    need a credential granting ``rights`` unless pgprefs already runs as root.
    """

    rights: Rights = ADMIN_RIGHTS

    def __init__(self, runner: ProcessRunner):
        self.runner = runner

    @staticmethod
    def needs_authorization(scope: UnitScope) -> bool:
        return scope is UnitScope.SYSTEM

    def list_units(self, pattern: str, scope: UnitScope, credential: Credential | None = None) -> list[str]:
        """Labels of loaded units matching the glob ``pattern``."""
        output = self.runner.run_executable(
            LAUNCHCTL, ["list"], root=self.needs_authorization(scope), credential=credential
        )
        labels: list[str] = []
        for line in output.splitlines():
            # Typical format: "<PID>\t<status>\t<label>" under a "PID Status Label" header
            parts = line.split(None, 2)
            if len(parts) < 3 or parts[0] == "PID":
                continue
            label = parts[2].strip()
            if fnmatch.fnmatchcase(label, pattern):
                labels.append(label)
        return sorted(labels)

    def get_unit(self, name: str, scope: UnitScope, credential: Credential | None = None) -> dict[str, Any] | None:
        """Properties of the loaded unit ``name``, or None if it is not loaded."""
        try:
            output = self.runner.run_executable(
                LAUNCHCTL, ["list", name], root=self.needs_authorization(scope), credential=credential
            )
        except SpawnError as e:
            if e.returncode is not None:
                # launchctl exits non-zero for an unknown label
                return None
            raise
        try:
            return _parse_launchctl_list(output)
        except ValueError as e:
            raise SpawnError(f"Unreadable launchctl output for {name}: {e}", command=[LAUNCHCTL, "list", name]) from e

    def load_unit(
        self,
        descriptor_file: Path,
        scope: UnitScope,
        credential: Credential | None = None,
        force: bool = True,
    ) -> None:
        """Load a unit from its descriptor file.

        ``force`` loads descriptors marked Disabled (manual-start servers).
        launchctl reports some load failures on stderr with exit status 0, so
        any output at all is treated as failure.
        """
        command = f"{LAUNCHCTL} load -F 2>&1" if force else f"{LAUNCHCTL} load 2>&1"
        logger.info("Loading %s (%s)", descriptor_file, scope.value)
        self.runner.run_shell_command(
            command,
            [str(descriptor_file)],
            root=self.needs_authorization(scope),
            credential=credential,
            expect_output=False,
        )

    def unload_unit(self, name: str, scope: UnitScope, credential: Credential | None = None) -> None:
        """Unload the unit ``name``. Succeeds silently if it is not loaded."""
        if self.get_unit(name, scope, credential) is None:
            logger.debug("Unit %s not loaded (%s)", name, scope.value)
            return
        logger.info("Unloading %s (%s)", name, scope.value)
        self.runner.run_shell_command(
            f"{LAUNCHCTL} remove 2>&1",
            [name],
            root=self.needs_authorization(scope),
            credential=credential,
            expect_output=False,
        )
