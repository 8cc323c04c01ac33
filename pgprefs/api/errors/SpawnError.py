"""Raised when a subprocess cannot be launched or reports failure."""

from collections.abc import Sequence

from .PGPrefsError import PGPrefsError


class SpawnError(PGPrefsError):
    """A command failed to start, exited non-zero, or printed unexpected output.

    Attributes:
        command: argv of the failed command (secrets are never included)
        returncode: exit status, or None if the process never started
        output: captured stdout/stderr text, stripped
    """

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] = (),
        returncode: int | None = None,
        output: str = "",
    ):
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode
        self.output = output
