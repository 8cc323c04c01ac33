"""Runs executables and shell commands, optionally through sudo."""

import fnmatch
import logging
import os
import shlex
import signal
import subprocess
from collections.abc import Sequence
from pathlib import Path

import psutil

from ..auth.Credential import Credential
from ..auth.Rights import ADMIN_RIGHTS, Rights
from ..errors import AuthorizationError, NotFoundError, SpawnError
from ..user.User import User
from ._sudo_failure import _sudo_failure
from .RunningProcess import RunningProcess

logger = logging.getLogger(__name__)

_PROCESS_ATTRS = ["pid", "ppid", "username", "name", "cmdline"]


class ProcessRunner:
    """Subprocess execution and process table lookups.

    "run" methods block until exit and return stdout. "start" methods spawn a
    detached process and return its pid without waiting. With ``root=True``
    (or ``user`` naming another account) the command goes through ``sudo``,
    which needs a credential unless this process is already root.
    """

    rights: Rights = ADMIN_RIGHTS

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Privilege wrapping
    # ------------------------------------------------------------------

    def _wrap(
        self,
        argv: list[str],
        root: bool,
        user: str | None,
        credential: Credential | None,
    ) -> tuple[list[str], str | None]:
        """Prefix argv with sudo when needed. Returns (argv, stdin text)."""
        other_user = user if user and User.with_name(user) != User.current() else None
        if not root and other_user is None:
            return argv, None

        as_user = ["-u", other_user] if other_user and not root else []
        if os.geteuid() == 0:
            return (["sudo", "-n", *as_user, "--", *argv] if as_user else argv), None

        if not self.rights.authorized(credential):
            raise AuthorizationError(f"Administrator authorization required to run {Path(argv[0]).name}")
        secret = credential.secret  # type: ignore[union-attr]
        if secret is None:
            return ["sudo", "-n", *as_user, "--", *argv], None
        return ["sudo", "-S", "-p", "", *as_user, "--", *argv], secret + "\n"

    # ------------------------------------------------------------------
    # Run (blocking)
    # ------------------------------------------------------------------

    def _run(
        self,
        argv: list[str],
        *,
        root: bool,
        user: str | None,
        credential: Credential | None,
        timeout: float | None,
    ) -> str:
        wrapped, stdin_text = self._wrap(argv, root, user, credential)
        logger.debug("run: %s (root=%s, user=%s)", shlex.join(argv), root, user)
        try:
            completed = subprocess.run(
                wrapped,
                input=stdin_text,
                capture_output=True,
                text=True,
                timeout=timeout if timeout is not None else self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise SpawnError(f"{Path(argv[0]).name} timed out after {e.timeout}s", command=argv) from e
        except OSError as e:
            raise SpawnError(f"Failed to run {argv[0]}: {e}", command=argv) from e

        if completed.returncode != 0:
            stderr = (completed.stderr or "").strip()
            if wrapped[0] == "sudo" and wrapped is not argv and _sudo_failure(stderr):
                raise AuthorizationError("Administrator credential was rejected", stale=True)
            output = stderr or (completed.stdout or "").strip()
            message = output or f"{Path(argv[0]).name} exited with status {completed.returncode}"
            raise SpawnError(message, command=argv, returncode=completed.returncode, output=output)
        return completed.stdout or ""

    def run_executable(
        self,
        executable: str | Path,
        args: Sequence[str] = (),
        *,
        root: bool = False,
        user: str | None = None,
        credential: Credential | None = None,
        timeout: float | None = None,
    ) -> str:
        """Run an executable with an argument vector (no shell) and return stdout.

        Raises:
            SpawnError: Failed to launch, timed out, or exited non-zero
            AuthorizationError: Privilege needed but the credential is missing or rejected
        """
        argv = [str(executable), *(str(a) for a in args)]
        return self._run(argv, root=root, user=user, credential=credential, timeout=timeout)

    def run_shell_command(
        self,
        command: str,
        args: Sequence[str] = (),
        *,
        root: bool = False,
        user: str | None = None,
        credential: Credential | None = None,
        expect_output: bool = True,
        timeout: float | None = None,
    ) -> str:
        """Run ``command`` in /bin/sh with each arg shell-quoted and return stdout.

        With ``expect_output=False`` any output at all is treated as failure.
        """
        line = " ".join([command, *(shlex.quote(str(a)) for a in args)])
        output = self._run(["/bin/sh", "-c", line], root=root, user=user, credential=credential, timeout=timeout)
        if not expect_output and output.strip():
            raise SpawnError(f"Unexpected output from {command}: {output.strip()}", command=[line], output=output.strip())
        return output

    # ------------------------------------------------------------------
    # Start (fire-and-forget)
    # ------------------------------------------------------------------

    def _start(self, argv: list[str], *, root: bool, user: str | None, credential: Credential | None) -> int:
        wrapped, stdin_text = self._wrap(argv, root, user, credential)
        logger.debug("start: %s (root=%s, user=%s)", shlex.join(argv), root, user)
        try:
            proc = subprocess.Popen(
                wrapped,
                stdin=subprocess.PIPE if stdin_text else subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                text=True,
                start_new_session=True,
            )
        except OSError as e:
            raise SpawnError(f"Failed to start {argv[0]}: {e}", command=argv) from e
        if stdin_text and proc.stdin is not None:
            try:
                proc.stdin.write(stdin_text)
                proc.stdin.close()
            except OSError as e:
                raise SpawnError(f"Failed to pass credential to {argv[0]}: {e}", command=argv) from e
        return proc.pid

    def start_executable(
        self,
        executable: str | Path,
        args: Sequence[str] = (),
        *,
        root: bool = False,
        user: str | None = None,
        credential: Credential | None = None,
    ) -> int:
        """Spawn an executable without waiting. Returns the child pid."""
        argv = [str(executable), *(str(a) for a in args)]
        return self._start(argv, root=root, user=user, credential=credential)

    def start_shell_command(
        self,
        command: str,
        args: Sequence[str] = (),
        *,
        root: bool = False,
        user: str | None = None,
        credential: Credential | None = None,
    ) -> int:
        line = " ".join([command, *(shlex.quote(str(a)) for a in args)])
        return self._start(["/bin/sh", "-c", line], root=root, user=user, credential=credential)

    # ------------------------------------------------------------------
    # Process table
    # ------------------------------------------------------------------

    @staticmethod
    def _snapshot(info: dict) -> RunningProcess:
        return RunningProcess(
            pid=info["pid"],
            ppid=info.get("ppid") or 0,
            user=info.get("username") or "",
            name=info.get("name") or "",
            args=list(info.get("cmdline") or []),
        )

    def running_processes(self, name_pattern: str) -> list[RunningProcess]:
        """All processes whose executable name matches the glob ``name_pattern``."""
        found: list[RunningProcess] = []
        for proc in psutil.process_iter(_PROCESS_ATTRS, ad_value=None):
            info = proc.info
            if fnmatch.fnmatchcase(info.get("name") or "", name_pattern):
                found.append(self._snapshot(info))
        return found

    def running_process(self, pid: int) -> RunningProcess | None:
        """The process with this pid, or None if it is not running."""
        if pid <= 0:
            return None
        try:
            proc = psutil.Process(pid)
            info = proc.as_dict(attrs=_PROCESS_ATTRS, ad_value=None)
            if proc.status() == psutil.STATUS_ZOMBIE:
                return None
        except psutil.NoSuchProcess:
            return None
        return self._snapshot(info)

    def kill(self, pid: int, *, root: bool = False, credential: Credential | None = None) -> None:
        """Send SIGTERM to ``pid``.

        Raises:
            NotFoundError: No such process
            AuthorizationError: The process belongs to another user and no credential was given
            SpawnError: The privileged kill command failed
        """
        if root:
            self.run_executable("kill", ["-TERM", str(pid)], root=True, credential=credential)
            return
        try:
            psutil.Process(pid).send_signal(signal.SIGTERM)
        except psutil.NoSuchProcess as e:
            raise NotFoundError(f"No process with pid {pid}") from e
        except psutil.AccessDenied as e:
            raise AuthorizationError(f"Administrator authorization required to stop process {pid}") from e

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def verify_credential(self, credential: Credential) -> bool:
        """True if sudo accepts the credential."""
        if os.geteuid() == 0:
            return True
        if credential.secret is None:
            argv, stdin_text = ["sudo", "-n", "-v"], None
        else:
            argv, stdin_text = ["sudo", "-S", "-p", "", "-v"], credential.secret + "\n"
        try:
            completed = subprocess.run(
                argv,
                input=stdin_text,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning("Could not verify credential: %s", e)
            return False
        return completed.returncode == 0
