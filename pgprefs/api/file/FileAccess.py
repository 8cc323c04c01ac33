"""Filesystem access, optionally with administrator privileges and ownership changes."""

import logging
import os
import plistlib
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any
from xml.parsers.expat import ExpatError

from ..auth.Credential import Credential
from ..auth.Rights import ADMIN_RIGHTS, Rights
from ..errors import AuthorizationError, FileAccessError, SpawnError
from ..process.ProcessRunner import ProcessRunner
from ..user.User import User
from .FileType import FileType

logger = logging.getLogger(__name__)


def _is_other_user(owner: str | None) -> bool:
    if not owner:
        return False
    user = User.with_name(owner)
    return user is None or user.is_other_user


class FileAccess:
    """Checks, writes, moves and deletes files.

    Every method works unprivileged when ``credential`` is None. With a
    credential the work is done through the process runner as root, so the
    same sudo plumbing covers files and launchctl. ``owner`` sets ownership
    after writing; an owner other than the current user needs a credential.
    """

    rights: Rights = ADMIN_RIGHTS

    def __init__(self, runner: ProcessRunner):
        self.runner = runner

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def type_of(self, path: Path, *, as_user: str | None = None, credential: Credential | None = None) -> FileType:
        """Whether ``path`` is a file, a dir, or absent.

        With ``as_user`` or a credential the check runs as that user (or root),
        which sees paths the current user cannot.
        """
        path = Path(path)
        if as_user is None and credential is None:
            try:
                if path.is_dir():
                    return FileType.DIR
                if path.exists():
                    return FileType.FILE
                return FileType.NONE
            except OSError as e:
                raise FileAccessError(f"Cannot access {path}: {e}") from e

        root = as_user is None
        for flag, found in (("-d", FileType.DIR), ("-e", FileType.FILE)):
            try:
                self.runner.run_executable("test", [flag, str(path)], root=root, user=as_user, credential=credential)
                return found
            except SpawnError as e:
                if e.returncode != 1:
                    raise FileAccessError(f"Cannot access {path}: {e}") from e
        return FileType.NONE

    def exists(self, path: Path, *, as_user: str | None = None, credential: Credential | None = None) -> bool:
        return self.type_of(path, as_user=as_user, credential=credential) is not FileType.NONE

    def read_property_list_file(self, path: Path) -> dict[str, Any] | None:
        """Contents of a property list file, or None if it does not exist."""
        path = Path(path)
        try:
            with path.open("rb") as fh:
                data = plistlib.load(fh)
        except FileNotFoundError:
            return None
        except (OSError, ValueError, ExpatError) as e:
            raise FileAccessError(f"Cannot read property list {path}: {e}") from e
        if not isinstance(data, dict):
            raise FileAccessError(f"Property list {path} is not a dictionary")
        return data

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _chown(self, path: Path, owner: str | None, credential: Credential | None) -> None:
        if not owner:
            return
        self.runner.run_executable("chown", [owner, str(path)], root=True, credential=credential)

    def _require_credential(self, owner: str | None, credential: Credential | None, path: Path) -> None:
        if credential is None and _is_other_user(owner):
            raise AuthorizationError(f"Administrator authorization required to give {path} to {owner}")

    def create_file(
        self,
        path: Path,
        contents: str,
        *,
        owner: str | None = None,
        credential: Credential | None = None,
    ) -> None:
        """Write ``contents`` to ``path``, creating parent directories."""
        path = Path(path)
        self._require_credential(owner, credential, path)
        if credential is None:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(contents, encoding="utf-8")
            except OSError as e:
                raise FileAccessError(f"Cannot write {path}: {e}") from e
            return

        with self.temporary_file(path.suffix) as temp_path:
            try:
                temp_path.write_text(contents, encoding="utf-8")
            except OSError as e:
                raise FileAccessError(f"Cannot write temporary file for {path}: {e}") from e
            self.create_dir(path.parent, credential=credential)
            self.runner.run_executable("cp", [str(temp_path), str(path)], root=True, credential=credential)
            self.runner.run_executable("chmod", ["644", str(path)], root=True, credential=credential)
            self._chown(path, owner, credential)

    def create_property_list_file(
        self,
        path: Path,
        data: dict[str, Any],
        *,
        owner: str | None = None,
        credential: Credential | None = None,
    ) -> None:
        """Write ``data`` as an XML property list."""
        try:
            contents = plistlib.dumps(data, sort_keys=True).decode("utf-8")
        except (TypeError, OverflowError) as e:
            raise FileAccessError(f"Cannot encode property list for {path}: {e}") from e
        self.create_file(path, contents, owner=owner, credential=credential)

    def remove(self, path: Path, *, credential: Credential | None = None) -> None:
        """Delete a file. Silently ignores a path that does not exist."""
        path = Path(path)
        if self.type_of(path) is FileType.DIR:
            raise FileAccessError(f"Refusing to remove directory {path}")
        if credential is None:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise FileAccessError(f"Cannot remove {path}: {e}") from e
            return
        self.runner.run_executable("rm", ["-f", str(path)], root=True, credential=credential)

    def create_dir(
        self,
        path: Path,
        *,
        owner: str | None = None,
        credential: Credential | None = None,
    ) -> None:
        """Create a directory and any missing parents. Silently ignores an existing directory."""
        path = Path(path)
        found = self.type_of(path)
        if found is FileType.DIR:
            return
        if found is FileType.FILE:
            raise FileAccessError(f"Cannot create directory {path}: a file is in the way")
        self._require_credential(owner, credential, path)
        if credential is None:
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise FileAccessError(f"Cannot create directory {path}: {e}") from e
            return
        self.runner.run_executable("mkdir", ["-p", str(path)], root=True, credential=credential)
        self._chown(path, owner, credential)

    def _transfer(
        self,
        verb: str,
        source: Path,
        target: Path,
        to_user: str | None,
        credential: Credential | None,
    ) -> None:
        source, target = Path(source), Path(target)
        self._require_credential(to_user, credential, target)
        if credential is None:
            try:
                if verb == "mv":
                    shutil.move(str(source), str(target))
                else:
                    shutil.copy2(source, target)
            except OSError as e:
                raise FileAccessError(f"Cannot {verb} {source} to {target}: {e}") from e
            return
        args = [str(source), str(target)] if verb == "mv" else ["-p", str(source), str(target)]
        self.runner.run_executable(verb, args, root=True, credential=credential)
        self._chown(target, to_user, credential)

    def move(
        self,
        source: Path,
        target: Path,
        *,
        from_user: str | None = None,
        to_user: str | None = None,
        credential: Credential | None = None,
    ) -> None:
        """Move ``source`` to ``target``, giving it to ``to_user`` afterwards."""
        logger.debug("move %s -> %s (from=%s, to=%s)", source, target, from_user, to_user)
        self._transfer("mv", source, target, to_user, credential)

    def copy(
        self,
        source: Path,
        target: Path,
        *,
        from_user: str | None = None,
        to_user: str | None = None,
        credential: Credential | None = None,
    ) -> None:
        logger.debug("copy %s -> %s (from=%s, to=%s)", source, target, from_user, to_user)
        self._transfer("cp", source, target, to_user, credential)

    # ------------------------------------------------------------------
    # Temporary files
    # ------------------------------------------------------------------

    @contextmanager
    def temporary_file(self, extension: str = "") -> Iterator[Path]:
        """Yield a fresh temporary path that is deleted however the block exits."""
        fd, name = tempfile.mkstemp(suffix=extension, prefix="pgprefs-")
        os.close(fd)
        temp_path = Path(name)
        try:
            yield temp_path
        finally:
            temp_path.unlink(missing_ok=True)
