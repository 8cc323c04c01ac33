"""OS account lookup."""

import os
import pwd
from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    """An OS account, compared against the real user running pgprefs."""

    username: str
    uid: int

    @property
    def is_root_user(self) -> bool:
        return self.uid == 0

    @property
    def is_other_user(self) -> bool:
        """True if this is not the user running the process."""
        return self.uid != os.getuid()

    @classmethod
    def with_name(cls, username: str) -> "User | None":
        """Look up an account by name, or None if no such account exists."""
        name = (username or "").strip()
        if not name:
            return None
        try:
            entry = pwd.getpwnam(name)
        except KeyError:
            return None
        return cls(username=entry.pw_name, uid=entry.pw_uid)

    @classmethod
    def with_uid(cls, uid: int) -> "User | None":
        try:
            entry = pwd.getpwuid(uid)
        except KeyError:
            return None
        return cls(username=entry.pw_name, uid=entry.pw_uid)

    @classmethod
    def current(cls) -> "User":
        """The real user running this process."""
        uid = os.getuid()
        user = cls.with_uid(uid)
        if user is None:
            return cls(username=os.environ.get("USER", str(uid)), uid=uid)
        return user

    @classmethod
    def root(cls) -> "User":
        return cls.with_uid(0) or cls(username="root", uid=0)
