"""Named right-sets required by privileged operations."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .Credential import Credential

# Right requested for every root-owned launchctl, file and kill operation
ADMIN_RIGHT = "system.privilege.admin"


@dataclass(frozen=True)
class Rights:
    """An immutable set of right names.

    Rights from several components are combined into one set so the broker can
    be pre-authorized once for everything an action may need.
    """

    names: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, *names: str) -> "Rights":
        return cls(frozenset(names))

    @classmethod
    def combine(cls, rights: Iterable["Rights"]) -> "Rights":
        merged: set[str] = set()
        for r in rights:
            merged |= r.names
        return cls(frozenset(merged))

    def __or__(self, other: "Rights") -> "Rights":
        return Rights(self.names | other.names)

    def __bool__(self) -> bool:
        return bool(self.names)

    def issubset(self, other: "Rights") -> bool:
        return self.names <= other.names

    def authorized(self, credential: "Credential | None") -> bool:
        """True if the credential is live and grants every right in this set."""
        if credential is None or not credential.valid:
            return False
        return self.issubset(credential.rights)


ADMIN_RIGHTS = Rights.of(ADMIN_RIGHT)
