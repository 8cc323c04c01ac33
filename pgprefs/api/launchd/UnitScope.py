"""launchd domain a unit is loaded into."""

from enum import Enum


class UnitScope(Enum):
    """System-wide (root launchd) or per-user launchd."""

    SYSTEM = "system"
    USER = "user"

    @classmethod
    def for_all_users(cls, all_users: bool) -> "UnitScope":
        return cls.SYSTEM if all_users else cls.USER
