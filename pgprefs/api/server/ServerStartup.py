"""When launchd should start a server."""

from enum import IntEnum
from typing import Any


class ServerStartup(IntEnum):
    MANUAL = 0
    AT_BOOT = 1
    AT_LOGIN = 2

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, value: Any) -> "ServerStartup":
        """Tolerant decode of a stored startup value.

        Accepts the enum itself, its integer value, its label ("AtBoot") or
        member name ("at_boot") in any case. Anything else means Manual.
        """
        if value is None:
            return cls.MANUAL
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                return cls.MANUAL
        text = str(value).strip().lower()
        if text.isdigit():
            return cls.parse(int(text))
        for member in cls:
            if text in (member.label.lower(), member.name.lower()):
                return member
        return cls.MANUAL


_LABELS = {
    ServerStartup.MANUAL: "Manual",
    ServerStartup.AT_BOOT: "AtBoot",
    ServerStartup.AT_LOGIN: "AtLogin",
}
