"""Lifecycle actions the controller can run on a server."""

from enum import Enum


class ServerAction(Enum):
    CHECK_STATUS = "CheckStatus"
    START = "Start"
    STOP = "Stop"
    DELETE = "Delete"
    CREATE = "Create"
