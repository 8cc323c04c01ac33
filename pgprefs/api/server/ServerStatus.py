"""Server status values."""

from enum import Enum


class ServerStatus(Enum):
    """Derived runtime status of a server. Only the controller changes it."""

    UNKNOWN = "Unknown"
    STARTING = "Starting"
    STARTED = "Started"
    STOPPING = "Stopping"
    STOPPED = "Stopped"
    DELETING = "Deleting"
    RETRYING = "Retrying"
    UPDATING = "Updating"

    @property
    def processing(self) -> bool:
        """True while an action holds the server in a transitional state."""
        return self in _PROCESSING

    @property
    def started(self) -> bool:
        return self in (ServerStatus.STARTED, ServerStatus.RETRYING)


# Retrying is the second attempt of a Start, so it is transitional too
_PROCESSING = frozenset(
    {
        ServerStatus.STARTING,
        ServerStatus.STOPPING,
        ServerStatus.DELETING,
        ServerStatus.UPDATING,
        ServerStatus.RETRYING,
    }
)
