"""Server module - entity, settings, lifecycle controller and store."""

from .Coordinator import Coordinator
from .Server import Server
from .ServerAction import ServerAction
from .ServerController import ServerController, is_valid_server_name
from .ServerDataStore import ServerDataStore
from .ServerDelegate import ServerDelegate
from .ServerSettings import SETTINGS_FIELDS, ServerSettings
from .ServerStartup import ServerStartup
from .ServerStatus import ServerStatus
from .validate_server_settings import validate_server_settings

__all__ = [
    "SETTINGS_FIELDS",
    "Coordinator",
    "Server",
    "ServerAction",
    "ServerController",
    "ServerDataStore",
    "ServerDelegate",
    "ServerSettings",
    "ServerStartup",
    "ServerStatus",
    "is_valid_server_name",
    "validate_server_settings",
]
