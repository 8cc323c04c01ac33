"""Plain-dict view of a server for command output."""

from typing import Any

from .Server import Server


def _describe_server(server: Server) -> dict[str, Any]:
    return {
        "name": server.name,
        "label": server.daemon_name,
        "status": server.status.value,
        "pid": server.pid if server.pid is not None else -1,
        "external": server.external,
        "dirty": server.dirty,
        "for_all_users": server.daemon_for_all_users,
        "daemon_file": str(server.daemon_file),
        "daemon_log": str(server.daemon_log),
        "error": server.error or "",
        "settings": server.properties,
    }
