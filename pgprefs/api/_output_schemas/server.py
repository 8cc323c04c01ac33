"""Output schemas for server commands."""

from typing import Any

from pydantic import Field

from ._base import BaseOutputSchema


class ServerListOutput(BaseOutputSchema):
    """Output schema for server list command."""

    servers: list[dict[str, Any]] = Field(..., description="Saved and discovered servers with their status")
    count: int = Field(..., description="Number of servers")


class ServerActionOutput(BaseOutputSchema):
    """Output schema for status, start, stop, create and delete commands."""

    action: str = Field(..., description="Action that was run")
    name: str = Field(..., description="Requested server name")
    succeeded: bool = Field(..., description="Whether the action succeeded")
    server: dict[str, Any] = Field(..., description="Server after the action, empty dict if not found")


class ServerAddOutput(BaseOutputSchema):
    """Output schema for server add command."""

    added: bool = Field(..., description="Whether the server was saved")
    server: dict[str, Any] = Field(..., description="Saved server, empty dict if not added")
    invalid: dict[str, str] = Field(..., description="Invalid fields and the reason, empty if valid")


class ServerSearchOutput(BaseOutputSchema):
    """Output schema for server search command."""

    installed: list[dict[str, Any]] = Field(..., description="Installations found in the usual locations")
    started: list[dict[str, Any]] = Field(..., description="Running or loaded servers not created by pgprefs")
