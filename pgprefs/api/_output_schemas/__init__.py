"""Pydantic output schemas for the cmd_* functions."""

from ._base import BaseOutputSchema
from .server import ServerActionOutput, ServerAddOutput, ServerListOutput, ServerSearchOutput

__all__ = [
    "BaseOutputSchema",
    "ServerActionOutput",
    "ServerAddOutput",
    "ServerListOutput",
    "ServerSearchOutput",
]
