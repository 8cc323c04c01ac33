"""User module - OS account lookup."""

from .User import User

__all__ = ["User"]
