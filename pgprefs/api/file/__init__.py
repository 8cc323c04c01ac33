"""File module - filesystem access with optional privileges."""

from .FileAccess import FileAccess
from .FileType import FileType

__all__ = ["FileAccess", "FileType"]
