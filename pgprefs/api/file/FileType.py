"""What a path refers to."""

from enum import Enum


class FileType(Enum):
    NONE = "none"
    FILE = "file"
    DIR = "dir"
