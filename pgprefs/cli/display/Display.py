"""Display interface for command results."""

from abc import ABC, abstractmethod
from typing import Any


class Display(ABC):
    @abstractmethod
    def status(self, message: str, **kwargs) -> None: ...

    @abstractmethod
    def success(self, message: str, **kwargs) -> None: ...

    @abstractmethod
    def error(self, message: str, **kwargs) -> None: ...

    @abstractmethod
    def warning(self, message: str, **kwargs) -> None: ...

    @abstractmethod
    def info(self, message: str, **kwargs) -> None: ...

    @abstractmethod
    def json_output(self, data: Any, **kwargs) -> None:
        """Print command output to stdout in the requested format."""
