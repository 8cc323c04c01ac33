"""Process module - subprocess execution and process table lookups."""

from .ProcessRunner import ProcessRunner
from .RunningProcess import RunningProcess

__all__ = ["ProcessRunner", "RunningProcess"]
