"""launchd module - service manager adapter."""

from .Launchd import Launchd
from .UnitScope import UnitScope

__all__ = ["Launchd", "UnitScope"]
