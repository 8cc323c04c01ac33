"""Auth module - privilege broker and credentials."""

from .AuthDelegate import AuthDelegate
from .Credential import Credential
from .PrivilegeBroker import PrivilegeBroker
from .Rights import ADMIN_RIGHT, ADMIN_RIGHTS, Rights

__all__ = ["ADMIN_RIGHT", "ADMIN_RIGHTS", "AuthDelegate", "Credential", "PrivilegeBroker", "Rights"]
