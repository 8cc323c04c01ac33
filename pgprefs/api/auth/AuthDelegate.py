"""Interface implemented by whatever presents authorization prompts."""

from abc import ABC, abstractmethod

from .Credential import Credential
from .Rights import Rights


class AuthDelegate(ABC):
    """Presents the authorization prompt on behalf of the privilege broker.

    ``authorize`` is called from a background thread and may block until the
    user responds. A GUI delegate marshals the prompt to its own UI thread.
    """

    @abstractmethod
    def authorize(self, rights: Rights, reason: str) -> Credential | None:
        """Prompt the user and return a credential, or None if cancelled.

        Args:
            rights: Rights the credential must grant
            reason: Opaque description of why, e.g. "start: server pg1"
        """

    def deauthorize(self) -> None:
        """Called after the broker drops its cached credential."""
