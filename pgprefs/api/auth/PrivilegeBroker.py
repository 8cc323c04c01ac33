"""Obtains, caches and invalidates the session's elevated credential."""

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..errors import AuthorizationError, UserCancelledError
from .AuthDelegate import AuthDelegate
from .Credential import Credential
from .Rights import Rights

if TYPE_CHECKING:
    from ..server.Coordinator import Coordinator

logger = logging.getLogger(__name__)


class PrivilegeBroker:
    """Holds at most one live credential per session.

    ``authorize`` blocks its calling thread while the delegate prompts, so a
    background action can escalate inline. Prompts are serialised: callers that
    arrive while a prompt is open wait for it and then reuse its credential.
    """

    def __init__(
        self,
        delegate: AuthDelegate,
        verifier: Callable[[Credential], bool] | None = None,
        coordinator: "Coordinator | None" = None,
    ):
        self._delegate = delegate
        self._verifier = verifier
        self._coordinator = coordinator
        self._credential: Credential | None = None
        self._lock = threading.Lock()

    @property
    def credential(self) -> Credential | None:
        """The cached credential if it is still valid."""
        credential = self._credential
        if credential is not None and credential.valid:
            return credential
        return None

    def is_authorized(self, rights: Rights) -> bool:
        """True if the cached credential already satisfies ``rights`` (never prompts)."""
        return rights.authorized(self.credential)

    def authorize(self, rights: Rights, reason: str) -> Credential:
        """Return a credential granting ``rights``, prompting only if needed.

        Raises:
            UserCancelledError: The user dismissed the prompt
            AuthorizationError: The credential is insufficient or fails verification
            RuntimeError: Called on the coordination context
        """
        if self._coordinator is not None and self._coordinator.in_context():
            raise RuntimeError("authorize() would block the coordination context")

        with self._lock:
            cached = self.credential
            if rights.authorized(cached):
                return cached  # type: ignore[return-value]

            logger.info("Requesting authorization (%s)", reason)
            credential = self._delegate.authorize(rights, reason)
            if credential is None:
                raise UserCancelledError()
            if not rights.authorized(credential):
                raise AuthorizationError(
                    f"Credential does not grant required rights: {sorted(rights.names - credential.rights.names)}"
                )
            if self._verifier is not None and not self._verifier(credential):
                credential.invalidate()
                raise AuthorizationError("Authentication failed")

            if cached is not None and cached is not credential:
                cached.invalidate()
            self._credential = credential
            return credential

    def invalidate(self, error: AuthorizationError | None = None) -> None:
        """Drop the cached credential so the next ``authorize`` prompts again.

        With an error, only stale-credential errors drop the cache; a refusal
        for a right the credential never had leaves it in place.
        """
        if error is not None and not error.stale:
            return
        with self._lock:
            credential = self._credential
            self._credential = None
        if credential is not None:
            logger.info("Dropping cached credential")
            credential.invalidate()
            self._delegate.deauthorize()
