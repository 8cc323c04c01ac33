"""Opaque elevated-privilege credential."""

from .Rights import Rights


class Credential:
    """Proof of elevated privilege obtained from the user.

    Only the privilege broker creates and invalidates credentials; everything
    else receives one by reference and hands it straight to the process runner.
    The secret is the administrator password fed to ``sudo -S`` and is never
    logged or shown in ``repr``.
    """

    def __init__(self, rights: Rights, secret: str | None = None):
        self._rights = rights
        self._secret = secret
        self._valid = True

    @property
    def rights(self) -> Rights:
        return self._rights

    @property
    def secret(self) -> str | None:
        return self._secret

    @property
    def valid(self) -> bool:
        return self._valid

    def invalidate(self) -> None:
        """Mark the credential unusable and forget the secret."""
        self._valid = False
        self._secret = None

    def __repr__(self) -> str:
        state = "valid" if self._valid else "invalid"
        return f"Credential(rights={sorted(self._rights.names)}, {state})"
