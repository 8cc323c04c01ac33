"""Recognise sudo's authentication failure messages."""

_SUDO_AUTH_FAILURES = (
    "incorrect password",
    "a password is required",
    "sorry, try again",
    "no password was provided",
)


def _sudo_failure(stderr: str) -> bool:
    """True if sudo rejected the password rather than the command failing."""
    text = stderr.lower()
    return any(marker in text for marker in _SUDO_AUTH_FAILURES)
