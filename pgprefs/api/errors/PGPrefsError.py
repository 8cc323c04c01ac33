"""Base class for every error raised by pgprefs."""


class PGPrefsError(Exception):
    """Root of the pgprefs error hierarchy."""
