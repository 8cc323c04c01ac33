"""pgprefs - lifecycle controller for local PostgreSQL servers supervised by launchd."""

__version__ = "0.1.0"
