"""API module for pgprefs.

The classes here are the single source of truth for the CLI and for any GUI
front end that drives the server lifecycle controller.
"""

__all__ = []
