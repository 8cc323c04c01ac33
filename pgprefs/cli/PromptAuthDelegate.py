"""Asks for the administrator password on the terminal."""

import click
import typer

from pgprefs.api.auth import AuthDelegate, Credential, Rights


class PromptAuthDelegate(AuthDelegate):
    """Hidden-input password prompt on stderr. An empty answer or Ctrl-C cancels."""

    def authorize(self, rights: Rights, reason: str) -> Credential | None:
        try:
            secret = typer.prompt(
                f"Administrator password ({reason})",
                hide_input=True,
                default="",
                show_default=False,
                err=True,
            )
        except (click.exceptions.Abort, EOFError):
            return None
        if not secret:
            return None
        return Credential(rights, secret=secret)
