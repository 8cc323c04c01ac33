"""Server Typer app factory."""

import typer

from pgprefs.api.server.cmd_add import cmd_add
from pgprefs.api.server.cmd_create import cmd_create
from pgprefs.api.server.cmd_delete import cmd_delete
from pgprefs.api.server.cmd_list import cmd_list
from pgprefs.api.server.cmd_search import cmd_search
from pgprefs.api.server.cmd_start import cmd_start
from pgprefs.api.server.cmd_status import cmd_status
from pgprefs.api.server.cmd_stop import cmd_stop
from pgprefs.cli._handle_stage_result import _handle_stage_result
from pgprefs.cli.PromptAuthDelegate import PromptAuthDelegate


def server() -> typer.Typer:
    """Create and configure the server Typer app."""
    app = typer.Typer(
        name="server",
        help="PostgreSQL server lifecycle",
        pretty_exceptions_show_locals=False,
        pretty_exceptions_enable=False,
        context_settings={"help_option_names": ["-h", "--help"]},
        invoke_without_command=True,
    )

    @app.callback(invoke_without_command=True)
    def callback(ctx: typer.Context) -> None:
        """Server operations - shows available commands."""
        if ctx.invoked_subcommand is None:
            typer.echo(ctx.get_help(), err=True)
            raise typer.Exit()

    @app.command(name="list")
    def list_cmd() -> None:
        """List saved and discovered servers."""
        _handle_stage_result(cmd_list)(auth_delegate=PromptAuthDelegate())

    @app.command(name="status")
    def status_cmd(name: str = typer.Argument(..., help="Server name or launchd label")) -> None:
        """Check whether a server is running."""
        _handle_stage_result(cmd_status)(name, auth_delegate=PromptAuthDelegate())

    @app.command(name="start")
    def start_cmd(name: str = typer.Argument(..., help="Server name")) -> None:
        """Start a server."""
        _handle_stage_result(cmd_start)(name, auth_delegate=PromptAuthDelegate())

    @app.command(name="stop")
    def stop_cmd(name: str = typer.Argument(..., help="Server name or launchd label")) -> None:
        """Stop a server."""
        _handle_stage_result(cmd_stop)(name, auth_delegate=PromptAuthDelegate())

    @app.command(name="create")
    def create_cmd(name: str = typer.Argument(..., help="Server name")) -> None:
        """Write a server's launchd descriptor without starting it."""
        _handle_stage_result(cmd_create)(name, auth_delegate=PromptAuthDelegate())

    @app.command(name="delete")
    def delete_cmd(
        name: str = typer.Argument(..., help="Server name"),
        keep_file: bool = typer.Option(False, "--keep-file", help="Leave the descriptor file on disk"),
    ) -> None:
        """Stop a server and remove it."""
        _handle_stage_result(cmd_delete)(name, keep_file=keep_file, auth_delegate=PromptAuthDelegate())

    @app.command(name="add")
    def add_cmd(
        name: str = typer.Argument(..., help="Server name"),
        username: str = typer.Option("", "--username", help="Account the server runs as (blank = you)"),
        bin_dir: str = typer.Option("", "--bin-dir", help="Directory containing the postgres binary"),
        data_dir: str = typer.Option("", "--data-dir", help="Data directory"),
        log_file: str = typer.Option("", "--log-file", help="Log file (blank = default location)"),
        port: str = typer.Option("", "--port", help="Port (blank = 5432)"),
        startup: str = typer.Option("Manual", "--startup", help="Manual, AtBoot or AtLogin"),
    ) -> None:
        """Save a new server definition."""
        _handle_stage_result(cmd_add)(
            name,
            username=username,
            bin_directory=bin_dir,
            data_directory=data_dir,
            log_file=log_file,
            port=port,
            startup=startup,
        )

    @app.command(name="search")
    def search_cmd() -> None:
        """Find PostgreSQL installations and unmanaged running servers."""
        _handle_stage_result(cmd_search)(auth_delegate=PromptAuthDelegate())

    return app
