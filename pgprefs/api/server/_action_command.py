"""Shared body of the commands that run one lifecycle action."""

from collections.abc import Iterator

from .._output_schemas import ServerActionOutput
from ..auth.AuthDelegate import AuthDelegate
from ..config.PGPrefsConfig import PGPrefsConfig
from ..errors import NotFoundError, PGPrefsError
from ..StageResult import StageResult
from ._describe_server import _describe_server
from ._open_controller import _open_controller
from .ServerAction import ServerAction

_VERBS = {
    ServerAction.CHECK_STATUS: "Checking",
    ServerAction.START: "Starting",
    ServerAction.STOP: "Stopping",
    ServerAction.DELETE: "Deleting",
    ServerAction.CREATE: "Writing descriptor for",
}


def _action_command(
    action: ServerAction,
    name: str,
    auth_delegate: AuthDelegate | None = None,
    keep_file: bool = False,
) -> StageResult:
    verb = _VERBS[action]

    def do_work(result_obj: StageResult) -> Iterator[tuple[float, str]]:
        """Find the server by name, run the action and wait for it.

        Yields: (progress_percent: float, message: str) tuples
        """
        yield (0.1, "Loading configuration...")
        try:
            config = PGPrefsConfig.load()
            with _open_controller(config, auth_delegate) as controller:
                yield (0.3, "Finding server...")
                controller.refresh_servers()
                server = controller.server_with_name(name)
                if server is None:
                    raise NotFoundError(f"No server named {name!r}")

                yield (0.5, f"{verb} {server.name}...")
                succeeded = controller.run_action(action, server, keep_file=keep_file).result()

            yield (1.0, "Complete")
            if succeeded:
                result_obj.result = f"{server.name}: {server.status.value}"
            else:
                result_obj.result = f"{action.value} {server.name} failed: {server.error}"
            result_obj.output = ServerActionOutput(
                errors=[server.error] if server.error else [],
                warnings=[],
                action=action.value,
                name=name,
                succeeded=succeeded,
                server=_describe_server(server),
            ).model_dump(mode="python")
            result_obj.success = succeeded
        except PGPrefsError as e:
            yield (1.0, "Complete")
            result_obj.result = f"Error: {e}"
            result_obj.output = ServerActionOutput(
                errors=[str(e)],
                warnings=[],
                action=action.value,
                name=name,
                succeeded=False,
                server={},
            ).model_dump(mode="python")
            result_obj.success = False

    return StageResult(
        announce=f"{verb} server {name}...",
        progress_callback=do_work,
    )
