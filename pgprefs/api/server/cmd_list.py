"""Server list command - saved and discovered servers with their status."""

from collections.abc import Iterator

from .._output_schemas import ServerListOutput
from ..auth.AuthDelegate import AuthDelegate
from ..config.PGPrefsConfig import PGPrefsConfig
from ..errors import PGPrefsError
from ..StageResult import StageResult
from ._describe_server import _describe_server
from ._open_controller import _open_controller
from .ServerAction import ServerAction


def cmd_list(auth_delegate: AuthDelegate | None = None) -> StageResult:
    """List servers, checking the status of each one that needs no prompt."""

    def do_work(result_obj: StageResult) -> Iterator[tuple[float, str]]:
        yield (0.1, "Loading configuration...")
        warnings: list[str] = []
        try:
            config = PGPrefsConfig.load()
            with _open_controller(config, auth_delegate) as controller:
                yield (0.3, "Loading servers...")
                servers = controller.refresh_servers()

                yield (0.6, "Checking status...")
                futures = [
                    controller.run_action(ServerAction.CHECK_STATUS, s)
                    for s in servers
                    if controller.should_check_status(s)
                ]
                for future in futures:
                    future.result()
                for server in servers:
                    if not controller.should_check_status(server):
                        warnings.append(f"{server.name}: status needs administrator authorization")

            yield (1.0, "Complete")
            result_obj.result = f"Found {len(servers)} server(s)"
            result_obj.output = ServerListOutput(
                errors=[],
                warnings=warnings,
                servers=[_describe_server(s) for s in servers],
                count=len(servers),
            ).model_dump(mode="python")
            result_obj.success = True
        except PGPrefsError as e:
            yield (1.0, "Complete")
            result_obj.result = f"Error listing servers: {e}"
            result_obj.output = ServerListOutput(
                errors=[str(e)],
                warnings=warnings,
                servers=[],
                count=0,
            ).model_dump(mode="python")
            result_obj.success = False

    return StageResult(
        announce="Listing servers...",
        progress_callback=do_work,
    )
