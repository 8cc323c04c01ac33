"""Server search command - installations and unmanaged running servers."""

from collections.abc import Iterator

from .._output_schemas import ServerSearchOutput
from ..auth.AuthDelegate import AuthDelegate
from ..config.PGPrefsConfig import PGPrefsConfig
from ..errors import PGPrefsError
from ..StageResult import StageResult
from ._describe_server import _describe_server
from ._open_controller import _open_controller


def cmd_search(auth_delegate: AuthDelegate | None = None) -> StageResult:
    """Look for PostgreSQL installations and servers running outside pgprefs."""

    def do_work(result_obj: StageResult) -> Iterator[tuple[float, str]]:
        yield (0.1, "Loading configuration...")
        try:
            config = PGPrefsConfig.load()
            with _open_controller(config, auth_delegate) as controller:
                yield (0.3, "Scanning install locations...")
                search = controller.search
                installed = search.scan_installed()

                yield (0.6, "Scanning launchd and running processes...")
                started = search.find_started(controller.store.load_servers())

            yield (1.0, "Complete")
            result_obj.result = f"Found {len(installed)} installation(s) and {len(started)} unmanaged server(s)"
            result_obj.output = ServerSearchOutput(
                errors=[],
                warnings=[],
                installed=[_describe_server(s) for s in installed],
                started=[_describe_server(s) for s in started],
            ).model_dump(mode="python")
            result_obj.success = True
        except PGPrefsError as e:
            yield (1.0, "Complete")
            result_obj.result = f"Error searching for servers: {e}"
            result_obj.output = ServerSearchOutput(
                errors=[str(e)],
                warnings=[],
                installed=[],
                started=[],
            ).model_dump(mode="python")
            result_obj.success = False

    return StageResult(
        announce="Searching for PostgreSQL servers...",
        progress_callback=do_work,
    )
