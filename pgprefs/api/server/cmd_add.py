"""Server add command - saves a new server definition."""

from collections.abc import Iterator

from .._output_schemas import ServerAddOutput
from ..config.PGPrefsConfig import PGPrefsConfig
from ..errors import PGPrefsError
from ..StageResult import StageResult
from ._describe_server import _describe_server
from .ServerController import is_valid_server_name
from .ServerDataStore import ServerDataStore
from .ServerSettings import ServerSettings
from .ServerStartup import ServerStartup
from .validate_server_settings import validate_server_settings


def cmd_add(
    name: str,
    username: str = "",
    bin_directory: str = "",
    data_directory: str = "",
    log_file: str = "",
    port: str = "",
    startup: str = "Manual",
) -> StageResult:
    """Save a new server. A taken name gets a " (1)", " (2)"... suffix.

    Nothing is written to launchd; use create or start for that.
    """

    def do_work(result_obj: StageResult) -> Iterator[tuple[float, str]]:
        settings = ServerSettings(
            username=username,
            bin_directory=bin_directory,
            data_directory=data_directory,
            log_file=log_file,
            port=port,
            startup=ServerStartup.parse(startup),
        )

        yield (0.2, "Validating settings...")
        validate_server_settings(settings)
        invalid = dict(settings.invalid)
        if not is_valid_server_name(name):
            invalid["name"] = "Must not be blank, contain '/' or start with '.'"
        if invalid:
            yield (1.0, "Complete")
            result_obj.result = "Invalid settings: " + ", ".join(f"{k} ({v})" for k, v in invalid.items())
            result_obj.output = ServerAddOutput(
                errors=[f"{k}: {v}" for k, v in invalid.items()],
                warnings=[],
                added=False,
                server={},
                invalid=invalid,
            ).model_dump(mode="python")
            result_obj.success = False
            return

        yield (0.5, "Saving server...")
        try:
            config = PGPrefsConfig.load()
            store = ServerDataStore(config.store_path, config.domain)
            store.load_servers()
            server = store.add_server(name.strip(), settings)
            store.synchronize()
        except PGPrefsError as e:
            yield (1.0, "Complete")
            result_obj.result = f"Error saving server: {e}"
            result_obj.output = ServerAddOutput(
                errors=[str(e)],
                warnings=[],
                added=False,
                server={},
                invalid={},
            ).model_dump(mode="python")
            result_obj.success = False
            return

        yield (1.0, "Complete")
        warnings = [f"Name {name!r} was taken, saved as {server.name!r}"] if server.name != name.strip() else []
        result_obj.result = f"Added server {server.name}"
        result_obj.output = ServerAddOutput(
            errors=[],
            warnings=warnings,
            added=True,
            server=_describe_server(server),
            invalid={},
        ).model_dump(mode="python")
        result_obj.success = True

    return StageResult(
        announce=f"Adding server {name}...",
        progress_callback=do_work,
    )
