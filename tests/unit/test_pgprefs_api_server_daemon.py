"""Unit tests for conversion between servers and launchd descriptors."""

import itertools
from pathlib import Path

import pytest

from pgprefs.api.errors import ValidationError
from pgprefs.api.process import RunningProcess
from pgprefs.api.server import Server, ServerSettings, ServerStartup
from pgprefs.api.server._daemon import _daemon_from_server, _option, _settings_from_args
from pgprefs.api.server._process import _process_matches
from pgprefs.api.user.User import User

pytestmark = pytest.mark.server


class TestDaemonFromServer:
    def test_manual_user_server(self, controller, pgprefs_home):
        settings = ServerSettings(bin_directory="/usr/local/bin", data_directory="/usr/local/pgsql/data", port="5432")
        server = controller.store.add_server("pg1", settings)
        daemon = controller.daemon_from_server(server)
        log = str(pgprefs_home / "Library" / "Logs" / "PostgreSQL" / "pg1.log")
        assert daemon == {
            "Label": "org.postgresql.preferences.pg1",
            "ProgramArguments": ["/usr/local/bin/postgres", "-D", "/usr/local/pgsql/data", "-p", "5432"],
            "WorkingDirectory": "/usr/local/bin",
            "RunAtLoad": True,
            "KeepAlive": {"SuccessfulExit": False},
            "StandardOutPath": log,
            "StandardErrorPath": log,
            "Disabled": True,
            "PGPrefsSettingsPaths": {
                "bin_directory": "/usr/local/bin",
                "data_directory": "/usr/local/pgsql/data",
                "log_file": "",
            },
        }

    def test_at_login_with_user(self, controller):
        settings = ServerSettings("postgres", "/b", "/d", startup=ServerStartup.AT_LOGIN)
        daemon = _daemon_from_server(controller.store.add_server("pg1", settings))
        assert daemon["UserName"] == "postgres"
        assert daemon["LimitLoadToSessionType"] == "Aqua"
        assert "Disabled" not in daemon
        assert daemon["ProgramArguments"] == ["/b/postgres", "-D", "/d"]

    def test_at_boot(self, controller):
        daemon = _daemon_from_server(controller.store.add_server("pg1", ServerSettings(startup=ServerStartup.AT_BOOT)))
        assert "Disabled" not in daemon
        assert "LimitLoadToSessionType" not in daemon
        assert daemon["StandardOutPath"] == "/Library/Logs/PostgreSQL/pg1.log"

    def test_home_relative_paths_are_expanded(self, controller, pgprefs_home):
        settings = ServerSettings(bin_directory="~/pg/bin", data_directory="~/pgdata", log_file="~/pg1.log")
        daemon = _daemon_from_server(controller.store.add_server("pg1", settings))
        assert daemon["ProgramArguments"] == [f"{pgprefs_home}/pg/bin/postgres", "-D", f"{pgprefs_home}/pgdata"]
        assert daemon["WorkingDirectory"] == f"{pgprefs_home}/pg/bin"
        assert daemon["StandardOutPath"] == f"{pgprefs_home}/pg1.log"
        assert daemon["PGPrefsSettingsPaths"]["data_directory"] == "~/pgdata"


class TestRoundTrip:
    @pytest.mark.parametrize(
        "startup, username, port, log_file, directories",
        list(
            itertools.product(
                list(ServerStartup),
                ["", "current", "postgres"],
                ["", "5433"],
                ["", "/var/log/custom.log", "~/pg1.log", "default"],
                [("/opt/pg/bin", "/opt/pg/data"), ("~/pg/bin/", "~/pgdata")],
            )
        ),
    )
    def test_server_from_daemon_restores_settings(self, controller, startup, username, port, log_file, directories):
        """settings(server_from_daemon(daemon_from_server(s))) == settings(s) for saved servers."""
        settings = ServerSettings(
            username={"current": User.current().username, "postgres": "postgres"}.get(username, ""),
            bin_directory=directories[0],
            data_directory=directories[1],
            port=port,
            startup=startup,
        )
        if log_file == "default":
            settings.log_file = str(Server("pg1").default_log_for(settings))
        else:
            settings.log_file = log_file
        server = controller.store.add_server("pg1", settings)
        restored = controller.server_from_daemon(controller.daemon_from_server(server))
        assert restored.settings == server.settings
        assert restored.name == "pg1"
        assert restored.external is False
        assert restored.dirty is False

    def test_unknown_label_is_external(self, controller):
        daemon = {"Label": "homebrew.mxcl.postgresql@16", "ProgramArguments": ["/opt/homebrew/bin/postgres", "-D", "/x"]}
        server = controller.server_from_daemon(daemon, file=Path("/Library/LaunchDaemons/homebrew.mxcl.postgresql@16.plist"))
        assert server.external
        assert server.domain == "homebrew.mxcl"
        assert server.daemon_loaded_for_all_users is True
        assert server.settings.bin_directory == "/opt/homebrew/bin"
        assert server.settings.startup is ServerStartup.AT_BOOT

    def test_pgdata_from_environment(self, controller):
        daemon = {
            "Label": "com.example.pg",
            "ProgramArguments": ["/usr/bin/postgres"],
            "EnvironmentVariables": {"PGDATA": "/srv/pg"},
        }
        assert controller.server_from_daemon(daemon, root=False).settings.data_directory == "/srv/pg"

    def test_pid_is_carried(self, controller):
        server = controller.server_from_daemon({"Label": "com.example.pg", "PID": 55})
        assert server.pid == 55

    def test_label_required(self, controller):
        with pytest.raises(ValidationError):
            controller.server_from_daemon({"ProgramArguments": []})


class TestCommandLines:
    def test_option_forms(self):
        assert _option(["-D", "/a", "-p", "1"], "-D") == "/a"
        assert _option(["-D/b"], "-D") == "/b"
        assert _option(["-p", "1"], "-D") == ""

    def test_settings_from_args(self):
        settings = _settings_from_args(["/usr/lib/postgresql/16/bin/postgres", "-D", "/var/lib/pg", "-p", "5433"])
        assert settings.bin_directory == "/usr/lib/postgresql/16/bin"
        assert settings.data_directory == "/var/lib/pg"
        assert settings.port == "5433"

    def test_process_matches(self):
        settings = ServerSettings(bin_directory="/opt/pg/bin", data_directory="/opt/pg/data")
        match = RunningProcess(1, 1, "pg", "postgres", ["/opt/pg/bin/postgres", "-D", "/opt/pg/data/"])
        relative = RunningProcess(2, 1, "pg", "postgres", ["postgres", "-D", "/opt/pg/data"])
        other_bin = RunningProcess(3, 1, "pg", "postgres", ["/usr/bin/postgres", "-D", "/opt/pg/data"])
        other_data = RunningProcess(4, 1, "pg", "postgres", ["/opt/pg/bin/postgres", "-D", "/elsewhere"])
        assert _process_matches(settings, match)
        assert _process_matches(settings, relative)
        assert not _process_matches(settings, other_bin)
        assert not _process_matches(settings, other_data)
        assert not _process_matches(ServerSettings(), match)
