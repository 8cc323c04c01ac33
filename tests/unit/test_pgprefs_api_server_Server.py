"""Unit tests for pgprefs.api.server.Server and ServerSettings."""

import random
from pathlib import Path

import pytest

from pgprefs.api.server import SETTINGS_FIELDS, Server, ServerSettings, ServerStartup, ServerStatus

pytestmark = pytest.mark.server


class TestServerSettings:
    def test_equality_ignores_invalid_markers(self):
        a = ServerSettings(port="5432")
        b = ServerSettings(port="5432")
        b.mark_invalid("port", "bad")
        assert a == b
        assert not b.valid
        assert b.invalid_reason("port") == "bad"

    def test_copy_is_independent(self):
        original = ServerSettings(port="1")
        original.mark_invalid("port", "x")
        copied = original.copy()
        copied.port = "2"
        copied.set_valid()
        assert original.port == "1"
        assert original.invalid == {"port": "x"}

    def test_startup_parsed_on_construction(self):
        assert ServerSettings(startup="AtBoot").startup is ServerStartup.AT_BOOT

    def test_has_different_user(self, as_postgres_user):
        assert not ServerSettings().has_different_user
        assert not ServerSettings(username="postgres").has_different_user
        assert ServerSettings(username="someone-else").has_different_user


class TestDirtyInvariant:
    def test_new_server_is_clean(self):
        assert Server("pg1", settings=ServerSettings(port="5432")).dirty is False

    def test_dirty_tracks_difference(self):
        """dirty == (settings != dirty_settings) across any sequence of edits."""
        rng = random.Random(7)
        server = Server("pg1")
        for _ in range(200):
            edited = server.dirty_settings.copy()
            field = rng.choice([*SETTINGS_FIELDS, "startup"])
            if field == "startup":
                edited.startup = rng.choice(list(ServerStartup))
            else:
                setattr(edited, field, rng.choice(["", "a", "b"]))
            if rng.random() < 0.5:
                server.dirty_settings = edited
            else:
                server.settings = edited
            assert server.dirty == (server.settings != server.dirty_settings)

    def test_setters_copy(self):
        settings = ServerSettings(port="1")
        server = Server("pg1", settings=settings)
        settings.port = "2"
        assert server.settings.port == "1"
        assert server.dirty is False

    def test_settings_cannot_be_none(self):
        server = Server("pg1")
        with pytest.raises(ValueError):
            server.settings = None  # type: ignore[assignment]
        with pytest.raises(ValueError):
            server.dirty_settings = None  # type: ignore[assignment]


class TestNamingAndPaths:
    def test_daemon_name(self):
        assert Server("pg1").daemon_name == "org.postgresql.preferences.pg1"
        external = Server("homebrew.mxcl.postgresql", "homebrew.mxcl", external=True)
        assert external.daemon_name == "homebrew.mxcl.postgresql"
        assert external.short_name == "postgresql"

    def test_user_descriptor(self, pgprefs_home):
        server = Server("pg1", settings=ServerSettings(startup=ServerStartup.MANUAL))
        assert server.daemon_file == pgprefs_home / "Library" / "LaunchAgents" / "org.postgresql.preferences.pg1.plist"
        assert server.daemon_log == pgprefs_home / "Library" / "Logs" / "PostgreSQL" / "pg1.log"
        assert server.daemon_for_all_users is False

    def test_boot_descriptor(self, pgprefs_home):
        server = Server("pg1", settings=ServerSettings(startup=ServerStartup.AT_BOOT))
        assert server.daemon_file == Path("/Library/LaunchDaemons/org.postgresql.preferences.pg1.plist")
        assert server.daemon_log == Path("/Library/Logs/PostgreSQL/pg1.log")
        assert server.daemon_for_all_users is True

    def test_other_user_at_login(self, pgprefs_home, as_postgres_user):
        settings = ServerSettings(username="someone-else", startup=ServerStartup.AT_LOGIN)
        server = Server("pg1", settings=settings)
        assert server.daemon_file == Path("/Library/LaunchAgents/org.postgresql.preferences.pg1.plist")

    def test_scope_follows_dirty_settings(self, pgprefs_home):
        server = Server("pg1")
        edited = server.dirty_settings.copy()
        edited.startup = ServerStartup.AT_BOOT
        server.dirty_settings = edited
        assert server.daemon_for_all_users is True
        assert server.for_all_users(server.settings) is False

    def test_file_existence(self, pgprefs_home):
        server = Server("pg1")
        assert server.daemon_file_exists is False
        assert server.daemon_log_exists is False
        server.daemon_file.parent.mkdir(parents=True)
        server.daemon_file.write_text("<plist/>")
        server.daemon_log.parent.mkdir(parents=True)
        server.daemon_log.write_text("ready\n")
        assert server.daemon_file_exists is True
        assert server.daemon_log_exists is True

    def test_custom_log_file(self, pgprefs_home):
        server = Server("pg1", settings=ServerSettings(log_file="/var/log/pg1.log"))
        assert server.daemon_log == Path("/var/log/pg1.log")

    def test_external_file_and_scope(self, tmp_path):
        file = tmp_path / "homebrew.mxcl.postgresql.plist"
        server = Server("homebrew.mxcl.postgresql", "homebrew.mxcl", external=True, daemon_file=file)
        assert server.daemon_file == file
        assert server.for_all_users(ServerSettings(startup=ServerStartup.AT_BOOT)) is False
        server.daemon_loaded_for_all_users = True
        assert server.for_all_users(ServerSettings()) is True

    def test_candidates_cover_all_locations(self, pgprefs_home):
        candidates = Server("pg1").daemon_file_candidates()
        assert [c.parent for c in candidates] == [
            Path("/Library/LaunchDaemons"),
            Path("/Library/LaunchAgents"),
            pgprefs_home / "Library" / "LaunchAgents",
        ]


class TestCapabilities:
    def test_internal_server(self):
        server = Server("pg1")
        assert server.editable and server.actionable and server.saveable

    def test_external_server(self):
        server = Server("x", "", external=True)
        assert not server.editable
        assert not server.saveable
        assert not server.actionable
        server.settings = ServerSettings(bin_directory="/b", data_directory="/d")
        assert server.actionable

    def test_status_shortcuts(self):
        server = Server("pg1")
        server.status = ServerStatus.RETRYING
        assert server.processing and server.started


class TestProperties:
    def test_round_trip(self):
        settings = ServerSettings("postgres", "/b", "/d", "/l.log", "5433", ServerStartup.AT_LOGIN)
        server = Server("pg1", settings=settings)
        props = server.properties
        assert props["startup"] == "AtLogin"
        assert props["binDirectory"] == "/b"
        restored = Server.from_properties(props)
        assert restored.name == "pg1"
        assert restored.domain == server.domain
        assert restored.settings == settings
        assert restored.uid != server.uid

    def test_name_override(self):
        assert Server.from_properties(Server("pg1").properties, name="pg2").name == "pg2"

    def test_missing_key(self):
        props = Server("pg1").properties
        del props["dataDirectory"]
        assert not Server.has_all_keys(props)
        with pytest.raises(KeyError):
            Server.from_properties(props)

    def test_null_values_become_blank(self):
        props = {**Server("pg1").properties, "port": None, "startup": 1}
        restored = Server.from_properties(props)
        assert restored.settings.port == ""
        assert restored.settings.startup is ServerStartup.AT_BOOT
