"""Unit tests for pgprefs.api.config (PGPrefsConfig, get_home_dir, expand_path)."""

import json
from pathlib import Path

import pytest

from pgprefs.api.config.expand_path import expand_path
from pgprefs.api.config.get_home_dir import get_home_dir
from pgprefs.api.config.PGPrefsConfig import PGPrefsConfig
from pgprefs.api.errors import ConfigError

pytestmark = pytest.mark.config


class TestGetHomeDir:
    def test_pgprefs_home_wins(self, pgprefs_home):
        assert get_home_dir() == (pgprefs_home / ".pgprefs").resolve()
        assert get_home_dir("servers.json").name == "servers.json"

    def test_falls_back_to_home(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PGPREFS_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert get_home_dir() == tmp_path / ".pgprefs"


class TestExpandPath:
    def test_tilde_uses_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        assert expand_path("~/Library/LaunchAgents") == tmp_path / "Library" / "LaunchAgents"
        assert expand_path("~") == tmp_path

    def test_absolute_path_unchanged(self):
        assert expand_path("/usr/local/pgsql") == Path("/usr/local/pgsql")


class TestPGPrefsConfig:
    def test_missing_file_gives_defaults(self, pgprefs_home):
        config = PGPrefsConfig.load()
        assert config == PGPrefsConfig()
        assert config.domain == "org.postgresql.preferences"
        assert config.store_path == get_home_dir("servers.json")

    def test_save_and_load(self, pgprefs_home):
        config = PGPrefsConfig(domain="com.example.pg", start_poll_attempts=3)
        config.save()
        assert not PGPrefsConfig.get_config_path().with_suffix(".json.tmp").exists()
        assert PGPrefsConfig.load() == config

    def test_invalid_json(self, pgprefs_home):
        path = PGPrefsConfig.get_config_path()
        path.parent.mkdir(parents=True)
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            PGPrefsConfig.load()

    def test_bad_domain(self, pgprefs_home):
        path = PGPrefsConfig.get_config_path()
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"domain": "nodots"}))
        with pytest.raises(ConfigError, match="domain"):
            PGPrefsConfig.load()

    def test_unknown_key_rejected(self, pgprefs_home):
        path = PGPrefsConfig.get_config_path()
        path.parent.mkdir(parents=True)
        path.write_text(json.dumps({"mongo": {}}))
        with pytest.raises(ConfigError):
            PGPrefsConfig.load()

    def test_poll_attempts_must_be_positive(self):
        with pytest.raises(ValueError):
            PGPrefsConfig(start_poll_attempts=0)
