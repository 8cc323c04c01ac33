"""Unit test fixtures.

The fakes (launchctl, process table, auth prompt) live in tests/conftest.py.
This file holds server settings helpers.
"""

from pathlib import Path

import pytest

from pgprefs.api.server import ServerSettings


@pytest.fixture
def server_dirs(tmp_path: Path) -> tuple[Path, Path]:
    """A fake installation: bin/postgres and an initialised data directory."""
    bin_dir = tmp_path / "pgsql" / "bin"
    bin_dir.mkdir(parents=True)
    (bin_dir / "postgres").write_text("#!/bin/sh\n")
    data_dir = tmp_path / "pgsql" / "data"
    data_dir.mkdir()
    (data_dir / "PG_VERSION").write_text("16\n")
    return bin_dir, data_dir


@pytest.fixture
def valid_settings(server_dirs) -> ServerSettings:
    bin_dir, data_dir = server_dirs
    return ServerSettings(bin_directory=str(bin_dir), data_directory=str(data_dir), port="5432")
