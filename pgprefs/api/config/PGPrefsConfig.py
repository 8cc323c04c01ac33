"""Top-level pgprefs configuration."""

import json
from contextlib import suppress
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ...constants import DEFAULT_DOMAIN
from ..errors import ConfigError
from .get_home_dir import get_home_dir


class PGPrefsConfig(BaseModel):
    """Tunables for the server lifecycle controller."""

    model_config = ConfigDict(extra="forbid")

    domain: str = Field(DEFAULT_DOMAIN, description="Reverse-DNS prefix for descriptor labels")
    store_file: str = Field("servers.json", description="Server store file, relative to the pgprefs home")
    start_poll_attempts: int = Field(10, ge=1, description="Liveness checks after loading a unit")
    start_poll_interval_secs: float = Field(0.5, gt=0, description="Delay between liveness checks")
    stop_poll_attempts: int = Field(10, ge=1, description="Checks that a stopped server has exited")
    stop_poll_interval_secs: float = Field(0.3, gt=0, description="Delay between exit checks")
    command_timeout_secs: float | None = Field(None, gt=0, description="Subprocess deadline (None = no deadline)")
    retry_patterns: list[str] = Field(
        default_factory=lambda: [
            "could not bind",
            "already in use",
            'lock file "postmaster.pid" already exists',
        ],
        description="Log substrings that make a failed start worth one retry",
    )
    max_workers: int = Field(4, ge=1, description="Background threads running server actions")

    @field_validator("domain")
    @classmethod
    def validate_domain(cls, v: str) -> str:
        parts = v.split(".")
        if len(parts) < 2 or not all(parts):
            raise ValueError(f"domain must be in reverse DNS format (e.g., 'org.example.app'), got: {v!r}")
        return v

    @classmethod
    def get_config_path(cls) -> Path:
        """Get path to config file based on PGPREFS_HOME or default to ~/.pgprefs."""
        return get_home_dir("config.json")

    @property
    def store_path(self) -> Path:
        return get_home_dir(self.store_file)

    @classmethod
    def load(cls) -> "PGPrefsConfig":
        """Load and validate config from file.

        A missing file yields the defaults; every field has one.

        Raises:
            ConfigError: If the file holds invalid JSON or fails validation
        """
        path = cls.get_config_path()

        if not path.exists():
            return cls()

        try:
            with path.open() as fh:
                raw = json.load(fh)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in config file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e

        try:
            return cls(**raw)
        except ValidationError as e:
            error_list = e.errors() or [{"msg": str(e), "loc": (), "type": "value_error", "input": None}]
            first = error_list[0]
            error_msg = first.get("msg", str(e))
            loc = first.get("loc", ())
            field = ".".join(str(x) for x in loc) if isinstance(loc, (list, tuple)) else ""
            detail = f"{field}: {error_msg}" if field else error_msg
            raise ConfigError(f"Configuration validation error: {detail}") from e

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    def save(self) -> None:
        """Save the current configuration to a JSON file.

        Uses atomic write (write to temp file, then rename) to prevent corruption.
        """
        path = self.get_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_path.open("w") as fh:
                json.dump(self.to_dict(), fh, indent=4)
            temp_path.replace(path)
        except OSError as e:
            with suppress(OSError):
                if temp_path.exists():
                    temp_path.unlink()
            raise ConfigError(f"Failed to save config: {e}") from e
