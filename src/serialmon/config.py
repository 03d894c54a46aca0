"""Runtime settings loaded from an optional TOML file and the environment."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from serialmon.exceptions import ConfigError
from serialmon.models import DEFAULT_BAUD_RATE
from serialmon.utils.logging import get_logger

logger = get_logger(__name__)

ENV_PREFIX = "SERIALMON_"
DEFAULT_CONTEXT_PATH = Path.home() / ".serialmon" / "context.json"


class MonitorSettings(BaseModel):
    """Settings for a serial monitor session."""

    default_baud_rate: int = Field(default=DEFAULT_BAUD_RATE, description="Baud rate of a fresh session")
    line_ending: str = Field(default="\r\n", description="Appended to every outgoing message")
    encoding: str = Field(default="utf-8", description="Text encoding for sent and received data")
    read_timeout: float = Field(default=0.1, description="Reader thread poll timeout in seconds")
    write_timeout: float = Field(default=1.0, description="Serial write timeout in seconds")
    context_path: Path = Field(default=DEFAULT_CONTEXT_PATH, description="Device context JSON file")
    log_level: str = "INFO"
    json_logs: bool = False

    @field_validator("default_baud_rate")
    @classmethod
    def _positive_baud_rate(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("default_baud_rate must be positive")
        return v

    @field_validator("read_timeout", "write_timeout")
    @classmethod
    def _non_negative_timeout(cls, v: float) -> float:
        if v < 0:
            raise ValueError("timeouts must not be negative")
        return v


def _load_toml(path: Path) -> dict:
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        logger.warning("config_file_not_found", path=str(path))
        return {}
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse config file {path}", detail=str(exc)) from exc
    return data.get("serialmon", {})


def _env_overrides(environ: dict[str, str]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for name in MonitorSettings.model_fields:
        key = ENV_PREFIX + name.upper()
        if key in environ:
            overrides[name] = environ[key]
    return overrides


def load_settings(path: str | Path | None = None, environ: dict[str, str] | None = None) -> MonitorSettings:
    """Build settings from a TOML file (``[serialmon]`` table) and env overrides.

    Environment variables take precedence over the file, e.g.
    ``SERIALMON_DEFAULT_BAUD_RATE=115200``.

    Raises:
        ConfigError: If the file cannot be parsed or a value is invalid.
    """
    values: dict = {}
    if path is not None:
        values.update(_load_toml(Path(path)))
    values.update(_env_overrides(dict(os.environ) if environ is None else environ))

    try:
        settings = MonitorSettings.model_validate(values)
    except ValidationError as exc:
        raise ConfigError("Invalid serialmon settings", detail=str(exc)) from exc

    logger.debug("settings_loaded", source=str(path) if path else "defaults")
    return settings
