from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from contextor.config import DEFAULT_MAX_FILE_SIZE
from contextor.exceptions import ConfigFileError

ENV_FILE = find_dotenv(usecwd=True)
ENV_PREFIX = "CONTEXTOR_"
ENV_FIELDS = ("max_file_size", "log_file", "log_level", "max_workers")

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseModel):
    """Configuration settings for a contextor run."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    root: Path = Field(default_factory=Path.cwd, description="Folder to scan.")
    max_file_size: int = Field(
        default=DEFAULT_MAX_FILE_SIZE,
        gt=0,
        description="Files above this many bytes are replaced by a size placeholder.",
    )
    output: Path | None = Field(default=None, description="Output file; stdout when unset.")
    preview: bool = Field(default=False, description="Print the collapsed preview to stderr.")
    log_file: str = Field(default="", description="Log file path.")
    log_level: LogLevel = Field(default="INFO", description="Minimum log level.")
    max_workers: int | None = Field(default=None, gt=0, description="Reader pool size.")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:  # noqa: ANN401
        return value.upper() if isinstance(value, str) else value


def env_overrides(env_file: str | None = None) -> dict[str, str]:
    """Collect `CONTEXTOR_*` settings from a `.env` file and the process environment.

    Process environment variables win over the `.env` file.

    Args:
        env_file (str | None): the dotenv file to read; defaults to the one found from cwd

    Returns:
        dict[str, str]: field name to raw value, only for variables that are set
    """
    path = ENV_FILE if env_file is None else env_file
    values: dict[str, str | None] = dict(dotenv_values(path)) if path else {}
    values.update(os.environ)
    out: dict[str, str] = {}
    for name in ENV_FIELDS:
        raw = values.get(f"{ENV_PREFIX}{name.upper()}")
        if raw:
            out[name] = raw
    return out


def load_config_file(path: Path) -> dict[str, Any]:
    """Load settings from a YAML mapping whose keys are Settings field names.

    Args:
        path (Path): the YAML file to read

    Raises:
        ConfigFileError: if the file cannot be read, is not valid YAML, or is not a mapping

    Returns:
        dict[str, Any]: the raw settings values
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigFileError(path=path, reason=str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError(path=path, reason="top-level value must be a mapping")
    return data


def load_settings(
    overrides: dict[str, Any] | None = None,
    *,
    config_file: Path | None = None,
    env_file: str | None = None,
) -> Settings:
    """Build Settings from defaults, environment, an optional YAML file and overrides.

    Later sources win: environment, then the YAML file, then `overrides` (usually
    command line values; None values are ignored).

    Raises:
        ConfigFileError: if the YAML file is invalid or holds unknown/invalid values
        ValidationError: if an environment or override value is invalid
    """
    values: dict[str, Any] = dict(env_overrides(env_file))
    from_file: set[str] = set()
    if config_file is not None:
        file_values = load_config_file(config_file)
        values.update(file_values)
        from_file = set(file_values)
    cli_values = {k: v for k, v in (overrides or {}).items() if v is not None}
    values.update(cli_values)
    from_file -= set(cli_values)
    try:
        return Settings(**values)
    except ValidationError as e:
        failing = {err["loc"][0] for err in e.errors() if err["loc"]}
        if config_file is None or not failing & from_file:
            raise
        raise ConfigFileError(path=config_file, reason=str(e)) from e
