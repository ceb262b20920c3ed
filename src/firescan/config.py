from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from firescan.errors import ConfigError

CONFIG_ENV_VAR = "CONFIG_FILE"
DEFAULT_CONFIG_PATH = "config.yaml"

DEFAULT_BATCH_SIZE = 25
DEFAULT_PORT = 8080


class LoggingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO")
    file: str | None = Field(
        default=None, description="Optional log file; rotated when it reaches max_size_mb."
    )
    max_size_mb: int = Field(
        default=10, ge=1, description="Max size of a log file in MB before rolling."
    )
    backup_count: int = Field(default=5, ge=1, description="Number of log archives to keep.")

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {value!r}")
        return level


class ViewerConfig(BaseModel):
    """Settings read from config.yaml.

    batch_size and port fall back to their defaults when absent or non-positive.
    """

    model_config = ConfigDict(frozen=True)

    project_id: str
    credentials_file: str | None = Field(
        default=None,
        description="Service account key file; application default credentials when omitted.",
    )
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE)
    port: int = Field(default=DEFAULT_PORT)
    host: str = Field(default="0.0.0.0")
    collections: tuple[str, ...] = Field(
        default=(), description="Collection names listed on the index page, in order."
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("batch_size", "port", mode="before")
    @classmethod
    def _null_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return DEFAULT_BATCH_SIZE if info.field_name == "batch_size" else DEFAULT_PORT
        return value

    @field_validator("batch_size")
    @classmethod
    def _default_batch_size(cls, value: int) -> int:
        return value if value > 0 else DEFAULT_BATCH_SIZE

    @field_validator("port")
    @classmethod
    def _default_port(cls, value: int) -> int:
        return value if value > 0 else DEFAULT_PORT

    @field_validator("collections", mode="before")
    @classmethod
    def _null_collections(cls, value: Any) -> Any:
        return () if value is None else value

    @field_validator("credentials_file")
    @classmethod
    def _blank_credentials(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()


def resolve_config_path(environ: dict[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ
    raw = (env.get(CONFIG_ENV_VAR) or "").strip()
    return Path(raw or DEFAULT_CONFIG_PATH)


def _read_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def load_config(path: Path | str) -> ViewerConfig:
    """Load and validate the YAML config at ``path``.

    Raises ConfigError when the file cannot be read, is not valid YAML, is not a
    mapping, or fails validation.
    """

    path = Path(path)
    try:
        raw = _read_yaml(path)
    except OSError as exc:
        raise ConfigError(f"reading config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"parsing config file {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"parsing config file {path}: top level must be a mapping")

    try:
        return ViewerConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"invalid config file {path}: {exc}") from exc
