"""Service configuration.

Settings are read from a flat TOML file and may be overridden field by
field with ``WARBLER_<FIELD>`` environment variables, e.g.::

    # ~/.config/warbler/config.toml
    engine_binary = "/opt/whisper.cpp/build/bin/whisper-cli"
    models_dir = "/srv/models"
    language = "en"
    engine_timeout_s = 600

    $ WARBLER_PORT=8080 warbler serve
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from warbler.domain.constants import (
    DEFAULT_ENGINE_BINARY,
    DEFAULT_LANGUAGE,
    DEFAULT_MODEL_NAME,
    DEFAULT_MODELS_DIR,
)

__all__ = [
    "AppConfig",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "load_config",
]

CONFIG_ENV_VAR = "WARBLER_CONFIG"
ENV_PREFIX = "WARBLER_"
DEFAULT_CONFIG_PATH = Path("~/.config/warbler/config.toml")


class AppConfig(BaseModel):
    """Settings for the pipeline, the engine and the HTTP server."""

    model_config = ConfigDict(extra="forbid")

    engine_binary: Path = Path(DEFAULT_ENGINE_BINARY)
    models_dir: Path = Path(DEFAULT_MODELS_DIR)
    default_model: str = DEFAULT_MODEL_NAME
    language: str = DEFAULT_LANGUAGE
    engine_timeout_s: float | None = Field(default=None, gt=0)
    host: str = "0.0.0.0"
    port: int = Field(default=6000, ge=1, le=65535)
    cors_origins: list[str] = Field(default_factory=list)
    create_models_dir: bool = True
    log_level: str = "INFO"

    @field_validator("engine_binary", "models_dir", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Any:
        if isinstance(value, str):
            if not value.strip():
                raise ValueError("path must not be empty")
            return Path(value).expanduser()
        if isinstance(value, Path):
            return value.expanduser()
        return value

    @field_validator("default_model")
    @classmethod
    def _plain_filename(cls, value: str) -> str:
        value = value.strip()
        if not value or value in (".", "..") or Path(value).name != value or "\\" in value:
            raise ValueError("default_model must be a filename inside models_dir")
        return value

    @field_validator("language")
    @classmethod
    def _non_empty_language(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("language must be set")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        # Env overrides arrive as a comma-separated string
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value


def _env_overrides(environ: Mapping[str, str]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for name in AppConfig.model_fields:
        value = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None:
            overrides[name] = value
    return overrides


def load_config(path: Path | None = None, *, environ: Mapping[str, str] | None = None) -> AppConfig:
    """Load configuration from TOML plus environment overrides.

    Resolution order for the file: ``path``, then ``$WARBLER_CONFIG``,
    then ``~/.config/warbler/config.toml``. A missing file is not an
    error and yields the defaults.

    Raises:
        pydantic.ValidationError: If a value is invalid
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    env = os.environ if environ is None else environ
    if path is None:
        env_path = env.get(CONFIG_ENV_VAR)
        path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH
    path = path.expanduser()

    data: dict[str, Any] = {}
    if path.is_file():
        with path.open("rb") as fh:
            data = tomllib.load(fh)

    data.update(_env_overrides(env))
    return AppConfig(**data)
